"""
Confirmation tokens guarding permanent deletion.

A token is an opaque capability compared by identity. Each library owns
its own pair, so a token from one library never authorizes deletion in
another.
"""

from __future__ import annotations

from dataclasses import dataclass, field


class ConfirmationToken:
    """Opaque capability; only the exact instance matches."""

    __slots__ = ("_scope",)

    def __init__(self, scope: str):
        self._scope = scope

    @property
    def scope(self) -> str:
        return self._scope

    def __copy__(self) -> "ConfirmationToken":
        return self

    def __deepcopy__(self, memo) -> "ConfirmationToken":
        return self

    def __reduce__(self):
        raise TypeError("ConfirmationToken cannot be pickled")

    def __repr__(self) -> str:
        return f"<ConfirmationToken scope='{self._scope}' at 0x{id(self):x}>"


@dataclass(frozen=True)
class DeletionTokens:
    """The two independent tokens: one for documents, one for folder trees."""

    document: ConfirmationToken = field(default_factory=lambda: ConfirmationToken("document"))
    folder: ConfirmationToken = field(default_factory=lambda: ConfirmationToken("folder"))
