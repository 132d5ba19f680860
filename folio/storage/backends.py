"""
Storage backends — the raw text persistence the document tree sits on.

Paths are slash-joined strings. ``LocalStorage`` maps them onto the
filesystem; ``MemoryStorage`` keeps everything in dictionaries so tests can
run without touching disk.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Dict, List, Protocol, Set

logger = logging.getLogger("folio.storage.backends")


class Storage(Protocol):
    def exists(self, path: str) -> bool:
        ...

    def is_dir(self, path: str) -> bool:
        ...

    def is_file(self, path: str) -> bool:
        ...

    def list_dir(self, path: str) -> List[str]:
        ...

    def read_text(self, path: str) -> str:
        ...

    def write_text(self, path: str, text: str) -> None:
        ...

    def make_dirs(self, path: str) -> None:
        ...

    def remove(self, path: str) -> bool:
        ...

    def move(self, source: str, destination: str) -> None:
        ...


class LocalStorage:
    """Filesystem backend. ``remove`` never deletes a non-empty directory."""

    def exists(self, path: str) -> bool:
        return Path(path).exists()

    def is_dir(self, path: str) -> bool:
        return Path(path).is_dir()

    def is_file(self, path: str) -> bool:
        return Path(path).is_file()

    def list_dir(self, path: str) -> List[str]:
        p = Path(path)
        if not p.is_dir():
            return []
        return sorted(child.name for child in p.iterdir())

    def read_text(self, path: str) -> str:
        return Path(path).read_text(encoding="utf-8")

    def write_text(self, path: str, text: str) -> None:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text, encoding="utf-8")

    def make_dirs(self, path: str) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def remove(self, path: str) -> bool:
        p = Path(path)
        try:
            if p.is_dir():
                p.rmdir()
            elif p.exists():
                p.unlink()
            else:
                return False
        except OSError as e:
            logger.debug(f"Could not remove {p}: {e}")
            return False
        return True

    def move(self, source: str, destination: str) -> None:
        dst = Path(destination)
        if dst.exists():
            raise FileExistsError(destination)
        shutil.move(source, destination)

    def __repr__(self) -> str:
        return "<LocalStorage>"


class MemoryStorage:
    """Dictionary-backed storage with the same semantics as LocalStorage."""

    def __init__(self) -> None:
        self.files: Dict[str, str] = {}
        self.dirs: Set[str] = set()

    @staticmethod
    def _norm(path: str) -> str:
        return "/".join(part for part in path.split("/") if part not in ("", "."))

    def _parents(self, path: str) -> List[str]:
        parts = path.split("/")
        return ["/".join(parts[:i]) for i in range(1, len(parts))]

    def exists(self, path: str) -> bool:
        return self.is_file(path) or self.is_dir(path)

    def is_dir(self, path: str) -> bool:
        return self._norm(path) in self.dirs

    def is_file(self, path: str) -> bool:
        return self._norm(path) in self.files

    def list_dir(self, path: str) -> List[str]:
        base = self._norm(path)
        if base not in self.dirs:
            return []
        prefix = base + "/"
        names = set()
        for key in list(self.files) + list(self.dirs):
            if key.startswith(prefix):
                names.add(key[len(prefix):].split("/")[0])
        return sorted(names)

    def read_text(self, path: str) -> str:
        key = self._norm(path)
        if key not in self.files:
            raise FileNotFoundError(path)
        return self.files[key]

    def write_text(self, path: str, text: str) -> None:
        key = self._norm(path)
        if key in self.dirs:
            raise IsADirectoryError(path)
        self.dirs.update(self._parents(key))
        self.files[key] = text

    def make_dirs(self, path: str) -> None:
        key = self._norm(path)
        if key in self.files:
            raise FileExistsError(path)
        self.dirs.update(self._parents(key))
        self.dirs.add(key)

    def remove(self, path: str) -> bool:
        key = self._norm(path)
        if key in self.files:
            del self.files[key]
            return True
        if key in self.dirs:
            if self.list_dir(key):
                return False
            self.dirs.discard(key)
            return True
        return False

    def move(self, source: str, destination: str) -> None:
        src, dst = self._norm(source), self._norm(destination)
        if self.exists(dst):
            raise FileExistsError(destination)
        if not self.exists(src):
            raise FileNotFoundError(source)

        def _rebase(key: str) -> str:
            return dst + key[len(src):]

        self.files = {
            (_rebase(k) if k == src or k.startswith(src + "/") else k): v
            for k, v in self.files.items()
        }
        self.dirs = {
            _rebase(k) if k == src or k.startswith(src + "/") else k
            for k in self.dirs
        }
        self.dirs.update(self._parents(dst))

    def __repr__(self) -> str:
        return f"<MemoryStorage files={len(self.files)} dirs={len(self.dirs)}>"
