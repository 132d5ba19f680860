"""
Catalog — existence index mirroring the folder tree.

Folder names map to nested dicts, document directory names map to True:

    {"notes": {"daily": {"monday": True}, "todo": True}}

The catalog is derived from Folder.snapshot(titles=False) only, so a title
changed on an outstanding lease does not move the document out of it. It
is rebuilt or grafted after structural changes and never edited by hand.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional, Sequence, Union

Table = Dict[str, Any]


class Catalog:
    def __init__(self, tree: Optional[Dict[str, Any]] = None):
        self._table: Table = {}
        if tree is not None:
            self.rebuild(tree)

    @staticmethod
    def tree_to_table(tree: Dict[str, Any]) -> Table:
        """Transform a Folder snapshot into the nested presence mapping."""
        table: Table = {}
        for branch in tree.get("branches", []):
            if isinstance(branch, dict):
                table[branch["name"]] = Catalog.tree_to_table(branch)
            else:
                table[branch] = True
        return table

    def rebuild(self, tree: Dict[str, Any]) -> None:
        self._table = self.tree_to_table(tree)

    def graft(self, segments: Sequence[str], tree: Dict[str, Any]) -> None:
        """
        Replace the mapping at ``segments`` with one built from ``tree``.

        Missing intermediate folders are created; an empty segment list
        rebuilds the whole table.
        """
        if not segments:
            self.rebuild(tree)
            return
        node = self._table
        for segment in segments[:-1]:
            child = node.get(segment)
            if not isinstance(child, dict):
                child = node[segment] = {}
            node = child
        node[segments[-1]] = self.tree_to_table(tree)

    def exists(self, req: Union[str, Sequence[str]]) -> bool:
        """True if the path names a folder or document. Never raises."""
        if isinstance(req, str):
            segments: List[Any] = req.split("/")
        elif isinstance(req, (list, tuple)):
            segments = list(req)
        else:
            return False
        if not segments:
            return False
        node: Any = self._table
        for segment in segments:
            if not isinstance(node, dict) or not isinstance(segment, str):
                return False
            node = node.get(segment)
            if node is None:
                return False
        return True

    def is_document(self, req: Union[str, Sequence[str]]) -> bool:
        if not self.exists(req):
            return False
        segments = req.split("/") if isinstance(req, str) else list(req)
        node: Any = self._table
        for segment in segments:
            node = node[segment]
        return node is True

    def as_dict(self) -> Table:
        return copy.deepcopy(self._table)

    def __repr__(self) -> str:
        return f"<Catalog top-level={len(self._table)}>"
