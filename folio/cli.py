"""
Folio CLI — inspect and edit a library from the shell.

Commands:
- folio tree                     — Print the folder tree
- folio mkdir PATH               — Create a folder (and missing parents)
- folio touch PATH               — Create an empty document
- folio write PATH AUTHOR        — Save new content (--text or --file)
- folio cat PATH                 — Print current content
- folio log PATH                 — Print the edit history
- folio recall PATH ID           — Print a past version (0 = latest)
- folio mv PATH NAME             — Rename a folder or document
- folio burn PATH --yes          — Permanently delete a folder or document
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from folio.engine.config import load_config
from folio.engine.errors import FolioError
from folio.engine.logging import init_logging

logger = logging.getLogger("folio.cli")


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="folio",
        description="Folio — versioned hierarchical document store",
    )
    parser.add_argument("--config", default=None, help="Path to folio.yaml (default: auto-discover)")
    parser.add_argument("--root", default=None, help="Library root directory (default: from config)")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("tree", help="Print the folder tree")

    mkdir_parser = subparsers.add_parser("mkdir", help="Create a folder")
    mkdir_parser.add_argument("path", help="Folder path (e.g., notes/daily)")

    touch_parser = subparsers.add_parser("touch", help="Create an empty document")
    touch_parser.add_argument("path", help="Document path (e.g., notes/daily/monday)")

    write_parser = subparsers.add_parser("write", help="Save new content to a document")
    write_parser.add_argument("path", help="Document path")
    write_parser.add_argument("author", help="Author recorded in the history")
    source = write_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--text", help="Content given inline")
    source.add_argument("--file", help="Read content from this file ('-' for stdin)")
    write_parser.add_argument("--title", help="Also change the document title")

    cat_parser = subparsers.add_parser("cat", help="Print current content")
    cat_parser.add_argument("path", help="Document path")

    log_parser = subparsers.add_parser("log", help="Print the edit history")
    log_parser.add_argument("path", help="Document path")

    recall_parser = subparsers.add_parser("recall", help="Print a past version")
    recall_parser.add_argument("path", help="Document path")
    recall_parser.add_argument("id", type=int, help="Version index, 0 = most recent")

    mv_parser = subparsers.add_parser("mv", help="Rename a folder or document")
    mv_parser.add_argument("path", help="Existing path")
    mv_parser.add_argument("name", help="New name (last segment only)")

    burn_parser = subparsers.add_parser("burn", help="Permanently delete a folder or document")
    burn_parser.add_argument("path", help="Path to delete")
    burn_parser.add_argument("--yes", action="store_true", help="Confirm permanent deletion")

    args = parser.parse_args(argv)

    handlers = {
        "tree": cmd_tree,
        "mkdir": cmd_mkdir,
        "touch": cmd_touch,
        "write": cmd_write,
        "cat": cmd_cat,
        "log": cmd_log,
        "recall": cmd_recall,
        "mv": cmd_mv,
        "burn": cmd_burn,
    }
    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 0

    try:
        return handler(args)
    except FolioError as e:
        logger.debug(e.to_json())
        print(f"[ERROR] {e.message}")
        return 1


def _open_library(args: argparse.Namespace):
    from folio.library import Library

    config = load_config(args.config)
    if config.logging.structured:
        init_logging(config.logging.directory, config.logging.level)
    else:
        logging.basicConfig(level=config.logging.level)
    return Library(args.root, config=config)


def _print_tree(tree: Dict[str, Any], depth: int = 0) -> None:
    print("  " * depth + tree["name"] + "/")
    for branch in tree["branches"]:
        if isinstance(branch, dict):
            _print_tree(branch, depth + 1)
        else:
            print("  " * (depth + 1) + branch)


def cmd_tree(args: argparse.Namespace) -> int:
    _print_tree(_open_library(args).tree)
    return 0


def cmd_mkdir(args: argparse.Namespace) -> int:
    _open_library(args).create_folder(args.path)
    print(f"[OK] Created folder {args.path}")
    return 0


def cmd_touch(args: argparse.Namespace) -> int:
    _open_library(args).create_document(args.path)
    print(f"[OK] Created document {args.path}")
    return 0


def cmd_write(args: argparse.Namespace) -> int:
    if args.text is not None:
        content = args.text
    elif args.file == "-":
        content = sys.stdin.read()
    else:
        content = Path(args.file).read_text(encoding="utf-8")

    library = _open_library(args)
    lease = library.borrow(args.path)
    if lease is None:
        print(f"[ERROR] {args.path} is not a document or is already borrowed")
        return 1
    with lease:
        lease.edit(content, args.author)
        if args.title:
            lease.set_title(args.title)
    print(f"[OK] Saved {args.path} ({len(content)} chars)")
    return 0


def cmd_cat(args: argparse.Namespace) -> int:
    content = _open_library(args).read(args.path)
    print(content if content is not None else "")
    return 0


def cmd_log(args: argparse.Namespace) -> int:
    entries = _open_library(args).history(args.path)
    if not entries:
        print("(no history)")
        return 0
    for index, entry in enumerate(reversed(entries)):
        print(f"{index:>4}  {entry.date.isoformat()}  {entry.change:+6d}  {entry.author}")
    return 0


def cmd_recall(args: argparse.Namespace) -> int:
    recollection = _open_library(args).reminisce(args.path, args.id)
    if recollection is None:
        print(f"[ERROR] No version {args.id} of {args.path}")
        return 1
    print(f"# {recollection.title} — {recollection.author} @ {recollection.date.isoformat()}")
    print(recollection.content if recollection.content is not None else "")
    return 0


def cmd_mv(args: argparse.Namespace) -> int:
    if not _open_library(args).rename(args.path, args.name):
        print(f"[ERROR] {args.path} does not exist")
        return 1
    print(f"[OK] Renamed {args.path} -> {args.name}")
    return 0


def cmd_burn(args: argparse.Namespace) -> int:
    if not args.yes:
        print("[ERROR] Refusing to delete without --yes")
        return 1
    library = _open_library(args)
    library.burn(args.path, library.confirm_burn())
    print(f"[OK] Burned {args.path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
