"""Command-line interface for foldtree: browse a directory, print it as a tree, edit a record list."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from rich.console import Console

from foldtree import __version__
from foldtree.core import NERD_FONT_SYMBOLS, PLAIN_SYMBOLS, Node, Tree, render_full
from foldtree.filebrowser import NERD_FONT_ICONS, PLAIN_ICONS, FileBrowser
from foldtree.itemeditor import UNNAMED, ItemEditor
from foldtree.logging_config import DEFAULT_LOG_FILE, setup_logging

# Directories opened by `foldtree tree` when no depth is given
TREE_DEFAULT_DEPTH = 2


def _expand_to_depth(tree: Tree, nodes: list[Node], depth: int | None, current: int = 0) -> None:
    """Open expandable nodes down to ``depth`` levels (None = no limit)."""
    if depth is not None and current >= depth:
        return
    for node in nodes:
        if node.can_expand:
            tree.expand(node)
            _expand_to_depth(tree, node.children, depth, current + 1)


def _node_to_dict(node: Node) -> dict[str, Any]:
    """Serialize a loaded node and its loaded children (for --json)."""
    return {
        "name": node.name,
        "open": node.is_open,
        "children": [_node_to_dict(c) for c in node.children],
    }


def _browser_for(args: argparse.Namespace) -> FileBrowser | None:
    directory = Path(args.directory).expanduser()
    if not directory.is_dir():
        print(f"Not a directory: {directory}", file=sys.stderr)
        return None
    return FileBrowser(
        directory,
        icons=NERD_FONT_ICONS if args.nerd_font else PLAIN_ICONS,
        symbols=NERD_FONT_SYMBOLS if args.nerd_font else PLAIN_SYMBOLS,
        show_hidden=not args.hide_dotfiles,
    )


def cmd_browse(args: argparse.Namespace) -> int:
    """Pick a path interactively and print it."""
    from foldtree.tui.app import TreeApp

    browser = _browser_for(args)
    if browser is None:
        return 1
    app = TreeApp(browser, title=str(browser.directory))
    result = app.run()
    if result is not None:
        print(result)
    return 0


def cmd_tree(args: argparse.Namespace) -> int:
    """Print a directory as an indented tree."""
    browser = _browser_for(args)
    if browser is None:
        return 1
    tree = browser.tree
    depth = None if args.depth < 0 else args.depth
    _expand_to_depth(tree, tree.roots, depth)

    if args.json:
        print(json.dumps([_node_to_dict(n) for n in tree.roots], indent=2))
    else:
        Console().print(render_full(tree), highlight=False)
    return 0


def _load_records(path: Path) -> list[dict[str, Any]] | None:
    if not path.exists():
        return []
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        print(f"Could not read {path}: {e}", file=sys.stderr)
        return None
    if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
        print(f"Expected a JSON list of objects in {path}", file=sys.stderr)
        return None
    return data


def cmd_edit(args: argparse.Namespace) -> int:
    """Browse a JSON list of records; records added in the session are saved on quit."""
    from foldtree.tui.app import TreeApp

    path = Path(args.file)
    records = _load_records(path)
    if records is None:
        return 1

    editor = ItemEditor(factory=lambda: {"name": UNNAMED}).with_add_entry()
    for record in records:
        editor.add_record(str(record.get("name", UNNAMED)), record)

    TreeApp(editor, title=path.name).run()

    updated = editor.records()
    if updated != records:
        try:
            path.write_text(json.dumps(updated, indent=2) + "\n")
        except OSError as e:
            print(f"Could not write {path}: {e}", file=sys.stderr)
            return 1
        print(f"Saved {len(updated)} record(s) to {path}")
    return 0


def _add_directory_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory to show (default: current directory)",
    )
    parser.add_argument(
        "--nerd-font",
        action="store_true",
        help="Use nerd font icons and chevrons",
    )
    parser.add_argument(
        "--hide-dotfiles",
        action="store_true",
        help="Don't list entries whose name starts with a dot",
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the foldtree CLI."""
    parser = argparse.ArgumentParser(
        prog="foldtree",
        description="Keyboard-driven tree views for the terminal.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--debug",
        action="store_true",
        help=f"Write a debug log (default file: {DEFAULT_LOG_FILE})",
    )
    parser.add_argument(
        "--log-file",
        metavar="FILE",
        default=DEFAULT_LOG_FILE,
        help="Debug log destination (used with --debug)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # foldtree browse
    browse_parser = subparsers.add_parser(
        "browse",
        help="Pick a file or directory interactively",
        description="Browse a directory tree; Enter prints the focused path, q quits.",
    )
    _add_directory_args(browse_parser)
    browse_parser.set_defaults(func=cmd_browse)

    # foldtree tree
    tree_parser = subparsers.add_parser(
        "tree",
        help="Print a directory as a tree",
        description="Print a directory tree without starting the TUI.",
    )
    _add_directory_args(tree_parser)
    tree_parser.add_argument(
        "-d",
        "--depth",
        type=int,
        default=TREE_DEFAULT_DEPTH,
        help=f"Directory levels to open, negative for all (default: {TREE_DEFAULT_DEPTH})",
    )
    tree_parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    tree_parser.set_defaults(func=cmd_tree)

    # foldtree edit
    edit_parser = subparsers.add_parser(
        "edit",
        help="Browse and extend a JSON list of records",
        description="Show records from a JSON file; activate [Add entry] to append one.",
    )
    edit_parser.add_argument("file", help="JSON file holding a list of objects")
    edit_parser.set_defaults(func=cmd_edit)

    args = parser.parse_args(argv)

    try:
        setup_logging(args.debug, args.log_file)
    except OSError as e:
        print(f"Could not open log file: {e}", file=sys.stderr)
        return 1

    # Default to browsing the current directory if no command specified
    if args.command is None:
        return cmd_browse(
            argparse.Namespace(directory=".", nerd_font=False, hide_dotfiles=False)
        )

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
