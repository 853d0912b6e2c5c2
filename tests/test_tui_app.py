"""Tests for the Textual host."""

from __future__ import annotations

import asyncio
from pathlib import Path

from foldtree.core import Tree
from foldtree.filebrowser import FileBrowser
from foldtree.itemeditor import ADD_ENTRY_LABEL, ItemEditor
from foldtree.tui.app import TreeApp, TreeView, key_symbol


class TestKeySymbol:
    """Tests for key_symbol."""

    def test_printable_character(self) -> None:
        assert key_symbol("j", "j") == "j"
        assert key_symbol("G", "G") == "G"
        assert key_symbol("full_stop", ".") == "."

    def test_space_is_a_character(self) -> None:
        assert key_symbol("space", " ") == " "

    def test_named_keys(self) -> None:
        assert key_symbol("enter", "\r") == "enter"
        assert key_symbol("up", None) == "up"
        assert key_symbol("ctrl+c", "\x03") == "ctrl+c"


def _tree(*names: str) -> Tree:
    tree = Tree()
    tree.attach_children(*(tree.new_node(name) for name in names))
    return tree


class TestTreeApp:
    """Drive TreeApp headlessly."""

    def test_resize_reaches_model(self) -> None:
        tree = _tree("a", "b")

        async def run() -> None:
            app = TreeApp(tree)
            async with app.run_test(size=(40, 12)) as pilot:
                await pilot.pause()
                view = app.query_one("#tree_view", TreeView)
                assert tree.initialized is True
                assert tree.width == view.size.width
                assert tree.height == view.size.height

        asyncio.run(run())

    def test_keys_move_focus_and_quit(self) -> None:
        tree = _tree("a", "b", "c")

        async def run() -> TreeApp:
            app = TreeApp(tree)
            async with app.run_test(size=(40, 12)) as pilot:
                await pilot.press("j")
                await pilot.press("down")
                assert tree.focused.name == "c"
                await pilot.press("k")
                assert tree.focused.name == "b"
                await pilot.press("q")
            return app

        app = asyncio.run(run())
        assert app.return_value is None

    def test_space_toggles(self) -> None:
        tree = Tree()
        directory = tree.new_node("dir", children=[tree.new_node("file")])
        tree.attach_children(directory)

        async def run() -> None:
            app = TreeApp(tree)
            async with app.run_test(size=(40, 12)) as pilot:
                await pilot.press("space")
                assert directory.is_open is True
                rendered = app.query_one("#tree_view", TreeView).render()
                assert "file" in rendered.plain

        asyncio.run(run())

    def test_file_browser_returns_selection(self, tmp_path: Path) -> None:
        (tmp_path / "a.txt").write_text("")
        (tmp_path / "b.txt").write_text("")
        browser = FileBrowser(tmp_path)

        async def run() -> TreeApp:
            app = TreeApp(browser, title=str(tmp_path))
            async with app.run_test(size=(40, 12)) as pilot:
                assert app.sub_title == str(tmp_path)
                await pilot.press("j")
                await pilot.press("enter")
            return app

        app = asyncio.run(run())
        assert app.return_value == tmp_path / "b.txt"

    def test_item_editor_add_entry(self) -> None:
        editor = ItemEditor(factory=dict).with_add_entry()

        async def run() -> None:
            app = TreeApp(editor)
            async with app.run_test(size=(60, 12)) as pilot:
                await pilot.pause()
                assert editor.initialized is True
                assert editor.tree.focused.name == ADD_ENTRY_LABEL
                await pilot.press("enter")
                assert editor.records() == [{}]
                await pilot.press("q")

        asyncio.run(run())
