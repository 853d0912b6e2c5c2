"""Tests for the lazily listed filesystem browser."""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from foldtree.core import Command, Key, Resize
from foldtree.filebrowser import NERD_FONT_ICONS, PLAIN_ICONS, FileBrowser


@pytest.fixture
def sample_dir(tmp_path: Path) -> Path:
    """
    alpha/
      inner.txt
    .hidden
    beta.py
    zeta.txt
    """
    (tmp_path / "alpha").mkdir()
    (tmp_path / "alpha" / "inner.txt").write_text("inner")
    (tmp_path / ".hidden").write_text("")
    (tmp_path / "beta.py").write_text("print('hi')\n")
    (tmp_path / "zeta.txt").write_text("z")
    return tmp_path


def _browser(directory: Path, **kwargs) -> FileBrowser:
    browser = FileBrowser(directory, **kwargs)
    browser.update(Resize(80, 20))
    return browser


def _names(nodes) -> list[str]:
    return [n.name for n in nodes]


class TestListing:
    """Tests for directory listing."""

    def test_directories_first_then_by_name(self, sample_dir: Path) -> None:
        browser = _browser(sample_dir)
        assert _names(browser.tree.roots) == ["alpha", ".hidden", "beta.py", "zeta.txt"]

    def test_hide_dotfiles(self, sample_dir: Path) -> None:
        browser = _browser(sample_dir, show_hidden=False)
        assert _names(browser.tree.roots) == ["alpha", "beta.py", "zeta.txt"]

    def test_directories_are_expandable(self, sample_dir: Path) -> None:
        browser = _browser(sample_dir)
        alpha, hidden, *_ = browser.tree.roots
        assert alpha.can_expand is True
        assert hidden.can_expand is False
        assert alpha.payload == sample_dir / "alpha"

    def test_empty_directory(self, tmp_path: Path) -> None:
        browser = _browser(tmp_path)
        assert browser.tree.roots == []
        assert browser.selected_path() is None
        assert browser.view().plain == ""

    def test_not_a_directory(self, sample_dir: Path) -> None:
        with pytest.raises(NotADirectoryError):
            FileBrowser(sample_dir / "zeta.txt")

    def test_populate_missing_directory(self, sample_dir: Path) -> None:
        browser = _browser(sample_dir)
        assert browser.populate(sample_dir / "missing", browser.tree) is False
        assert len(browser.tree.roots) == 4


class TestLazyLoading:
    """Tests for listing subdirectories on first open."""

    def test_listed_on_first_open(self, sample_dir: Path) -> None:
        browser = _browser(sample_dir)
        alpha = browser.tree.roots[0]
        assert alpha.children == []
        browser.update(Key(" "))
        assert alpha.is_open is True
        assert _names(alpha.children) == ["inner.txt"]

    def test_listing_is_cached(self, sample_dir: Path) -> None:
        browser = _browser(sample_dir)
        alpha = browser.tree.roots[0]
        browser.update(Key(" "))
        browser.update(Key(" "))
        (sample_dir / "alpha" / "later.txt").write_text("")
        browser.update(Key(" "))
        assert _names(alpha.children) == ["inner.txt"]

    def test_unreadable_directory_stays_closed(self, sample_dir: Path) -> None:
        browser = _browser(sample_dir)
        alpha = browser.tree.roots[0]
        shutil.rmtree(sample_dir / "alpha")
        browser.update(Key(" "))
        assert alpha.is_open is False
        assert alpha.children == []
        assert browser.tree.focused is alpha


class TestRefresh:
    """Tests for the refresh key."""

    def test_refresh_rereads_parent_directory(self, sample_dir: Path) -> None:
        browser = _browser(sample_dir)
        alpha = browser.tree.roots[0]
        browser.update(Key(" "))
        browser.update(Key("j"))
        assert browser.tree.focused.name == "inner.txt"

        (sample_dir / "alpha" / "new.txt").write_text("")
        assert browser.update(Key("r")) == (browser, None)
        assert browser.tree.focused is alpha
        assert alpha.is_open is False
        assert alpha.children == []

        browser.update(Key(" "))
        assert _names(alpha.children) == ["inner.txt", "new.txt"]

    def test_refresh_at_top_level_rereads_directory(self, sample_dir: Path) -> None:
        browser = _browser(sample_dir)
        (sample_dir / "gamma.txt").write_text("")
        (sample_dir / "zeta.txt").unlink()
        browser.update(Key("r"))
        assert _names(browser.tree.roots) == ["alpha", ".hidden", "beta.py", "gamma.txt"]
        assert browser.tree.focused.name == "alpha"


class TestSelection:
    """Tests for choosing a path and quitting."""

    def test_enter_selects_focused_path(self, sample_dir: Path) -> None:
        browser = _browser(sample_dir)
        browser.update(Key("j"))
        browser.update(Key("j"))
        assert browser.update(Key("enter")) == (browser, Command.QUIT)
        assert browser.result == sample_dir / "beta.py"
        assert browser.view().plain == ""

    def test_enter_on_nested_entry(self, sample_dir: Path) -> None:
        browser = _browser(sample_dir)
        browser.update(Key(" "))
        browser.update(Key("down"))
        browser.update(Key("enter"))
        assert browser.result == sample_dir / "alpha" / "inner.txt"

    def test_quit_without_selection(self, sample_dir: Path) -> None:
        browser = _browser(sample_dir)
        assert browser.update(Key("q")) == (browser, Command.QUIT)
        assert browser.result is None
        assert browser.quitting is True

    def test_navigation_is_passed_to_tree(self, sample_dir: Path) -> None:
        browser = _browser(sample_dir)
        browser.update(Key("G"))
        assert browser.tree.focused.name == "zeta.txt"


class TestIcons:
    """Tests for per-kind icons."""

    def test_plain_icons(self, sample_dir: Path) -> None:
        browser = _browser(sample_dir)
        alpha, hidden, beta, _ = browser.tree.roots
        assert alpha.icon() == PLAIN_ICONS.folder
        assert beta.icon() == PLAIN_ICONS.python
        assert hidden.icon() == PLAIN_ICONS.file

    def test_nerd_font_icons(self, sample_dir: Path) -> None:
        browser = _browser(sample_dir, icons=NERD_FONT_ICONS)
        alpha = browser.tree.roots[0]
        assert alpha.icon() == NERD_FONT_ICONS.folder
        assert browser.view().plain.split("\n")[0] == f"▸{NERD_FONT_ICONS.folder} alpha"
