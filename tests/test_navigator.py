"""Tests for the navigator state machine."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, Optional, Sequence

import pytest

from catalog.builder import build_manifest
from catalog.errors import NavigationError
from core.settings import merge_defaults
from navigator.navigator import Navigator, SelectOutcome, source_from_settings
from navigator.sources import DescriptorSource, FilesystemSource, HttpSource, ManifestSource
from navigator.state import ItemKind, Mode, ViewKind

from conftest import write_tree


class _HookedSource(DescriptorSource):
    """Delegates to another source, with hooks around listings and reads."""

    def __init__(self, inner: DescriptorSource) -> None:
        self.inner = inner
        self.on_listing: Optional[Callable[[], None]] = None
        self.read_gate: Optional[asyncio.Event] = None

    async def load_listing(self, parts: Sequence[str]):
        if self.on_listing is not None:
            hook, self.on_listing = self.on_listing, None
            hook()
        return await self.inner.load_listing(parts)

    async def load_catalog(self):
        return await self.inner.load_catalog()

    async def read_file(self, parts: Sequence[str], name: str):
        if self.read_gate is not None:
            await self.read_gate.wait()
        return await self.inner.read_file(parts, name)


def _labels(view) -> list:
    return [item.label for item in view.items]


def test_root_menu_items_follow_access_level(sample_root: Path) -> None:
    async def scenario():
        nav = Navigator(FilesystemSource(sample_root))
        locked_view = await nav.refresh()
        nav.submit_code("code2")
        open_view = await nav.refresh()
        return locked_view, open_view

    locked_view, open_view = asyncio.run(scenario())

    assert locked_view.kind is ViewKind.FOLDERS
    assert _labels(locked_view) == ["Notes/", "SEARCH"]
    assert _labels(open_view) == ["Notes/", "Secret/", "Vault/", "SEARCH"]
    assert open_view.items[1].badges == ["H9"]


def test_descend_and_return_restore_selection(sample_root: Path) -> None:
    async def scenario():
        nav = Navigator(FilesystemSource(sample_root))
        nav.submit_code("code2")
        await nav.refresh()
        await nav.move(1)
        before = nav.state.selected_index
        outcome = await nav.select()
        inside = await nav.refresh()
        theme_inside = nav.state.theme
        await nav.move(1)
        back = await nav.back()
        after = await nav.refresh()
        return nav, before, outcome, inside, theme_inside, back, after

    nav, before, outcome, inside, theme_inside, back, after = asyncio.run(scenario())

    assert before == 1
    assert outcome is SelectOutcome.DESCEND
    assert inside.kind is ViewKind.FILES
    assert inside.path == ["Secret"]
    assert _labels(inside) == ["Log.txt", "track.mp3"]
    assert theme_inside == "purple"
    assert back is SelectOutcome.RETURN
    assert after.selected_index == before
    assert nav.state.theme == "green"
    assert nav.state.history["Secret"] == 1


def test_descend_uses_folder_theme(sample_root: Path) -> None:
    async def scenario():
        nav = Navigator(FilesystemSource(sample_root))
        await nav.refresh()
        await nav.select()
        return nav

    nav = asyncio.run(scenario())

    assert nav.state.path_stack == ["Notes"]
    assert nav.state.theme == "blue"


def test_file_menu_selection_clamps(sample_root: Path) -> None:
    async def scenario():
        nav = Navigator(FilesystemSource(sample_root))
        await nav.refresh()
        await nav.select()
        low = await nav.move(-5)
        high = await nav.move(10)
        return low, high

    low, high = asyncio.run(scenario())

    assert high.item_count == 4
    assert low.selected_index == 0
    assert high.selected_index == 3
    assert high.items[2].locked is True
    assert high.items[2].badges == ["L10"]


def test_clearing_access_clamps_selection(sample_root: Path) -> None:
    async def scenario():
        nav = Navigator(FilesystemSource(sample_root))
        nav.submit_code("code6")
        await nav.refresh()
        await nav.move(3)
        prompt = nav.toggle_access()
        view = await nav.refresh()
        return nav, prompt, view

    nav, prompt, view = asyncio.run(scenario())

    assert prompt is False
    assert nav.state.special_access_level == 0
    assert view.item_count == 2
    assert view.selected_index == 1
    assert view.selected.kind is ItemKind.SEARCH


def test_access_codes_and_indicator(sample_root: Path) -> None:
    nav = Navigator(FilesystemSource(sample_root))

    assert nav.toggle_access() is True
    assert nav.submit_code("bogus") is False
    assert nav.access_indicator is None
    assert nav.submit_code(" Code3 ") is True
    assert nav.access_indicator == "Level 10 Access"
    nav.clear_access()
    assert nav.state.special_access_level == 0


def test_search_flow_and_file_view(sample_root: Path) -> None:
    async def scenario():
        nav = Navigator(FilesystemSource(sample_root))
        await nav.refresh()
        await nav.move(1)
        prompt = await nav.select()
        results = await nav.search("LOG")
        await nav.move(1)
        opened = await nav.select()
        content = await nav.load_file_content()
        closed = await nav.back()
        still_search = await nav.refresh()
        exited = await nav.back()
        root = await nav.refresh()
        return nav, prompt, results, opened, content, closed, still_search, exited, root

    nav, prompt, results, opened, content, closed, still_search, exited, root = asyncio.run(scenario())

    assert prompt is SelectOutcome.PROMPT_SEARCH
    assert results.kind is ViewKind.SEARCH_RESULTS
    # Secret/Log.txt stays hidden at level 0
    assert _labels(results) == ["RETURN", "Log.txt"]
    assert opened is SelectOutcome.OPEN_FILE
    assert content.text == "hello log"
    assert content.header == "Notes/"
    assert closed is SelectOutcome.CLOSE_FILE
    assert still_search.kind is ViewKind.SEARCH_RESULTS
    assert still_search.selected_index == 1
    assert exited is SelectOutcome.EXIT_SEARCH
    assert root.kind is ViewKind.FOLDERS
    assert nav.state.mode is Mode.MENU
    assert nav.state.search_results == []


def test_search_return_item_exits(sample_root: Path) -> None:
    async def scenario():
        nav = Navigator(FilesystemSource(sample_root))
        await nav.search("nothing-matches")
        outcome = await nav.select()
        return nav, outcome

    nav, outcome = asyncio.run(scenario())

    assert outcome is SelectOutcome.EXIT_SEARCH
    assert nav.state.mode is Mode.MENU


def test_search_outside_root_is_rejected(sample_root: Path) -> None:
    async def scenario():
        nav = Navigator(FilesystemSource(sample_root))
        await nav.refresh()
        await nav.select()
        await nav.search("log")

    with pytest.raises(NavigationError):
        asyncio.run(scenario())


def test_stale_view_is_recomputed(sample_root: Path) -> None:
    async def scenario():
        source = _HookedSource(FilesystemSource(sample_root))
        nav = Navigator(source)
        source.on_listing = lambda: nav.submit_code("code2")
        return await nav.refresh()

    view = asyncio.run(scenario())

    assert view.special_access_level == 2
    assert view.item_count == 4


def test_stale_file_content_is_discarded(sample_root: Path) -> None:
    async def scenario():
        source = _HookedSource(FilesystemSource(sample_root))
        nav = Navigator(source)
        await nav.refresh()
        await nav.select()
        await nav.select()
        source.read_gate = asyncio.Event()
        pending = asyncio.create_task(nav.load_file_content())
        await asyncio.sleep(0)
        nav.close_file()
        source.read_gate.set()
        return await pending

    assert asyncio.run(scenario()) is None


def test_reset_keeps_history_and_access(sample_root: Path) -> None:
    async def scenario():
        nav = Navigator(FilesystemSource(sample_root))
        nav.submit_code("code1")
        await nav.refresh()
        await nav.select()
        nav.reset()
        return nav

    nav = asyncio.run(scenario())

    assert nav.state.path_stack == []
    assert nav.state.selected_index == 0
    assert nav.state.special_access_level == 1
    assert "" in nav.state.history


def test_source_from_settings(sample_root: Path) -> None:
    working_dir = sample_root.parent
    settings = merge_defaults({"navigator": {"source": "manifest"}})

    fallback = source_from_settings(settings, working_dir)
    build_manifest(sample_root, working_dir / "db-manifest.json")
    manifest = source_from_settings(settings, working_dir)
    http = source_from_settings(
        merge_defaults({"navigator": {"source": "http", "base_url": "http://example.test"}}), working_dir
    )

    assert isinstance(fallback, FilesystemSource)
    assert isinstance(manifest, ManifestSource)
    assert isinstance(http, HttpSource)
    with pytest.raises(ValueError):
        source_from_settings(merge_defaults({"navigator": {"source": "http"}}), working_dir)


def test_from_settings_applies_themes_and_prewarm(sample_root: Path) -> None:
    settings = merge_defaults({"navigator": {"default_theme": "cyan", "prewarm_index": False}})

    async def scenario():
        nav = Navigator.from_settings(settings, sample_root.parent)
        view = await nav.start()
        return nav, view

    nav, view = asyncio.run(scenario())

    assert view.theme == "cyan"
    assert nav.index.built is False
    assert nav.prewarm_index is False


@pytest.fixture
def nested_root(tmp_path: Path) -> Path:
    return write_tree(
        tmp_path / "db",
        {
            "folders.json": ["Music", "Books"],
            "Music/": {"files.json": ["song.mp3"]},
            "Books/": {
                "folders.json": ["Fiction", "Poetry:hidden1", "Zines:red"],
                "Fiction/": {"files.json": ["novel.txt"]},
                "Poetry/": {"files.json": ["verse.txt"]},
                "Zines/": {"files.json": ["issue1.md"]},
            },
        },
    )


def test_nested_folder_menu_has_return_and_no_search(nested_root: Path) -> None:
    async def scenario():
        nav = Navigator(FilesystemSource(nested_root))
        await nav.refresh()
        await nav.move(1)
        await nav.select()
        books = await nav.refresh()
        await nav.move(2)
        descended = await nav.select()
        theme_inside = nav.state.theme
        backed = await nav.back()
        restored = await nav.refresh()
        await nav.move(-2)
        returned = await nav.select()
        root = await nav.refresh()
        return nav, books, descended, theme_inside, backed, restored, returned, root

    nav, books, descended, theme_inside, backed, restored, returned, root = asyncio.run(scenario())

    assert books.kind is ViewKind.FOLDERS
    assert _labels(books) == ["RETURN", "Fiction/", "Zines/"]
    assert books.item_count == 1 + 2
    assert books.items[0].kind is ItemKind.RETURN
    assert descended is SelectOutcome.DESCEND
    assert theme_inside == "red"
    assert backed is SelectOutcome.RETURN
    assert restored.path == ["Books"]
    assert restored.selected_index == 2
    assert returned is SelectOutcome.RETURN
    assert root.path == []
    assert root.selected_index == 1
    assert _labels(root) == ["Music/", "Books/", "SEARCH"]
    assert nav.state.history["Books"] == 0
    assert nav.state.theme == "green"


def test_start_prewarms_search_index(nested_root: Path) -> None:
    async def scenario():
        nav = Navigator(FilesystemSource(nested_root))
        await nav.start()
        await nav.index.ensure_built()
        return nav

    nav = asyncio.run(scenario())

    assert nav.index.built
    assert [entry.path for entry in nav.index.entries] == [
        "Music/song.mp3",
        "Books/Fiction/novel.txt",
        "Books/Poetry/verse.txt",
        "Books/Zines/issue1.md",
    ]
