"""Tests for file content gating in the viewer."""

from __future__ import annotations

import asyncio
from pathlib import Path

from catalog.tags import parse_file
from navigator.sources import FilesystemSource
from navigator.viewer import STATUS_DENIED, STATUS_FAILED, STATUS_OK, file_type, load_file_content


def test_file_type_by_extension() -> None:
    assert file_type("cover.PNG") == "image"
    assert file_type("song.mp3") == "audio"
    assert file_type("plan.md") == "md"
    assert file_type("notes.txt") == "txt"
    assert file_type("README") == "txt"


def test_unlocked_text_is_loaded(sample_root: Path) -> None:
    source = FilesystemSource(sample_root)

    content = asyncio.run(load_file_content(source, ["Notes"], parse_file("Log.txt"), 0))

    assert content.status == STATUS_OK
    assert content.text == "hello log"
    assert content.path == "Notes/Log.txt"
    assert content.header == "Notes/"


def test_locked_text_is_denied_without_reading(sample_root: Path) -> None:
    source = FilesystemSource(sample_root)

    content = asyncio.run(load_file_content(source, ["Notes"], parse_file("plan.md:locked3"), 2))

    assert content.status == STATUS_DENIED
    assert content.text is None
    assert content.message == "Access Denied: Level 10 Access Required"
    assert content.required_level == 3


def test_locked_text_opens_with_enough_access(sample_root: Path) -> None:
    source = FilesystemSource(sample_root)

    content = asyncio.run(load_file_content(source, ["Notes"], parse_file("plan.md:locked3"), 3))

    assert content.status == STATUS_OK
    assert content.text == "# plan"
    assert content.file_type == "md"


def test_locked_image_is_blurred(sample_root: Path) -> None:
    source = FilesystemSource(sample_root)

    content = asyncio.run(load_file_content(source, ["Notes"], parse_file("cover.png:locked"), 0))

    assert content.file_type == "image"
    assert content.blurred is True
    assert content.message == "Access Denied: Level 6 Access Required"


def test_locked_audio_is_denied(sample_root: Path) -> None:
    source = FilesystemSource(sample_root)

    content = asyncio.run(load_file_content(source, ["Secret"], parse_file("track.mp3:locked1"), 0))

    assert content.status == STATUS_DENIED


def test_missing_text_reports_failure(sample_root: Path) -> None:
    source = FilesystemSource(sample_root)

    content = asyncio.run(load_file_content(source, ["Notes"], parse_file("gone.txt"), 0))

    assert content.status == STATUS_FAILED
    assert content.message.startswith("Failed to load file")
