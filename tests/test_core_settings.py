"""Tests for core.settings helpers."""

from __future__ import annotations

import json
from pathlib import Path

from core.settings import load_settings, merge_defaults


def test_merge_defaults_includes_catalog_blocks() -> None:
    merged = merge_defaults({})

    assert merged["catalog"]["root_dir"] == "db"
    assert merged["catalog"]["manifest_name"] == "db-manifest.json"
    assert merged["catalog"]["tracked_extensions"] == ["txt", "md", "png", "mp3"]
    assert merged["navigator"]["source"] == "filesystem"
    assert merged["navigator"]["hidden_theme"] == "purple"
    assert merged["api"]["lan_only"] is True


def test_load_settings_keeps_overrides(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"version": 0, "navigator": {"default_theme": "cyan"}}), encoding="utf-8")

    loaded = load_settings(tmp_path)

    assert loaded["navigator"]["default_theme"] == "cyan"
    assert loaded["navigator"]["timeout_s"] == 10
    assert loaded["working_dir"] == str(tmp_path)


def test_unknown_keys_are_reported(tmp_path: Path) -> None:
    (tmp_path / "settings.json").write_text(
        json.dumps({"catalog": {"colour": "red"}, "extra": True}), encoding="utf-8"
    )

    load_settings(tmp_path)

    report = json.loads((tmp_path / "logs" / "settings_unknown.json").read_text(encoding="utf-8"))
    assert report["unknown"] == ["catalog.colour", "extra"]
