"""Tests for the build_manifest command."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

import build_manifest


@pytest.fixture(autouse=True)
def _detach_file_logging():
    yield
    logger = logging.getLogger("tagcatalog")
    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler):
            logger.removeHandler(handler)
            handler.close()


def test_missing_root_exits_non_zero(tmp_path: Path, monkeypatch, caplog) -> None:
    monkeypatch.setenv("TAGCATALOG_HOME", str(tmp_path))

    with caplog.at_level(logging.ERROR):
        code = build_manifest.main([])

    assert code == 1
    assert not (tmp_path / "db-manifest.json").exists()
    assert any("db folder not found" in record.getMessage() for record in caplog.records)


def test_build_writes_manifest_and_report(sample_root: Path, monkeypatch, capsys) -> None:
    monkeypatch.setenv("TAGCATALOG_HOME", str(sample_root.parent))

    code = build_manifest.main([])

    out = capsys.readouterr().out
    assert code == 0
    assert "Scanning db folder..." in out
    assert "Total files: 7" in out
    assert "Locked files total: 2" in out
    manifest = json.loads((sample_root.parent / "db-manifest.json").read_text(encoding="utf-8"))
    assert [folder["name"] for folder in manifest["folders"]] == ["Notes", "Secret", "Vault"]
    assert (sample_root.parent / "logs" / "tagcatalog.log.jsonl").exists()
