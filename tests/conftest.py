from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import pytest


def write_tree(root: Path, layout: Dict[str, Any]) -> Path:
    """Materialise a content root from a nested layout.

    Keys ending in ``/`` are directories; ``folders.json``/``files.json`` hold
    descriptor payloads (lists are JSON encoded, strings written verbatim);
    anything else is written as file text.
    """

    root.mkdir(parents=True, exist_ok=True)
    for key, value in layout.items():
        if key.endswith("/"):
            write_tree(root / key.rstrip("/"), value)
        elif isinstance(value, (list, dict)):
            (root / key).write_text(json.dumps(value), encoding="utf-8")
        else:
            (root / key).write_text(str(value), encoding="utf-8")
    return root


@pytest.fixture
def sample_root(tmp_path: Path) -> Path:
    return write_tree(
        tmp_path / "db",
        {
            "folders.json": ["Notes:blue", "Secret:hidden2", "Vault:hidden,purple"],
            "Notes/": {
                "files.json": ["Log.txt", "log-old.txt", "plan.md:locked3", "cover.png:locked"],
                "Log.txt": "hello log",
                "log-old.txt": "older",
                "plan.md": "# plan",
            },
            "Secret/": {
                "files.json": ["Log.txt:hidden1", "track.mp3"],
                "Log.txt": "secret log",
            },
            "Vault/": {
                "files.json": ["deep.txt"],
                "deep.txt": "deep",
            },
        },
    )
