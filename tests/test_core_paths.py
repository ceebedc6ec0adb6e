import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from core import paths as core_paths


class CorePathsTests(unittest.TestCase):
    def test_manifest_sits_next_to_root(self) -> None:
        working_dir = Path("/srv/catalog")
        root = core_paths.get_db_root(working_dir)
        manifest = core_paths.get_manifest_path(working_dir)
        self.assertEqual(root, working_dir / "db")
        self.assertEqual(manifest, working_dir / "db-manifest.json")

    def test_settings_override_root_and_manifest_name(self) -> None:
        settings = {"catalog": {"root_dir": "content/library", "manifest_name": "library.json"}}
        working_dir = Path("/srv/catalog")
        self.assertEqual(core_paths.get_db_root(working_dir, settings), working_dir / "content" / "library")
        self.assertEqual(
            core_paths.get_manifest_path(working_dir, settings),
            working_dir / "content" / "library.json",
        )

    def test_split_catalog_path(self) -> None:
        self.assertEqual(core_paths.split_catalog_path(""), [])
        self.assertEqual(core_paths.split_catalog_path(None), [])
        self.assertEqual(core_paths.split_catalog_path("/Notes//Deep/"), ["Notes", "Deep"])
        self.assertEqual(core_paths.split_catalog_path("a\\b"), ["a", "b"])

    def test_working_dir_from_environment(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch.dict(os.environ, {"TAGCATALOG_HOME": tmp}):
                self.assertEqual(core_paths.resolve_working_dir(), Path(tmp).resolve())
            with mock.patch.dict(os.environ, {"TAGCATALOG_HOME": os.path.join(tmp, "missing")}):
                self.assertEqual(core_paths.resolve_working_dir(), Path.cwd().resolve())


if __name__ == "__main__":
    unittest.main()
