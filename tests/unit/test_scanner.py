import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from download_cleaner.categories import CategoryRule, CategorySet, default_categories
from download_cleaner.scanner import analyze_directory, list_top_level_files


class TestScanner(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_lists_only_top_level_regular_files(self):
        (self.root / "b.pdf").write_text("b")
        (self.root / "a.png").write_text("a")
        (self.root / "Bilder").mkdir()
        (self.root / "Bilder" / "old.png").write_text("old")

        names = [p.name for p in list_top_level_files(self.root)]
        self.assertEqual(names, ["a.png", "b.pdf"])

    def test_skips_reserved_resources(self):
        for name in ["config.txt", "log.txt", "undo_last_sort.txt", "notes.txt"]:
            (self.root / name).write_text("x")

        names = [p.name for p in list_top_level_files(self.root)]
        self.assertEqual(names, ["notes.txt"])

    @unittest.skipIf(not hasattr(os, "symlink"), "symlinks not supported")
    def test_symlinks_to_files_are_listed(self):
        target = self.root / "real.txt"
        target.write_text("x")
        (self.root / "folder").mkdir()
        try:
            os.symlink(target, self.root / "link.txt")
            os.symlink(self.root / "missing.txt", self.root / "dangling.txt")
            os.symlink(self.root / "folder", self.root / "folder_link", target_is_directory=True)
        except OSError:
            self.skipTest("cannot create symlinks here")

        names = [p.name for p in list_top_level_files(self.root)]
        self.assertEqual(names, ["link.txt", "real.txt"])

    def test_listing_error_raises_runtime_error(self):
        with self.assertRaises(RuntimeError):
            list_top_level_files(self.root / "does-not-exist")

        with patch("download_cleaner.scanner.os.scandir", side_effect=PermissionError("denied")):
            with self.assertRaises(RuntimeError) as ctx:
                list_top_level_files(self.root)
        self.assertIn("denied", str(ctx.exception))

    def test_analyze_counts_in_order_of_first_appearance(self):
        for name in ["a.zip", "b.png", "c.png", "d.xyz", "e.pdf"]:
            (self.root / name).write_text("x")

        counts = analyze_directory(self.root, default_categories())
        self.assertEqual(list(counts.items()), [
            ("Archive", 1),
            ("Bilder", 2),
            ("Sonstiges", 1),
            ("Dokumente", 1),
        ])

    def test_analyze_empty_directory(self):
        self.assertEqual(analyze_directory(self.root, default_categories()), {})

    def test_analyze_uses_given_categories(self):
        (self.root / "song.mp3").write_text("x")
        categories = CategorySet([CategoryRule("Musik", ["mp3"])])
        self.assertEqual(analyze_directory(self.root, categories), {"Musik": 1})

    def test_analyze_makes_no_changes(self):
        (self.root / "a.png").write_text("x")
        before = sorted(os.listdir(self.root))
        analyze_directory(self.root, default_categories())
        self.assertEqual(sorted(os.listdir(self.root)), before)


if __name__ == "__main__":
    unittest.main()
