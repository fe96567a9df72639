import tempfile
import unittest
from datetime import datetime
from pathlib import Path

from download_cleaner.ledger import (
    LOG_FILENAME,
    UNDO_FILENAME,
    LedgerEntry,
    append_action_log,
    parse_manifest_line,
    read_undo_manifest,
    write_undo_manifest,
)


class TestLedger(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.moved_at = datetime(2024, 5, 17, 9, 30, 5)
        self.entries = [
            LedgerEntry("Bilder/a.png", "a.png", self.moved_at),
            LedgerEntry("Dokumente/b.pdf", "b.pdf", self.moved_at),
        ]

    def tearDown(self):
        self._tmp.cleanup()

    def test_action_log_format(self):
        append_action_log(self.root, self.entries, datetime(2024, 5, 17, 9, 30, 0))

        lines = (self.root / LOG_FILENAME).read_text(encoding="utf-8").splitlines()
        self.assertEqual(lines, [
            "=== Sortierung gestartet: 2024-05-17 09:30:00 ===",
            "2024-05-17 09:30:05 MOVE a.png -> Bilder/a.png",
            "2024-05-17 09:30:05 MOVE b.pdf -> Dokumente/b.pdf",
            "=== Sortierung beendet ===",
        ])

    def test_action_log_is_appended(self):
        append_action_log(self.root, self.entries[:1], self.moved_at)
        append_action_log(self.root, [], self.moved_at)

        lines = (self.root / LOG_FILENAME).read_text(encoding="utf-8").splitlines()
        self.assertEqual(len(lines), 5)
        self.assertEqual(sum(1 for l in lines if l.startswith("=== Sortierung gestartet")), 2)

    def test_manifest_is_overwritten(self):
        write_undo_manifest(self.root, self.entries)
        write_undo_manifest(self.root, self.entries[1:])

        text = (self.root / UNDO_FILENAME).read_text(encoding="utf-8")
        self.assertEqual(text, "Dokumente/b.pdf|b.pdf\n")

    def test_read_missing_manifest(self):
        self.assertIsNone(read_undo_manifest(self.root))

    def test_read_manifest_skips_noise(self):
        (self.root / UNDO_FILENAME).write_text(
            "# comment\n"
            "\n"
            "no separator here\n"
            " Bilder/a.png | a.png \n"
            "Archive/x|y.zip|x|y.zip\n"
            "|orphan\n",
            encoding="utf-8",
        )
        entries = read_undo_manifest(self.root)
        self.assertEqual(
            [(e.dest_rel, e.source_rel) for e in entries],
            [("Bilder/a.png", "a.png"), ("Archive/x", "y.zip|x|y.zip")],
        )

    def test_parse_manifest_line(self):
        entry = parse_manifest_line("Sonstiges/c.xyz|c.xyz")
        self.assertEqual(entry.dest_rel, "Sonstiges/c.xyz")
        self.assertEqual(entry.source_rel, "c.xyz")
        self.assertIsNone(parse_manifest_line("#Sonstiges/c.xyz|c.xyz"))

    def test_entry_to_dict(self):
        self.assertEqual(self.entries[0].to_dict(), {"old_rel": "a.png", "new_rel": "Bilder/a.png"})


if __name__ == "__main__":
    unittest.main()
