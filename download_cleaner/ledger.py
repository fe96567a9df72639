"""
Action log and undo manifest for the Download Cleaner.

The action log (``log.txt``) is an append-only audit trail with one block per
sort pass. The undo manifest (``undo_last_sort.txt``) only holds the moves of
the most recent pass and is rewritten every time.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterable

LOG_FILENAME = "log.txt"
UNDO_FILENAME = "undo_last_sort.txt"

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
MANIFEST_SEPARATOR = "|"


@dataclass
class LedgerEntry:
    """One successful move, as paths relative to the working directory."""
    dest_rel: str
    source_rel: str
    moved_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {"old_rel": self.source_rel, "new_rel": self.dest_rel}

    def to_log_line(self) -> str:
        return f"{self.moved_at.strftime(TIMESTAMP_FORMAT)} MOVE {self.source_rel} -> {self.dest_rel}"

    def to_manifest_line(self) -> str:
        return f"{self.dest_rel}{MANIFEST_SEPARATOR}{self.source_rel}"


def append_action_log(root: Path, entries: Iterable[LedgerEntry], started_at: datetime) -> Path:
    """
    Append one sort pass to the action log.

    Args:
        root: The working directory.
        entries: Successful moves, in processing order.
        started_at: When the pass started.

    Returns:
        Path of the log file.
    """
    log_file = Path(root) / LOG_FILENAME
    with open(log_file, 'a', encoding='utf-8') as f:
        f.write(f"=== Sortierung gestartet: {started_at.strftime(TIMESTAMP_FORMAT)} ===\n")
        for entry in entries:
            f.write(entry.to_log_line() + '\n')
        f.write("=== Sortierung beendet ===\n")
    return log_file


def write_undo_manifest(root: Path, entries: Iterable[LedgerEntry]) -> Path:
    """Overwrite the undo manifest with the moves of the current pass."""
    undo_file = Path(root) / UNDO_FILENAME
    with open(undo_file, 'w', encoding='utf-8') as f:
        for entry in entries:
            f.write(entry.to_manifest_line() + '\n')
    return undo_file


def parse_manifest_line(line: str) -> LedgerEntry | None:
    """
    Parse a ``dest_rel|source_rel`` manifest line.

    Returns:
        A LedgerEntry, or None for blank, comment or malformed lines.
    """
    line = line.strip()
    if not line or line.startswith('#') or MANIFEST_SEPARATOR not in line:
        return None

    dest_rel, source_rel = line.split(MANIFEST_SEPARATOR, 1)
    dest_rel = dest_rel.strip()
    source_rel = source_rel.strip()
    if not dest_rel or not source_rel:
        return None

    return LedgerEntry(dest_rel=dest_rel, source_rel=source_rel)


def read_undo_manifest(root: Path) -> list[LedgerEntry] | None:
    """
    Read the undo manifest of the last sort pass.

    Args:
        root: The working directory.

    Returns:
        The recorded moves, or None if there is no manifest.

    Raises:
        RuntimeError: If the manifest exists but cannot be read.
    """
    undo_file = Path(root) / UNDO_FILENAME
    if not undo_file.exists():
        return None

    entries = []
    try:
        with open(undo_file, 'r', encoding='utf-8') as f:
            for line in f:
                entry = parse_manifest_line(line)
                if entry is not None:
                    entries.append(entry)
    except (OSError, UnicodeDecodeError) as e:
        raise RuntimeError(f"Cannot read undo file {undo_file}: {e}") from e

    return entries
