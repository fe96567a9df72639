"""
Directory scanning for the Download Cleaner.

Only the immediate top-level entries of the working directory are looked at;
subdirectories (including existing category folders) are never entered.
"""

import os
from pathlib import Path

from .categories import CONFIG_FILENAME, CategorySet
from .ledger import LOG_FILENAME, UNDO_FILENAME

# The tool's own resources are never sorted away
RESERVED_FILENAMES = {CONFIG_FILENAME, LOG_FILENAME, UNDO_FILENAME}


def list_top_level_files(root: Path) -> list[Path]:
    """
    List the regular files directly inside a directory.

    Symlinks to files count as files and are moved as links; dangling
    links, subdirectories and the tool's reserved files are skipped.
    Entries are sorted by name so a pass is deterministic.

    Args:
        root: The working directory.

    Returns:
        Paths of the files to categorize.

    Raises:
        RuntimeError: If the directory cannot be listed.
    """
    files = []
    try:
        with os.scandir(root) as it:
            for entry in it:
                if entry.name in RESERVED_FILENAMES:
                    continue
                try:
                    if not entry.is_file():
                        continue
                except OSError:
                    continue
                files.append(Path(root) / entry.name)
    except OSError as e:
        raise RuntimeError(f"Cannot read directory {root}: {e}") from e

    files.sort(key=lambda p: p.name)
    return files


def analyze_directory(root: Path, categories: CategorySet) -> dict[str, int]:
    """
    Count the top-level files per category.

    Args:
        root: The working directory.
        categories: The categories to resolve file names with.

    Returns:
        Dict mapping label to file count, in order of first appearance.
    """
    counts: dict[str, int] = {}
    for path in list_top_level_files(root):
        label = categories.resolve(path.name)
        counts[label] = counts.get(label, 0) + 1
    return counts
