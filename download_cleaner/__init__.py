"""
Download Cleaner
================

A console tool that sorts the files of a folder (typically Downloads) into
category subfolders by extension, with a dry-run preview, an append-only
action log and a one-level undo.
"""

__version__ = "1.0.0"

from .categories import (
    CategoryRule,
    CategorySet,
    default_categories,
    load_categories,
    FALLBACK_LABEL,
)
from .scanner import analyze_directory, list_top_level_files
from .executor import sort_directory, undo_last_sort
from .ledger import LedgerEntry, read_undo_manifest

__all__ = [
    "CategoryRule",
    "CategorySet",
    "default_categories",
    "load_categories",
    "FALLBACK_LABEL",
    "analyze_directory",
    "list_top_level_files",
    "sort_directory",
    "undo_last_sort",
    "LedgerEntry",
    "read_undo_manifest",
]
