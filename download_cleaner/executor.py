"""
Sort and undo execution for the Download Cleaner.

Moves top-level files into their category folders (or only reports the
moves in dry-run mode), records the ledger, and replays the last manifest
in reverse for undo.
"""

import errno
import os
import shutil
from datetime import datetime
from pathlib import Path
from tqdm import tqdm

from .categories import CategorySet
from .ledger import (
    LedgerEntry,
    append_action_log,
    read_undo_manifest,
    write_undo_manifest,
    UNDO_FILENAME,
)
from .scanner import list_top_level_files
from .utils import console, print_error, print_info, print_warning, to_rel


def _replace_move(src: Path, dst: Path) -> None:
    """Move src to dst, replacing an existing file at dst."""
    try:
        os.replace(src, dst)
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise
        # Different filesystem: copy + delete, still overwriting dst
        shutil.move(str(src), str(dst))


def _move_file(src: Path, dst: Path, old_rel: str, new_rel: str) -> dict:
    """Helper to move a single file and report the outcome."""
    res = {"old_rel": old_rel, "new_rel": new_rel, "status": "skipped", "error": None}

    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        res["error"] = f"Failed to create folder: {e}"
        return res

    try:
        _replace_move(src, dst)
    except OSError as e:
        res["error"] = str(e)
        return res

    res["status"] = "moved"
    return res


def _is_inside(path: Path, root: Path) -> bool:
    try:
        (path.parent.resolve() / path.name).relative_to(root)
        return True
    except ValueError:
        return False


def sort_directory(
    root: Path,
    categories: CategorySet,
    dry_run: bool = False
) -> dict:
    """
    Sort (or simulate sorting) the top-level files of a directory.

    Each file goes to ``root/<label>/<name>``. An existing file with the
    same name is replaced. A failed move is reported and the pass continues
    with the next file.

    Args:
        root: Working directory.
        categories: Categories to resolve file names with.
        dry_run: If True, only report what would be moved.

    Returns:
        Report dict with counts, moves and failures.

    Raises:
        RuntimeError: If the directory cannot be listed.
    """
    root = Path(root).resolve()
    files = list_top_level_files(root)

    mode = "DRY-RUN" if dry_run else "SORT"
    print(f"\n[{mode}] Sorting files in {root}...")

    counts: dict[str, int] = {}
    entries: list[LedgerEntry] = []
    planned: list[dict] = []
    failures: list[dict] = []
    started_at = datetime.now()

    if dry_run:
        for src in files:
            label = categories.resolve(src.name)
            counts[label] = counts.get(label, 0) + 1
            dst = root / label / src.name
            planned.append({"old_rel": src.name, "new_rel": to_rel(dst, root)})
            console.print(f"  [WOULD MOVE] {src.name} -> {dst}", markup=False, highlight=False)
    else:
        for src in tqdm(files, unit="file", disable=not files):
            label = categories.resolve(src.name)
            counts[label] = counts.get(label, 0) + 1
            dst = root / label / src.name

            res = _move_file(src, dst, to_rel(src, root), to_rel(dst, root))
            if res["status"] == "moved":
                entries.append(LedgerEntry(dest_rel=res["new_rel"], source_rel=res["old_rel"]))
            else:
                failures.append({"old_rel": res["old_rel"], "error": res["error"]})
                tqdm.write(f"[ERROR] Could not move {res['old_rel']}: {res['error']}")

    report = {
        "root": str(root),
        "dry_run": dry_run,
        "executed_at": started_at.isoformat(timespec='seconds'),
        "counts": counts,
        "moves": planned if dry_run else [e.to_dict() for e in entries],
        "moved_count": len(entries),
        "failed_moves_count": len(failures),
        "failures": failures,
        "log_file": None,
        "undo_file": None,
        "ledger_error": None,
    }

    if dry_run:
        print(f"\n[{mode}] Complete: {len(planned)} files would be moved. No changes made.")
        return report

    # Manifest first: it must never describe an older pass than the one just run
    ledger_errors = []
    try:
        report["undo_file"] = str(write_undo_manifest(root, entries))
    except OSError as e:
        ledger_errors.append(f"undo file: {e}")
        try:
            (root / UNDO_FILENAME).unlink(missing_ok=True)
        except OSError as unlink_error:
            ledger_errors.append(f"stale undo file left in place: {unlink_error}")
    try:
        report["log_file"] = str(append_action_log(root, entries, started_at))
    except OSError as e:
        ledger_errors.append(f"log file: {e}")

    if ledger_errors:
        report["ledger_error"] = "; ".join(ledger_errors)
        print_error(f"Could not write {report['ledger_error']} (files already moved stay moved)")

    print(f"\n[{mode}] Complete: {len(entries)} moved, {len(failures)} failed")
    return report


def undo_last_sort(root: Path) -> dict:
    """
    Move the files of the last sort pass back to where they came from.

    Entries whose file is no longer at the recorded destination are skipped.
    The manifest is left in place, so running undo twice is a no-op.

    Args:
        root: Working directory.

    Returns:
        Report dict with restored_count, skipped and failures.

    Raises:
        RuntimeError: If the manifest exists but cannot be read.
    """
    root = Path(root).resolve()
    report = {
        "root": str(root),
        "manifest_found": False,
        "restored_count": 0,
        "skipped": [],
        "failures": [],
    }

    entries = read_undo_manifest(root)
    if entries is None:
        print_info(f"No undo file found: {root / UNDO_FILENAME}")
        print_info("Nothing to undo; probably no sort has been run yet.")
        return report

    report["manifest_found"] = True
    print(f"\n[UNDO] Restoring last sort from {root / UNDO_FILENAME}...")

    for entry in entries:
        dest_path = root / entry.dest_rel
        source_path = root / entry.source_rel
        item = {"dest_rel": entry.dest_rel, "source_rel": entry.source_rel}

        if not (_is_inside(dest_path, root) and _is_inside(source_path, root)):
            item["reason"] = "outside working directory"
            report["skipped"].append(item)
            print_warning(f"Skipping entry outside {root}: {entry.dest_rel} -> {entry.source_rel}")
            continue

        try:
            source_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            item["error"] = f"Failed to create folder: {e}"
            report["failures"].append(item)
            print_error(f"Could not restore {entry.dest_rel}: {item['error']}")
            continue

        if not (dest_path.exists() or dest_path.is_symlink()):
            item["reason"] = "not found"
            report["skipped"].append(item)
            console.print(f"  [SKIP] not found: {entry.dest_rel}", markup=False, highlight=False)
            continue

        res = _move_file(dest_path, source_path, entry.dest_rel, entry.source_rel)
        if res["status"] == "moved":
            report["restored_count"] += 1
            console.print(f"  [UNDO] {entry.dest_rel} -> {entry.source_rel}", markup=False, highlight=False)
        else:
            item["error"] = res["error"]
            report["failures"].append(item)
            print_error(f"Could not restore {entry.dest_rel}: {res['error']}")

    print(f"\n[UNDO] Complete: {report['restored_count']} restored, "
          f"{len(report['skipped'])} skipped, {len(report['failures'])} failed")
    print_info("Only the most recent sort can be undone.")
    return report
