#!/usr/bin/env python3
"""
Download Cleaner - CLI Entry Point
==================================

Usage:
    python -m download_cleaner                      # interactive menu
    python -m download_cleaner menu ~/Downloads
    python -m download_cleaner analyze ~/Downloads
    python -m download_cleaner sort ~/Downloads --dry-run
    python -m download_cleaner undo ~/Downloads
"""

import argparse
import sys
from pathlib import Path

from . import __version__
from .categories import CategorySet, load_categories
from .executor import sort_directory, undo_last_sort
from .scanner import analyze_directory
from .utils import (
    console,
    print_counts_table,
    print_error,
    print_header,
    print_sort_summary,
    print_success,
    print_warning,
    save_json,
)


MENU_TEXT = """
[bold]Main menu[/bold]
---------
1) Analyze folder
2) Sort files by type
3) Dry run: show moves, change nothing
4) Undo last sort
0) Exit"""


def suggest_download_dir() -> Path:
    """Default working directory suggestion: the user's Downloads folder."""
    return Path.home() / "Downloads"


def validate_root(root: Path) -> Path | None:
    """Return the resolved directory, or None (with an error printed) if it is unusable."""
    root = root.expanduser()
    if not root.exists() or not root.is_dir():
        print_error(f"Invalid directory: {root}")
        return None
    return root.resolve()


def prompt_for_root(suggested: Path) -> Path | None:
    """
    Ask the user which directory to clean.

    Enter keeps the suggestion, 'q' quits, anything else is taken as a path.
    """
    console.print(f"Suggested folder: [cyan]{suggested}[/cyan]")
    console.print("\\[Enter] = use suggestion, path = choose another folder, 'q' = quit")

    choice = input("Folder: ").strip()
    if choice.lower() == 'q':
        return None

    root = suggested if not choice else Path(choice)
    root = validate_root(root)
    if root is not None:
        console.print(f"Using folder: [cyan]{root}[/cyan]")
    return root


# =============================================================================
# Actions
# =============================================================================

def run_analyze(root: Path, categories: CategorySet) -> None:
    console.print(f"\n[bold cyan]Analyzing {root}[/bold cyan]")
    counts = analyze_directory(root, categories)
    print_counts_table(counts, title="Files per category")


def run_sort(root: Path, categories: CategorySet, dry_run: bool) -> dict:
    if dry_run:
        print_warning("Dry run: NO files will be moved.")
    report = sort_directory(root, categories, dry_run=dry_run)
    print_sort_summary(report)

    if not dry_run:
        if report["ledger_error"] is None:
            console.print(f"Log file:   {report['log_file']}")
            console.print(f"Undo file:  {report['undo_file']}")
        if report["failed_moves_count"]:
            print_warning(f"{report['failed_moves_count']} file(s) could not be moved")
        else:
            print_success("Sorting complete")
    return report


def run_undo(root: Path) -> dict:
    report = undo_last_sort(root)
    if report["manifest_found"]:
        print_success(f"Files restored: {report['restored_count']}")
    return report


def run_menu(root: Path) -> int:
    """
    Interactive menu loop for one working directory.

    Categories are loaded once for the directory and passed to each action.
    """
    categories = load_categories(root)

    while True:
        console.print(MENU_TEXT)
        try:
            choice = input("Your choice: ").strip()
        except EOFError:
            console.print()
            return 0

        try:
            if choice == "1":
                run_analyze(root, categories)
            elif choice == "2":
                run_sort(root, categories, dry_run=False)
            elif choice == "3":
                run_sort(root, categories, dry_run=True)
            elif choice == "4":
                run_undo(root)
            elif choice == "0":
                console.print("Goodbye!")
                return 0
            else:
                console.print("Invalid choice. Enter 0, 1, 2, 3 or 4.")
        except RuntimeError as e:
            print_error(str(e))


# =============================================================================
# Subcommands
# =============================================================================

def cmd_menu(args) -> int:
    """Menu command - interactive shell."""
    print_header("Download Cleaner", f"v{__version__} - sort a folder by file type")

    if args.root is not None:
        root = validate_root(args.root)
    else:
        try:
            root = prompt_for_root(suggest_download_dir())
        except EOFError:
            root = None

    if root is None:
        console.print("Exiting.")
        return 1

    return run_menu(root)


def cmd_analyze(args) -> int:
    """Analyze command - count files per category."""
    root = validate_root(args.root)
    if root is None:
        return 1

    try:
        run_analyze(root, load_categories(root))
    except RuntimeError as e:
        print_error(str(e))
        return 1
    return 0


def cmd_sort(args) -> int:
    """Sort command - move files into category folders."""
    root = validate_root(args.root)
    if root is None:
        return 1

    try:
        report = run_sort(root, load_categories(root), dry_run=args.dry_run)
    except RuntimeError as e:
        print_error(str(e))
        return 1

    if args.report_out:
        save_json(report, args.report_out)

    if report["ledger_error"] is not None:
        return 1
    return 0


def cmd_undo(args) -> int:
    """Undo command - reverse the last sort."""
    root = validate_root(args.root)
    if root is None:
        return 1

    try:
        run_undo(root)
    except RuntimeError as e:
        print_error(str(e))
        return 1
    return 0


# =============================================================================
# Main
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="download-cleaner",
        description="Download Cleaner - Sort a folder's files into category subfolders by extension",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- MENU command ---
    menu_parser = subparsers.add_parser("menu", help="Interactive menu (default)")
    menu_parser.add_argument("root", type=Path, nargs="?", default=None,
                             help="Folder to clean (prompted if omitted)")
    menu_parser.set_defaults(func=cmd_menu)

    # --- ANALYZE command ---
    analyze_parser = subparsers.add_parser("analyze", help="Count files per category")
    analyze_parser.add_argument("root", type=Path, help="Folder to analyze")
    analyze_parser.set_defaults(func=cmd_analyze)

    # --- SORT command ---
    sort_parser = subparsers.add_parser("sort", help="Move files into category folders")
    sort_parser.add_argument("root", type=Path, help="Folder to sort")
    sort_parser.add_argument("--dry-run", action="store_true",
                             help="Only show what would be moved")
    sort_parser.add_argument("--report-out", type=Path, default=None,
                             help="Write a JSON report to this file")
    sort_parser.set_defaults(func=cmd_sort)

    # --- DRY-RUN command ---
    dry_parser = subparsers.add_parser("dry-run", help="Shortcut for 'sort --dry-run'")
    dry_parser.add_argument("root", type=Path, help="Folder to preview")
    dry_parser.add_argument("--report-out", type=Path, default=None,
                            help="Write a JSON report to this file")
    dry_parser.set_defaults(func=cmd_sort, dry_run=True)

    # --- UNDO command ---
    undo_parser = subparsers.add_parser("undo", help="Undo the last sort")
    undo_parser.add_argument("root", type=Path, help="Folder that was sorted")
    undo_parser.set_defaults(func=cmd_undo)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        args = parser.parse_args(["menu"])

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\n[ABORT] Operation cancelled by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
