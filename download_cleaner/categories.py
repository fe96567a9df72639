"""
Category rules for the Download Cleaner.

A category is a label (which is also the name of its destination folder)
plus an ordered list of file extensions. Rules are checked in insertion
order and the first matching rule wins, so the order in which categories
are configured matters.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from .utils import print_info, print_warning

CONFIG_FILENAME = "config.txt"

# Always present, never matched by suffix
FALLBACK_LABEL = "Sonstiges"

DEFAULT_CATEGORIES: dict[str, list[str]] = {
    "Bilder": [".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp"],
    "Dokumente": [
        ".pdf", ".doc", ".docx", ".txt",
        ".ppt", ".pptx",
        ".xls", ".xlsx",
        ".odt", ".md",
    ],
    "Archive": [
        ".zip", ".rar", ".7z", ".tar", ".gz",
        ".iso", ".img", ".dmg", ".vhd", ".vhdx",
    ],
    "Installer": [".exe", ".msi"],
    "Java": [".jar"],
    FALLBACK_LABEL: [],
}


def normalize_extension(ext: str) -> str:
    """Trim and lower-case an extension, adding the leading dot if missing."""
    ext = ext.strip().lower()
    if ext and not ext.startswith('.'):
        ext = f'.{ext}'
    return ext


@dataclass
class CategoryRule:
    """
    A category label and the extensions that map to it.

    Extensions are normalized on construction; empty entries are dropped.
    """
    label: str
    extensions: list[str] = field(default_factory=list)

    def __post_init__(self):
        normalized = [normalize_extension(e) for e in self.extensions]
        self.extensions = [e for e in normalized if e]

    def matches(self, file_name: str) -> bool:
        """Check if a file name ends with one of this rule's extensions (case-insensitive)."""
        lower = file_name.lower()
        return any(lower.endswith(ext) for ext in self.extensions)


class CategorySet:
    """
    Ordered collection of category rules with a guaranteed fallback label.
    """

    def __init__(self, rules: Iterable[CategoryRule] = (), fallback: str = FALLBACK_LABEL):
        self.fallback = fallback
        self._rules: dict[str, CategoryRule] = {}
        for rule in rules:
            self.add(rule)
        self.ensure_fallback()

    def add(self, rule: CategoryRule) -> None:
        """Add a rule; a rule with the same label is replaced in place."""
        self._rules[rule.label] = rule

    def ensure_fallback(self) -> None:
        if self.fallback not in self._rules:
            self._rules[self.fallback] = CategoryRule(self.fallback, [])

    @property
    def labels(self) -> list[str]:
        return list(self._rules)

    @property
    def rules(self) -> list[CategoryRule]:
        return list(self._rules.values())

    def get(self, label: str) -> CategoryRule | None:
        return self._rules.get(label)

    def __contains__(self, label: str) -> bool:
        return label in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self):
        return iter(self._rules.values())

    def resolve(self, file_name: str) -> str:
        """
        Determine the category label for a file name.

        Rules are checked in insertion order, skipping the fallback; the
        first rule with a matching extension wins.

        Args:
            file_name: The file name (original case is fine).

        Returns:
            The matching label, or the fallback label if nothing matches.
        """
        for label, rule in self._rules.items():
            if label == self.fallback:
                continue
            if rule.matches(file_name):
                return label
        return self.fallback

    def __repr__(self) -> str:
        return f"CategorySet({self.labels!r})"


def default_categories() -> CategorySet:
    """Build a fresh CategorySet from the built-in defaults."""
    return CategorySet(
        CategoryRule(label, list(exts)) for label, exts in DEFAULT_CATEGORIES.items()
    )


def parse_category_line(line: str) -> CategoryRule | None:
    """
    Parse a single ``label=ext1,ext2,...`` configuration line.

    Returns:
        A CategoryRule, or None for blank, comment or invalid lines.
    """
    line = line.strip()
    if not line or line.startswith('#'):
        return None

    eq_index = line.find('=')
    if eq_index <= 0:
        return None

    label = line[:eq_index].strip()
    ext_part = line[eq_index + 1:].strip()
    if not label or not ext_part:
        return None

    return CategoryRule(label, ext_part.split(','))


def parse_category_lines(lines: Iterable[str]) -> list[CategoryRule]:
    """Parse configuration lines, silently skipping invalid ones."""
    rules = []
    for line in lines:
        rule = parse_category_line(line)
        if rule is not None:
            rules.append(rule)
    return rules


def load_categories(directory: Path) -> CategorySet:
    """
    Load the categories for a working directory.

    Starts from the built-in defaults. If ``config.txt`` exists in the
    directory, its rules replace the defaults entirely. If the file cannot
    be read, the defaults are used and a warning is printed.

    Args:
        directory: The working directory.

    Returns:
        A CategorySet that always contains the fallback label.
    """
    config_file = Path(directory) / CONFIG_FILENAME

    if not config_file.exists():
        print_info(f"No {CONFIG_FILENAME} found in {directory}. Using default categories.")
        return default_categories()

    print_info(f"Loading categories from {config_file}")
    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            rules = parse_category_lines(f)
    except (OSError, UnicodeDecodeError) as e:
        print_warning(f"Could not read {config_file}, using default categories: {e}")
        return default_categories()

    categories = CategorySet(rules)
    print_info(f"Categories loaded: {', '.join(categories.labels)}")
    return categories
