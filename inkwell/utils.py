"""Utility functions for Inkwell.

This module contains small, pure helpers used throughout the Inkwell codebase:
string processing, path checks, date parsing and permalink handling.

Key functions:
    slugify: Convert filenames to URL slugs.
    titleize: Convert filenames to human-readable titles.
    extract_date_from_name: Extract date from filename prefix.
    parse_date: Coerce a front matter value into a naive datetime.
    split_tags: Normalize a front matter tag value into a list of labels.
    normalize_permalink: Ensure a URL path has leading and trailing slashes.
    is_markdown: Check if a path is a Markdown file.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from pathlib import Path

MARKDOWN_SUFFIXES = (".md", ".markdown")

# Formats tried in order after datetime.fromisoformat() gives up.
DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S %z",
    "%Y-%m-%d %H:%M %z",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
)

TAG_SPLIT_RE = re.compile(r"[,\s]+")


def _strip_date_prefix(name: str) -> str:
    # Draft files carry a leading underscore before the date.
    parts = name.lstrip("_").split("-")
    if len(parts) >= 4 and all(p.isdigit() for p in parts[:3]):
        return "-".join(parts[3:])
    return name


def slugify(name: str) -> str:
    """Convert filename (without extension) to slug, dropping date prefix.

    Args:
        name: Filename stem.

    Returns:
        URL-friendly slug, never empty.
    """
    cleaned = _strip_date_prefix(name)
    cleaned = re.sub(r"[^a-zA-Z0-9]+", "-", cleaned)
    cleaned = cleaned.strip("-").lower()
    return cleaned or "index"


def titleize(filename: str) -> str:
    """Convert a filename to a human-readable title.

    Removes date prefixes (YYYY-MM-DD), replaces hyphens and underscores
    with spaces, and capitalizes each word.

    Args:
        filename: Filename with or without extension.

    Returns:
        Human-readable title string.

    Examples:
        >>> titleize("2015-01-06-swift-enums.md")
        'Swift Enums'
    """
    base = _strip_date_prefix(Path(filename).stem)
    words = re.split(r"[\s\-_]+", base)
    return " ".join(word.capitalize() for word in words if word) or "Untitled"


def extract_date_from_name(name: str) -> datetime | None:
    """Extract a date from a filename with YYYY-MM-DD prefix.

    Args:
        name: Filename stem (without extension).

    Returns:
        datetime object if a valid date prefix is found, None otherwise.
    """
    parts = name.lstrip("_").split("-")
    if len(parts) >= 3 and all(p.isdigit() for p in parts[:3]):
        try:
            return datetime(int(parts[0]), int(parts[1]), int(parts[2]))
        except ValueError:
            return None
    return None


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_date(value: object) -> datetime:
    """Coerce a front matter date value into a naive datetime.

    YAML already turns unquoted ``2015-01-06`` into a ``date`` and
    ``2015-01-06 10:00:00`` into a ``datetime``; strings are parsed with
    ``datetime.fromisoformat`` and then with the Jekyll-style formats in
    ``DATE_FORMATS``. Timezone-aware values are converted to UTC.

    Args:
        value: Raw value from the front matter.

    Returns:
        A naive datetime.

    Raises:
        ValueError: If the value cannot be interpreted as a date.
    """
    if isinstance(value, datetime):
        return _naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"expected a date, got {value!r}")
    text = value.strip()
    try:
        return _naive_utc(datetime.fromisoformat(text))
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return _naive_utc(datetime.strptime(text, fmt))
        except ValueError:
            continue
    raise ValueError(f"unrecognized date format: {text!r}")


def split_tags(value: object) -> list[str]:
    """Normalize a front matter tag value into a list of labels.

    Accepts a list of scalars or a comma/whitespace separated string.
    Blank entries are dropped and duplicates removed, keeping first
    occurrence order.

    Raises:
        ValueError: If the value is neither a string nor a list of scalars.
    """
    if value is None:
        return []
    if isinstance(value, str):
        raw = TAG_SPLIT_RE.split(value)
    elif isinstance(value, (list, tuple, set, frozenset)):
        raw = []
        for item in value:
            if isinstance(item, (dict, list, tuple, set)) or item is None:
                raise ValueError(f"tags must be scalars, got {item!r}")
            raw.append(str(item))
    else:
        raise ValueError(f"tags must be a list or a string, got {value!r}")
    seen: list[str] = []
    for tag in raw:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


def normalize_permalink(value: str) -> str:
    """Ensure a URL path starts and ends with a single slash.

    Examples:
        >>> normalize_permalink("about")
        '/about/'
        >>> normalize_permalink("/")
        '/'
    """
    path = value.strip().strip("/")
    path = re.sub(r"/{2,}", "/", path)
    return f"/{path}/" if path else "/"


def slug_from_permalink(permalink: str) -> str:
    """Derive a document slug from its permalink path.

    Examples:
        >>> slug_from_permalink("/projects/")
        'projects'
        >>> slug_from_permalink("/")
        'index'
    """
    return permalink.strip("/") or "index"


def is_markdown(path: Path) -> bool:
    """Check if a path is a Markdown file.

    Args:
        path: Path to check.

    Returns:
        True if the file has a .md or .markdown extension (case-insensitive).
    """
    return path.suffix.lower() in MARKDOWN_SUFFIXES
