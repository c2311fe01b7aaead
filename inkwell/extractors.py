"""Metadata extractors for Inkwell.

This module turns the YAML front matter of a document into validated
metadata values. Each extractor handles a single field, and
``CompositeMetadataExtractor`` merges their results.

Key classes:
- TitleExtractor: Title from front matter, first heading, or filename.
- DateExtractor: Publish date from front matter or filename prefix.
- TagExtractor: Tags (and categories) from front matter.
- PermalinkExtractor: Explicit permalink from front matter.
- SlugExtractor: Explicit slug from front matter.
- ExcerptExtractor: First prose paragraph of the body.

Extractors raise ``MetadataError`` for values they cannot interpret.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml

from .errors import MetadataError
from .utils import (
    extract_date_from_name,
    normalize_permalink,
    parse_date,
    split_tags,
    titleize,
)

FRONTMATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n?^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE)


def extract_frontmatter(text: str, source: Path | str = "<string>") -> tuple[dict[str, Any], str]:
    """Extract YAML front matter from content.

    Args:
        text: Raw file content.
        source: Identifier of the file, used in error messages.

    Returns:
        Tuple of (front matter dict, remaining body).

    Raises:
        MetadataError: If the header is not valid YAML or not a mapping.
    """
    match = FRONTMATTER_RE.match(text)
    if not match:
        return {}, text
    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as exc:
        raise MetadataError(source, f"invalid front matter: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise MetadataError(source, "front matter must be a mapping of key: value pairs")
    return data, text[match.end() :]


def _scalar(frontmatter: dict[str, Any], key: str, path: Path) -> str | None:
    value = frontmatter.get(key)
    if value is None:
        return None
    if isinstance(value, (dict, list, tuple, set)):
        raise MetadataError(path, f"{key!r} must be a single value, got {value!r}")
    text = str(value).strip()
    if not text:
        raise MetadataError(path, f"{key!r} must not be empty")
    return text


class TitleExtractor:
    """Extracts the title.

    Uses the ``title`` key when present, then a level-1 heading
    (# Title) in the body, falling back to titleizing the filename.
    """

    def extract(self, frontmatter: dict[str, Any], body: str, path: Path) -> dict[str, Any]:
        title = _scalar(frontmatter, "title", path)
        if title:
            return {"title": title}
        in_fence = False
        for line in body.splitlines():
            stripped = line.strip()
            if stripped.startswith(("```", "~~~")):
                in_fence = not in_fence
                continue
            if not in_fence and stripped.startswith("# "):
                return {"title": stripped[2:].strip()}
        return {"title": titleize(path.name)}


class DateExtractor:
    """Extracts the publish date.

    Looks for the ``date`` key first, then for a YYYY-MM-DD prefix in
    the filename. Unlike a malformed value, an absent date is not an
    error here; whether a date is required depends on the document kind.
    """

    def extract(self, frontmatter: dict[str, Any], body: str, path: Path) -> dict[str, Any]:
        raw = frontmatter.get("date")
        if raw is None:
            return {"date": extract_date_from_name(path.stem)}
        try:
            return {"date": parse_date(raw)}
        except ValueError as exc:
            raise MetadataError(path, f"malformed 'date': {exc}") from exc


class TagExtractor:
    """Extracts tags from the ``tags`` and ``categories`` keys."""

    keys = ("tags", "categories")

    def extract(self, frontmatter: dict[str, Any], body: str, path: Path) -> dict[str, Any]:
        tags: list[str] = []
        for key in self.keys:
            try:
                values = split_tags(frontmatter.get(key))
            except ValueError as exc:
                raise MetadataError(path, f"malformed {key!r}: {exc}") from exc
            tags.extend(t for t in values if t not in tags)
        return {"tags": frozenset(tags)}


class PermalinkExtractor:
    """Extracts an explicit permalink, normalized to /path/ form."""

    def extract(self, frontmatter: dict[str, Any], body: str, path: Path) -> dict[str, Any]:
        raw = frontmatter.get("permalink")
        if raw is None:
            return {}
        if not isinstance(raw, str) or not raw.strip():
            raise MetadataError(path, f"'permalink' must be a non-empty string, got {raw!r}")
        return {"permalink": normalize_permalink(raw)}


class SlugExtractor:
    """Extracts an explicit slug."""

    def extract(self, frontmatter: dict[str, Any], body: str, path: Path) -> dict[str, Any]:
        slug = _scalar(frontmatter, "slug", path)
        if slug is None:
            return {}
        slug = slug.strip("/")
        if not slug:
            raise MetadataError(path, "'slug' must not be empty")
        return {"slug": slug}


class ExcerptExtractor:
    """Extracts the first prose paragraph of the body.

    Headings, images, code fences and horizontal rules are skipped.
    """

    def extract(self, frontmatter: dict[str, Any], body: str, path: Path) -> dict[str, Any]:
        excerpt = _scalar(frontmatter, "excerpt", path)
        if excerpt:
            return {"excerpt": excerpt}
        return {"excerpt": self._first_paragraph(body)}

    def _first_paragraph(self, text: str) -> str:
        paragraphs = [p.strip() for p in text.split("\n\n") if p.strip()]
        for para in paragraphs:
            if para.startswith(("#", "![", "```", "---", "{%")):
                continue
            return " ".join(para.split())
        return ""


class CompositeMetadataExtractor:
    """Combines multiple metadata extractors.

    Runs every registered extractor over the parsed front matter and
    body, merging their results. Later extractors can override earlier
    ones.
    """

    def __init__(self, extractors: list | None = None):
        """Initialize with a list of extractors.

        Args:
            extractors: List of MetadataExtractor implementations.
                       If None, uses default extractors.
        """
        if extractors is None:
            self._extractors = [
                TitleExtractor(),
                DateExtractor(),
                TagExtractor(),
                PermalinkExtractor(),
                SlugExtractor(),
                ExcerptExtractor(),
            ]
        else:
            self._extractors = list(extractors)

    def add_extractor(self, extractor) -> None:
        """Add an extractor to the composite."""
        self._extractors.append(extractor)

    def extract(self, frontmatter: dict[str, Any], body: str, path: Path) -> dict[str, Any]:
        """Extract all metadata.

        Args:
            frontmatter: Parsed front matter mapping.
            body: Document body following the front matter.
            path: Path to the source file.

        Returns:
            Dictionary with all extracted metadata.

        Raises:
            MetadataError: If any field is malformed.
        """
        result: dict[str, Any] = {}
        for extractor in self._extractors:
            result.update(extractor.extract(frontmatter, body, path))
        return result


# Default composite extractor instance
default_metadata_extractor = CompositeMetadataExtractor()
