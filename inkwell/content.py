"""Content loading for Inkwell.

This module discovers Markdown source files, parses their front matter,
and creates immutable Document objects representing posts and pages.

Key classes:
- Document: Frozen dataclass representing one authored unit.
- FileContentLoader: Discovers content files in a directory.
- PermalinkDeriver: Computes permalinks for posts and pages.
- DocumentBuilder: Builds a Document from one source file.
- ContentProcessor: Facade loading every document of a site.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from .errors import MetadataError
from .extractors import (
    CompositeMetadataExtractor,
    default_metadata_extractor,
    extract_frontmatter,
)
from .utils import is_markdown, normalize_permalink, slug_from_permalink, slugify, titleize

if TYPE_CHECKING:
    from .collections import CollectionIndexer
    from .protocols import ContentLoader, DocumentSource

logger = logging.getLogger(__name__)

POST = "post"
PAGE = "page"

DEFAULT_POSTS_DIR = "_posts"
DEFAULT_PERMALINK = "/:year/:month/:day/:slug/"

# Front matter keys that Document fields own; everything else is carried
# through untouched on re-serialization.
CANONICAL_KEYS = ("title", "date", "permalink", "slug", "tags", "categories")


@dataclass(frozen=True)
class Document:
    """Represents one post or page with its metadata and body.

    Attributes:
        title: Display title.
        slug: Unique identifier across the site.
        permalink: URL path, always wrapped in slashes.
        kind: "post" or "page".
        date: Publication date; always set for posts.
        tags: Free-text labels.
        body: Raw markdown following the front matter.
        source: Path to the source file.
        excerpt: First prose paragraph.
        draft: Whether this is a draft document.
        frontmatter: Parsed front matter as written in the file.
    """

    title: str
    slug: str
    permalink: str
    kind: str  # "post" | "page"
    date: datetime | None
    tags: frozenset[str]
    body: str
    source: Path
    excerpt: str = ""
    draft: bool = False
    frontmatter: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_post(self) -> bool:
        return self.kind == POST

    @property
    def is_page(self) -> bool:
        return self.kind == PAGE

    def metadata(self) -> dict[str, Any]:
        """Return the canonical metadata mapping for this document.

        Extra front matter keys are preserved after the canonical ones.
        """
        meta: dict[str, Any] = {"title": self.title}
        if self.date is not None:
            # YAML writes a bare date for midnight, a timestamp otherwise
            is_midnight = self.date.time() == datetime.min.time()
            meta["date"] = self.date.date() if is_midnight else self.date
        meta["permalink"] = self.permalink
        meta["slug"] = self.slug
        meta["tags"] = sorted(self.tags)
        for key, value in self.frontmatter.items():
            if key not in CANONICAL_KEYS:
                meta[key] = value
        return meta

    def to_source(self) -> str:
        """Re-serialize the document as front matter followed by its body."""
        header = yaml.safe_dump(
            self.metadata(),
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
        return f"---\n{header}---\n{self.body}"


class FileContentLoader:
    """Discovers content files in a directory.

    Directories starting with ``_`` are internal and skipped, except the
    posts directory. Files starting with ``_`` are drafts.

    Attributes:
        content_dir: Directory containing site content.
        posts_dir: Name of the top-level directory holding posts.
    """

    def __init__(self, content_dir: Path, posts_dir: str = DEFAULT_POSTS_DIR):
        self.content_dir = content_dir
        self.posts_dir = posts_dir

    def iter_files(self, include_drafts: bool = False) -> list[Path]:
        """List all content files in a stable order.

        Args:
            include_drafts: Whether to include draft files.

        Returns:
            Sorted list of paths to Markdown files.
        """
        files: list[Path] = []
        for path in sorted(self.content_dir.rglob("*")):
            if path.is_dir() or not is_markdown(path):
                continue
            rel = path.relative_to(self.content_dir)
            folders = list(rel.parts[:-1])
            if folders and folders[0] == self.posts_dir:
                folders = folders[1:]
            if any(part.startswith("_") for part in folders):
                continue
            if rel.name.startswith("_") and not include_drafts:
                continue
            files.append(path)
        return files


class PermalinkDeriver:
    """Derives permalinks for documents that do not declare one.

    Posts expand a pattern such as ``/:year/:month/:day/:slug/``; pages
    mirror their location under the content directory.
    """

    def __init__(self, pattern: str = DEFAULT_PERMALINK):
        self.pattern = pattern

    def for_post(self, slug: str, date: datetime, title: str) -> str:
        tokens = {
            ":year": f"{date.year:04d}",
            ":month": f"{date.month:02d}",
            ":day": f"{date.day:02d}",
            ":title": slugify(title),
            ":slug": slug,
        }
        url = self.pattern
        for token, value in tokens.items():
            url = url.replace(token, value)
        return normalize_permalink(url)

    def for_page(self, rel: Path) -> str:
        segments = [p for p in rel.parent.parts if p]
        slug = slugify(rel.stem)
        if slug != "index":
            segments.append(slug)
        return normalize_permalink("/".join(segments))


class DocumentBuilder:
    """Builds Document objects from source files.

    Attributes:
        content_dir: Directory containing site content.
        posts_dir: Name of the top-level directory holding posts.
        metadata_extractor: Composite metadata extractor.
        permalinks: Permalink deriver instance.
    """

    def __init__(
        self,
        content_dir: Path,
        posts_dir: str = DEFAULT_POSTS_DIR,
        permalink_pattern: str = DEFAULT_PERMALINK,
        metadata_extractor: CompositeMetadataExtractor | None = None,
    ):
        self.content_dir = content_dir
        self.posts_dir = posts_dir
        self.metadata_extractor = metadata_extractor or default_metadata_extractor
        self.permalinks = PermalinkDeriver(permalink_pattern)

    def build(self, path: Path, draft: bool = False) -> Document:
        """Build a Document from a source file.

        Args:
            path: Path to the source file.
            draft: Whether this is a draft document.

        Returns:
            Document object.

        Raises:
            MetadataError: If required metadata is missing or malformed.
        """
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise MetadataError(path, f"not valid UTF-8 text: {exc}") from exc
        return self.parse(text, path, draft=draft)

    def parse(self, text: str, path: Path, draft: bool = False) -> Document:
        """Build a Document from raw text attributed to ``path``."""
        frontmatter, body = extract_frontmatter(text, path)
        metadata = self.metadata_extractor.extract(frontmatter, body, path)
        kind = self.kind_of(path)
        title = metadata.get("title") or titleize(path.name)
        date = metadata.get("date")

        if kind == POST:
            if date is None:
                raise MetadataError(
                    path, "posts require a 'date' field or a YYYY-MM-DD- filename prefix"
                )
            slug = metadata.get("slug") or slugify(path.stem)
            permalink = metadata.get("permalink") or self.permalinks.for_post(slug, date, title)
        else:
            permalink = metadata.get("permalink") or self.permalinks.for_page(self._relative(path))
            slug = metadata.get("slug") or slug_from_permalink(permalink)

        document = Document(
            title=title,
            slug=slug,
            permalink=permalink,
            kind=kind,
            date=date,
            tags=metadata.get("tags", frozenset()),
            body=body,
            source=path,
            excerpt=metadata.get("excerpt", ""),
            draft=draft,
            frontmatter=frontmatter,
        )
        logger.debug("Loaded %s %r from %s", kind, slug, path)
        return document

    def kind_of(self, path: Path) -> str:
        """Return "post" for files under the posts directory, else "page"."""
        rel = self._relative(path)
        if len(rel.parts) > 1 and rel.parts[0] == self.posts_dir:
            return POST
        return PAGE

    def _relative(self, path: Path) -> Path:
        try:
            return path.relative_to(self.content_dir)
        except ValueError:
            return Path(path.name)


class ContentProcessor:
    """Facade for loading every document in a content directory.

    Attributes:
        content_dir: Directory containing site content.
    """

    def __init__(
        self,
        content_dir: Path,
        content_loader: ContentLoader | None = None,
        document_builder: DocumentSource | None = None,
        posts_dir: str = DEFAULT_POSTS_DIR,
        permalink_pattern: str = DEFAULT_PERMALINK,
    ):
        self.content_dir = content_dir
        self._content_loader = content_loader or FileContentLoader(content_dir, posts_dir)
        self._document_builder = document_builder or DocumentBuilder(
            content_dir, posts_dir=posts_dir, permalink_pattern=permalink_pattern
        )

    def load(self, include_drafts: bool = False, workers: int = 1) -> list[Document]:
        """Load all content files and create Document objects.

        Args:
            include_drafts: Whether to include draft documents.
            workers: Number of threads used for parsing.

        Returns:
            Documents in discovery order.

        Raises:
            MetadataError: On the first file that fails to load.
        """
        paths = self._content_loader.iter_files(include_drafts)
        if workers <= 1:
            return [self._build(path) for path in paths]
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(self._build, paths))

    def load_into(
        self,
        indexer: CollectionIndexer,
        include_drafts: bool = False,
        workers: int = 1,
    ) -> int:
        """Load all content files straight into an indexer.

        With more than one worker, documents are parsed and inserted
        concurrently; the indexer serializes the uniqueness checks.

        Returns:
            Number of documents loaded.
        """
        paths = self._content_loader.iter_files(include_drafts)

        def load_one(path: Path) -> None:
            indexer.add(self._build(path))

        if workers <= 1:
            for path in paths:
                load_one(path)
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                # list() re-raises the first worker exception
                list(executor.map(load_one, paths))
        return len(paths)

    def _build(self, path: Path) -> Document:
        return self._document_builder.build(path, draft=path.name.startswith("_"))
