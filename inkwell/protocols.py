"""Protocol definitions for Inkwell.

This module defines the interfaces between the content core and its
collaborators. Renderers only ever see a ``SiteIndex``; loaders and
extractors can be swapped out for tests or alternative sources.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .content import Document


@runtime_checkable
class MetadataExtractor(Protocol):
    """Protocol for extracting one or more metadata fields.

    Implementations raise ``MetadataError`` for values they cannot
    interpret.
    """

    @abstractmethod
    def extract(self, frontmatter: dict[str, Any], body: str, path: Path) -> dict[str, Any]:
        """Extract metadata from parsed front matter and body.

        Args:
            frontmatter: Parsed front matter mapping.
            body: Document body.
            path: Path to the source file.

        Returns:
            Dictionary of extracted metadata.
        """
        ...


@runtime_checkable
class ContentLoader(Protocol):
    """Protocol for discovering content files."""

    @abstractmethod
    def iter_files(self, include_drafts: bool = False) -> list[Path]:
        """Return paths to all content files."""
        ...


@runtime_checkable
class DocumentSource(Protocol):
    """Protocol for building Document objects from source files."""

    @abstractmethod
    def build(self, path: Path, draft: bool = False) -> Document:
        """Build a Document from a source file.

        Raises:
            MetadataError: If required metadata is missing or malformed.
        """
        ...


@runtime_checkable
class SiteIndex(Protocol):
    """What a renderer may ask of the indexed site."""

    @abstractmethod
    def list_all(self) -> Sequence[Document]:
        """All documents, posts newest first."""
        ...

    @abstractmethod
    def by_tag(self, tag: str) -> frozenset[Document]:
        """Documents carrying ``tag``."""
        ...

    @abstractmethod
    def by_slug(self, slug: str) -> Document | None:
        """The document with ``slug``, if any."""
        ...


@runtime_checkable
class Renderer(Protocol):
    """Protocol for output stages run at the end of a build.

    Rendering is external to Inkwell; anything with a ``render`` method
    accepting a ``SiteIndex`` can be plugged into ``build_site``.
    """

    @abstractmethod
    def render(self, site: SiteIndex) -> None:
        ...
