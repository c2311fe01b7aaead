"""Error types for Inkwell.

Every failure surfaces to the caller of the build; nothing is recovered
locally. Each error carries the source file(s) it concerns so the CLI can
point at the offending document.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .content import Document


class InkwellError(Exception):
    """Base class for all Inkwell errors."""


class MetadataError(InkwellError):
    """A required front matter field is missing or malformed.

    Attributes:
        source: Path to the file that failed to load.
        message: Human-readable error message.
    """

    def __init__(self, source: Path | str, message: str):
        self.source = Path(source)
        self.message = message
        super().__init__(f"{source}: {message}")


class CollisionError(InkwellError):
    """Two documents claim the same slug or permalink.

    Attributes:
        identifier: The contested slug or permalink.
        field: Which identifier clashed, "slug" or "permalink".
        first: Document indexed first.
        second: Document that collided with it.
    """

    def __init__(self, identifier: str, first: Document, second: Document, field: str = "slug"):
        self.identifier = identifier
        self.field = field
        self.first = first
        self.second = second
        super().__init__(
            f"duplicate {field} {identifier!r}: {first.source} and {second.source}"
        )

    @property
    def sources(self) -> tuple[Path, Path]:
        return (self.first.source, self.second.source)


class ConfigError(InkwellError):
    """The project configuration file is malformed."""

    def __init__(self, path: Path, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


class BuildError(InkwellError):
    """Error raised by a renderer during a build.

    Attributes:
        source: Path to the file being processed, or the project root.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source: Path,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source = source
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source}: {message}")
