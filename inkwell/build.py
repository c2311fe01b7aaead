"""Site building functionality for Inkwell.

This module loads the project configuration, loads and indexes every
document, and hands the resulting collection to the configured renderers.

Key functions:
- build_site: Main function to load, validate and index the whole site.
- load_config: Loads site configuration from inkwell.yaml.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .collections import CollectionIndexer, DocumentCollection
from .content import DEFAULT_PERMALINK, DEFAULT_POSTS_DIR, ContentProcessor
from .errors import BuildError, ConfigError
from .protocols import Renderer

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "inkwell.yaml"

DEFAULT_CONFIG = {
    "content_dir": "content",
    "posts_dir": DEFAULT_POSTS_DIR,
    "permalink": DEFAULT_PERMALINK,
    "workers": 1,
}


@dataclass
class BuildResult:
    """Result of a site build operation.

    Attributes:
        documents: Indexed collection of every document in the site.
        content_dir: Directory the documents were loaded from.
        config: Effective configuration.
    """

    documents: DocumentCollection
    content_dir: Path
    config: dict[str, Any]


def load_config(project_root: Path) -> dict[str, Any]:
    """Load site configuration from inkwell.yaml.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing configuration values, with defaults applied.

    Raises:
        ConfigError: If the file is not valid YAML or not a mapping, or a
            value has the wrong type.
    """
    config_path = project_root / CONFIG_FILENAME
    config = DEFAULT_CONFIG.copy()
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            try:
                loaded = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigError(config_path, f"invalid YAML: {exc}") from exc
        if not isinstance(loaded, dict):
            raise ConfigError(config_path, "configuration must be a mapping")
        config.update(loaded)
    for key in ("content_dir", "posts_dir", "permalink"):
        value = config[key]
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(config_path, f"{key!r} must be a non-empty string, got {value!r}")
    try:
        config["workers"] = int(config["workers"])
    except (TypeError, ValueError) as exc:
        raise ConfigError(config_path, f"'workers' must be an integer, got {config['workers']!r}") from exc
    return config


def build_site(
    project_root: Path,
    include_drafts: bool = False,
    renderers: Iterable[Renderer] = (),
    workers: int | None = None,
) -> BuildResult:
    """Load, validate and index the entire site, then run renderers.

    Args:
        project_root: Root directory of the project.
        include_drafts: Whether to include draft documents (starting with _).
        renderers: Output stages to call with the indexed collection.
        workers: Parser thread count, overriding the config value.

    Returns:
        BuildResult containing the indexed documents and configuration.

    Raises:
        MetadataError: If any document has missing or malformed metadata.
        CollisionError: If two documents share a slug or permalink.
        BuildError: If a renderer fails.
    """
    config = load_config(project_root)
    if workers is not None:
        config["workers"] = workers
    content_dir = project_root / config["content_dir"]
    if not content_dir.exists():
        raise FileNotFoundError(f"Expected content directory at {content_dir}")

    processor = ContentProcessor(
        content_dir,
        posts_dir=config["posts_dir"],
        permalink_pattern=config["permalink"],
    )
    indexer = CollectionIndexer()
    count = processor.load_into(
        indexer, include_drafts=include_drafts, workers=config["workers"]
    )
    logger.info("Loaded %d documents from %s", count, content_dir)
    documents = indexer.build()

    for renderer in renderers:
        try:
            renderer.render(documents)
        except Exception as exc:
            raise BuildError(
                project_root,
                _format_error_message(renderer, exc),
                exc,
            ) from exc
    return BuildResult(documents=documents, content_dir=content_dir, config=config)


def _format_error_message(renderer: Renderer, exc: Exception) -> str:
    """Format a renderer exception into a user-friendly error message."""
    return f"{type(renderer).__name__} failed with {type(exc).__name__}: {exc}"
