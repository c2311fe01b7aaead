"""Command-line interface for Inkwell.

This module defines the CLI commands using Click framework.
It provides commands for validating and inspecting a site's content and
for creating new documents.

Commands:
- build: Load, validate and index every document.
- list: List documents in chronological order.
- tags: List tags with document counts.
- show: Print a document's normalized source.
- new: Create a new post or page interactively.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import click
import questionary
import yaml

from . import __version__
from .errors import CollisionError, InkwellError
from .utils import slugify

# Listing column width for dates
_DATE_WIDTH = 10


@click.group()
@click.version_option(version=__version__, prog_name="inkwell")
@click.option("-v", "--verbose", is_flag=True, help="Log each loaded document")
def cli(verbose: bool):
    """Inkwell blog content toolkit."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@cli.command()
@click.option("--drafts", is_flag=True, help="Include draft content")
@click.option("--workers", type=int, required=False, help="Parser threads (overrides inkwell.yaml)")
def build(drafts: bool, workers: int | None):
    """Load, validate and index every document."""
    result = _load_site(include_drafts=drafts, workers=workers)
    documents = result.documents
    click.echo(
        f"Indexed {len(documents)} documents "
        f"({len(documents.posts())} posts, {len(documents.pages())} pages, "
        f"{len(documents.tags)} tags) from {result.content_dir}"
    )


@cli.command(name="list")
@click.option("--tag", default=None, help="Only documents carrying this tag")
@click.option("--drafts", is_flag=True, help="Include draft content")
def list_documents(tag: str | None, drafts: bool):
    """List documents, newest first."""
    documents = _load_site(include_drafts=drafts).documents
    if tag is not None:
        documents = documents.with_tag(tag)
    for document in documents:
        date = document.date.strftime("%Y-%m-%d") if document.date else "-" * _DATE_WIDTH
        click.echo(f"{date}  {document.slug}  {document.title}")


@cli.command()
def tags():
    """List tags with document counts, most used first."""
    for tag, count in _load_site().documents.tags.most_used():
        click.echo(f"{count:>4}  {tag}")


@cli.command()
@click.argument("slug")
def show(slug: str):
    """Print a document's normalized source."""
    documents = _load_site(include_drafts=True).documents
    document = documents.by_slug(slug.strip("/") or "index") or documents.by_permalink(slug)
    if document is None:
        raise click.ClickException(f"No document with slug or permalink {slug!r}")
    click.echo(document.to_source(), nl=False)


@cli.command()
def new():
    """Create a new post or page interactively."""
    project_root = Path.cwd()
    result = _load_site(include_drafts=True)
    content_dir = result.content_dir

    kind = questionary.select(
        "Document type:",
        choices=["post", "page"],
        style=_questionary_style(),
    ).ask()
    if kind is None:
        raise click.Abort()

    title = questionary.text(
        "Title:",
        validate=lambda x: len(x.strip()) > 0 or "Title cannot be empty",
        style=_questionary_style(),
    ).ask()
    if title is None:
        raise click.Abort()
    title = title.strip()

    raw_tags = questionary.text(
        "Tags (comma separated, optional):",
        style=_questionary_style(),
    ).ask()
    if raw_tags is None:
        raise click.Abort()

    slug = slugify(title)
    existing = result.documents.by_slug(slug)
    if existing is not None:
        raise click.ClickException(
            f"A document with slug '{slug}' already exists: {_relative(existing.source, project_root)}"
        )

    frontmatter: dict = {"title": title}
    if kind == "post":
        today = datetime.now()
        frontmatter["date"] = today.date()
        target_path = content_dir / result.config["posts_dir"] / f"{today:%Y-%m-%d}-{slug}.md"
    else:
        frontmatter["permalink"] = f"/{slug}/"
        target_path = content_dir / f"{slug}.md"
    frontmatter["tags"] = [t.strip() for t in raw_tags.split(",") if t.strip()]

    if target_path.exists():
        raise click.ClickException(
            f"File already exists: {_relative(target_path, project_root)}"
        )

    target_path.parent.mkdir(parents=True, exist_ok=True)
    header = yaml.safe_dump(frontmatter, sort_keys=False, allow_unicode=True)
    target_path.write_text(f"---\n{header}---\n\n", encoding="utf-8")
    click.echo(f"Created {_relative(target_path, project_root)}")


def _load_site(include_drafts: bool = False, workers: int | None = None):
    """Build the site in the current directory, reporting failures."""
    project_root = Path.cwd()
    from .build import build_site

    try:
        return build_site(project_root, include_drafts=include_drafts, workers=workers)
    except FileNotFoundError as exc:
        raise click.ClickException(str(exc)) from None
    except CollisionError as exc:
        click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
        click.echo(click.style(f"  Duplicate {exc.field}: {exc.identifier}", fg="yellow"), err=True)
        for source in exc.sources:
            click.echo(click.style(f"  File: {_relative(source, project_root)}", fg="yellow"), err=True)
        raise SystemExit(1) from None
    except InkwellError as exc:
        # Display user-friendly error message
        source = getattr(exc, "source", None) or getattr(exc, "path", project_root)
        click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
        click.echo(click.style(f"  File: {_relative(source, project_root)}", fg="yellow"), err=True)
        click.echo(click.style(f"  Error: {getattr(exc, 'message', exc)}", fg="white"), err=True)
        raise SystemExit(1) from None


def _relative(path: Path, root: Path) -> Path:
    try:
        return path.relative_to(root)
    except ValueError:
        return path


def _questionary_style():
    """Return consistent questionary style."""
    return questionary.Style(
        [
            ("qmark", "fg:cyan bold"),
            ("question", "bold"),
            ("answer", "fg:cyan"),
            ("pointer", "fg:cyan bold"),
            ("highlighted", "fg:cyan bold"),
            ("selected", "fg:cyan"),
        ]
    )


def main():
    """Entry point for the CLI application."""
    cli()
