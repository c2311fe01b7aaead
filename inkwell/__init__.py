"""Inkwell blog content toolkit.

This package loads the posts and pages of a static blog from Markdown files
with YAML front matter, validates their metadata, and indexes them into an
ordered collection that a renderer can consume.

The main entry points are ``build.build_site`` for programmatic use and the
CLI module, which provides commands for validating, listing and creating
content.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
