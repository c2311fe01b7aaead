from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator, Mapping, Sequence

from .content import Document
from .errors import CollisionError

logger = logging.getLogger(__name__)


def _ordered(documents: Iterable[Document]) -> list[Document]:
    # Dated documents first, newest first; ties and undated pages by slug.
    by_slug = sorted(documents, key=lambda d: d.slug)
    dated = [d for d in by_slug if d.date is not None]
    undated = [d for d in by_slug if d.date is None]
    dated.sort(key=lambda d: d.date, reverse=True)
    return dated + undated


class DocumentCollection(Sequence[Document]):
    """Ordered, slug-unique set of Documents with O(1) slug and tag lookups.

    Use ``CollectionIndexer`` (or ``index_documents``) to build one; the
    constructor trusts that slugs are already unique.
    """

    def __init__(self, documents: Iterable[Document]):
        self._documents = _ordered(documents)
        self._by_slug = {d.slug: d for d in self._documents}
        self._by_permalink = {d.permalink: d for d in self._documents}
        self._tag_slugs: dict[str, set[str]] = {}
        for document in self._documents:
            for tag in document.tags:
                self._tag_slugs.setdefault(tag, set()).add(document.slug)

    def __iter__(self) -> Iterator[Document]:
        return iter(self._documents)

    def __len__(self) -> int:
        return len(self._documents)

    def __getitem__(self, item):
        return self._documents[item]

    def __contains__(self, item) -> bool:
        if isinstance(item, Document):
            return self._by_slug.get(item.slug) == item
        return False

    def list_all(self) -> DocumentCollection:
        """Every document, dated ones newest first, then undated pages."""
        return self

    def by_slug(self, slug: str) -> Document | None:
        return self._by_slug.get(slug)

    def by_permalink(self, permalink: str) -> Document | None:
        return self._by_permalink.get(permalink)

    def by_tag(self, tag: str) -> frozenset[Document]:
        """Return exactly the documents whose tag set contains ``tag``."""
        return frozenset(self._by_slug[slug] for slug in self._tag_slugs.get(tag, ()))

    def with_tag(self, tag: str) -> DocumentCollection:
        return DocumentCollection(self.by_tag(tag))

    def posts(self) -> DocumentCollection:
        return DocumentCollection(d for d in self._documents if d.is_post)

    def pages(self) -> DocumentCollection:
        return DocumentCollection(d for d in self._documents if d.is_page)

    def drafts(self) -> DocumentCollection:
        return DocumentCollection(d for d in self._documents if d.draft)

    def published(self) -> DocumentCollection:
        return DocumentCollection(d for d in self._documents if not d.draft)

    def latest(self, count: int = 5) -> DocumentCollection:
        return DocumentCollection(self.posts()[:count])

    @property
    def tags(self) -> TagCollection:
        return TagCollection({tag: self.by_tag(tag) for tag in self._tag_slugs})

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"DocumentCollection({len(self._documents)} documents)"


class TagCollection(Mapping[str, DocumentCollection]):
    """Mapping of tag name to DocumentCollection with convenience helpers."""

    def __init__(self, mapping: dict[str, Iterable[Document]]):
        self._mapping = {k: DocumentCollection(v) for k, v in sorted(mapping.items())}

    def __getitem__(self, key: str) -> DocumentCollection:
        return self._mapping[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._mapping)

    def __len__(self) -> int:
        return len(self._mapping)

    def most_used(self) -> list[tuple[str, int]]:
        """Tag names with document counts, most used first then by name."""
        counts = [(tag, len(docs)) for tag, docs in self._mapping.items()]
        return sorted(counts, key=lambda item: (-item[1], item[0]))

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"TagCollection({len(self._mapping)} tags)"


class CollectionIndexer:
    """Accumulates Documents while enforcing slug and permalink uniqueness.

    ``add`` may be called from several loader threads at once; the
    uniqueness check and insertion happen under a single lock.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._documents: dict[str, Document] = {}
        self._permalinks: dict[str, Document] = {}

    def add(self, document: Document) -> None:
        """Insert a document.

        Raises:
            CollisionError: If another document already has the same slug
                or the same permalink.
        """
        with self._lock:
            existing = self._documents.get(document.slug)
            if existing is not None:
                raise CollisionError(document.slug, existing, document)
            existing = self._permalinks.get(document.permalink)
            if existing is not None:
                raise CollisionError(document.permalink, existing, document, field="permalink")
            self._documents[document.slug] = document
            self._permalinks[document.permalink] = document

    def extend(self, documents: Iterable[Document]) -> None:
        for document in documents:
            self.add(document)

    def __len__(self) -> int:
        return len(self._documents)

    def build(self) -> DocumentCollection:
        """Return the sorted, indexed collection of everything added so far."""
        with self._lock:
            documents = list(self._documents.values())
        collection = DocumentCollection(documents)
        logger.info(
            "Indexed %d documents (%d posts, %d pages, %d tags)",
            len(collection),
            sum(1 for d in collection if d.is_post),
            sum(1 for d in collection if d.is_page),
            len(collection.tags),
        )
        return collection


def index_documents(documents: Iterable[Document]) -> DocumentCollection:
    """Index documents into a collection, failing on duplicate slugs or permalinks."""
    indexer = CollectionIndexer()
    indexer.extend(documents)
    return indexer.build()
