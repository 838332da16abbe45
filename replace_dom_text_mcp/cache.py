"""Open-document cache for editing sessions.

Documents are kept in least-recently-used order. A document is dirty when
its serialized form no longer matches what was last read from or written
to disk, so undoing every pass makes it clean again.
"""

import hashlib
import logging
import os
from collections import OrderedDict
from collections.abc import Iterator
from dataclasses import dataclass, field

from replace_dom_text import XMLDocument

logger = logging.getLogger(__name__)


def normalize_path(path: str) -> str:
    """Normalize path to absolute canonical form.

    Expands ~, resolves relative paths, and follows symlinks.
    """
    return os.path.realpath(os.path.expanduser(path))


def _fingerprint(document: XMLDocument) -> str:
    return hashlib.sha256(document.to_xml().encode("utf-8")).hexdigest()


def _stat_mtime(path: str) -> int | None:
    try:
        return os.stat(path).st_mtime_ns
    except FileNotFoundError:
        return None


@dataclass
class CachedDocument:
    """An open document plus the on-disk state it was last synced with."""

    path: str
    document: XMLDocument
    mtime_ns: int | None = field(default=None, init=False)
    saved_fingerprint: str = field(default="", init=False)

    def __post_init__(self):
        self.path = normalize_path(self.path)
        self.mark_synced()

    @property
    def dirty(self) -> bool:
        """Whether the document differs from the last loaded or saved version."""
        return _fingerprint(self.document) != self.saved_fingerprint

    @property
    def undo_depth(self) -> int:
        return self.document.edit_count

    def mark_synced(self) -> None:
        """Record the current document and file mtime as the saved state."""
        self.saved_fingerprint = _fingerprint(self.document)
        self.mtime_ns = _stat_mtime(self.path)

    def has_external_changes(self) -> bool:
        """Check if the file was rewritten on disk since it was last synced.

        A file that has been deleted is not treated as changed.
        """
        current = _stat_mtime(self.path)
        return current is not None and current != self.mtime_ns

    def save(self) -> None:
        """Write the document back to its path and mark it synced."""
        self.document.save(self.path)
        self.mark_synced()


class DocumentCache:
    """LRU cache of open documents keyed by normalized path."""

    def __init__(self, max_documents: int = 10):
        """Initialize cache with maximum document count.

        Args:
            max_documents: Maximum number of documents to keep open.
        """
        self.max_documents = max_documents
        self._cache: OrderedDict[str, CachedDocument] = OrderedDict()

    @property
    def size(self) -> int:
        """Number of documents currently in cache."""
        return len(self._cache)

    def __contains__(self, path: str) -> bool:
        return normalize_path(path) in self._cache

    def get(self, path: str) -> CachedDocument | None:
        """Get a cached document by path and mark it most recently used."""
        key = normalize_path(path)
        cached = self._cache.get(key)
        if cached is not None:
            self._cache.move_to_end(key)
        return cached

    def put(self, cached_doc: CachedDocument) -> None:
        """Add a document, evicting the least recently used one if full."""
        key = cached_doc.path
        if key not in self._cache and self.size >= self.max_documents:
            self._evict_lru()
        self._cache[key] = cached_doc
        self._cache.move_to_end(key)

    def remove(self, path: str) -> CachedDocument | None:
        """Remove a document from the cache.

        Returns:
            The removed CachedDocument, or None if not found.
        """
        return self._cache.pop(normalize_path(path), None)

    def all(self) -> Iterator[CachedDocument]:
        """Iterate over cached documents, least recently used first."""
        yield from list(self._cache.values())

    def _evict_lru(self) -> None:
        """Evict the least recently used document.

        Dirty documents are saved first. If that save fails the document
        stays in the cache so no edits are lost.
        """
        if not self._cache:
            return

        lru_path, lru_doc = next(iter(self._cache.items()))
        if lru_doc.dirty:
            try:
                lru_doc.save()
            except Exception:
                logger.exception("Failed to save during eviction: %s", lru_path)
                return

        logger.info("Evicting %s from document cache", lru_path)
        del self._cache[lru_path]
        lru_doc.document.close()
