"""Editing session server holding the open-document cache."""

import logging
from dataclasses import dataclass, field

from .cache import DocumentCache

logger = logging.getLogger(__name__)


@dataclass
class ReplaceServer:
    """Session state shared by the tools."""

    name: str
    cache: DocumentCache = field(default_factory=DocumentCache)

    def shutdown(self) -> list[str]:
        """Save dirty documents and empty the cache.

        Best-effort: continues even if individual saves fail.

        Returns:
            Paths of documents whose unsaved edits could not be written.
        """
        failed = []
        for cached_doc in self.cache.all():
            if cached_doc.dirty:
                try:
                    cached_doc.save()
                    logger.info("Saved dirty document: %s", cached_doc.path)
                except Exception as e:
                    logger.error("Failed to save %s: %s", cached_doc.path, e)
                    failed.append(cached_doc.path)
            self.cache.remove(cached_doc.path)
            cached_doc.document.close()
        return failed


def create_server(max_documents: int = 10) -> ReplaceServer:
    """Create a new server instance.

    Args:
        max_documents: Maximum documents to keep in cache.

    Returns:
        Configured ReplaceServer instance.
    """
    return ReplaceServer(name="replace-dom-text", cache=DocumentCache(max_documents=max_documents))
