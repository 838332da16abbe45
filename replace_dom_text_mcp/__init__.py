"""Tool-style editing sessions over XML/XHTML files using replace_dom_text."""

from .cache import CachedDocument, DocumentCache, normalize_path
from .server import ReplaceServer, create_server

__all__ = ["CachedDocument", "DocumentCache", "ReplaceServer", "create_server", "normalize_path"]
