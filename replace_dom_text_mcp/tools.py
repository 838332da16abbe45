"""Tool functions for find/replace editing sessions.

Every tool returns a JSON-ready dict with a ``success`` flag and never
raises; failures are reported as ``{"success": False, "error": ...}``.
"""

import logging
import os
import re
from typing import Any

from replace_dom_text import DocumentError, ReplaceDOMTextError, XMLDocument

from .cache import CachedDocument, normalize_path
from .server import ReplaceServer

logger = logging.getLogger(__name__)


def _error(message: str) -> dict[str, Any]:
    return {"success": False, "error": message}


def _lookup(server: ReplaceServer, path: str, *, editing: bool = False) -> tuple[CachedDocument | None, dict | None]:
    """Find an open document.

    Args:
        server: The server instance.
        path: Path the caller used to open the document.
        editing: Also refuse documents whose file changed on disk.

    Returns:
        (cached, None) on success, or (None, error dict).
    """
    cached = server.cache.get(path)
    if cached is None:
        return None, _error(f"Document not open: {path}")
    if editing and cached.has_external_changes():
        return None, _error(f"File was modified externally: {cached.path}. Use reload_document or force_save.")
    return cached, None


def _build_find(find: str, regex: bool, ignore_case: bool) -> str | re.Pattern:
    """Literal text stays a string unless case folding is needed; regex text is compiled."""
    if regex:
        return re.compile(find, re.IGNORECASE if ignore_case else 0)
    if ignore_case:
        return re.compile(re.escape(find), re.IGNORECASE)
    return find


def _status(cached: CachedDocument, **extra) -> dict[str, Any]:
    return {"success": True, "path": cached.path, "dirty": cached.dirty, "undo_depth": cached.undo_depth, **extra}


# =============================================================================
# Document Lifecycle Tools
# =============================================================================


def open_document(server: ReplaceServer, path: str) -> dict[str, Any]:
    """Open a document and add it to the cache.

    Args:
        server: The server instance.
        path: Path to the XML/XHTML document.

    Returns:
        Result dict with success, path and cached flag.
    """
    normalized = normalize_path(path)
    if server.cache.get(normalized) is not None:
        return {"success": True, "path": normalized, "cached": True}
    if not os.path.exists(normalized):
        return _error(f"File not found: {path}")

    try:
        doc = XMLDocument.open(normalized)
    except DocumentError as e:
        return _error(f"Failed to open document: {e}")

    server.cache.put(CachedDocument(path=normalized, document=doc))
    logger.info("Opened %s", normalized)
    return {"success": True, "path": normalized, "cached": False}


def save_document(server: ReplaceServer, path: str) -> dict[str, Any]:
    """Save a document to disk, refusing if the file changed externally."""
    cached, error = _lookup(server, path, editing=True)
    if error:
        return error
    return _save(cached)


def force_save(server: ReplaceServer, path: str) -> dict[str, Any]:
    """Save a document, overwriting any external changes."""
    cached, error = _lookup(server, path)
    if error:
        return error
    return _save(cached)


def _save(cached: CachedDocument) -> dict[str, Any]:
    try:
        cached.save()
    except DocumentError as e:
        return _error(f"Failed to save: {e}")
    logger.info("Saved %s", cached.path)
    return {"success": True, "path": cached.path}


def close_document(server: ReplaceServer, path: str) -> dict[str, Any]:
    """Close a document and remove it from the cache.

    Returns:
        Result dict with success status and a warning if edits were discarded.
    """
    cached, error = _lookup(server, path)
    if error:
        return error

    result: dict[str, Any] = {"success": True, "path": cached.path}
    if cached.dirty:
        result["warning"] = "Document had unsaved changes that were discarded."

    server.cache.remove(cached.path)
    cached.document.close()
    logger.info("Closed %s", cached.path)
    return result


def reload_document(server: ReplaceServer, path: str) -> dict[str, Any]:
    """Reload a document from disk, discarding cached edits and undo history."""
    cached, error = _lookup(server, path)
    if error:
        return error

    try:
        doc = XMLDocument.open(cached.path)
    except DocumentError as e:
        return _error(f"Failed to reload: {e}")

    result: dict[str, Any] = {"success": True, "path": cached.path}
    if cached.dirty:
        result["warning"] = "Unsaved changes were discarded."

    cached.document.close()
    server.cache.put(CachedDocument(path=cached.path, document=doc))
    return result


# =============================================================================
# Edit Tools
# =============================================================================


def find_and_replace(
    server: ReplaceServer,
    path: str,
    find: str,
    replace: str | None = None,
    wrap: str | None = None,
    wrap_class: str | None = None,
    regex: bool = False,
    ignore_case: bool = False,
    global_match: bool = True,
    portion_mode: str = "retain",
    preset: str | None = None,
    tag: str | None = None,
    index: int = 0,
) -> dict[str, Any]:
    """Replace or wrap matches of ``find`` in a document.

    Args:
        server: The server instance.
        path: Path to the document.
        find: Literal text, or a regular expression when ``regex`` is True.
        replace: Replacement template ($1, $0, $&, $`, $').
        wrap: Element name to wrap each match portion in.
        wrap_class: Class attribute for created wrappers.
        regex: Treat ``find`` as a regular expression.
        ignore_case: Case-insensitive search.
        global_match: Replace every match (default) or only the first.
        portion_mode: "retain" or "first".
        preset: Named preset, e.g. "prose".
        tag: Restrict the edit to an element with this tag name.
        index: Which ``tag`` element to use (0 = first).

    Returns:
        Result dict with the number of matches and replaced portions.
    """
    cached, error = _lookup(server, path, editing=True)
    if error:
        return error

    try:
        finder = cached.document.find_and_replace(
            _build_find(find, regex, ignore_case),
            tag=tag,
            index=index,
            replace=replace,
            wrap=wrap,
            wrap_class=wrap_class,
            portion_mode=portion_mode,
            preset=preset,
            global_match=global_match,
        )
    except re.error as e:
        return _error(f"Invalid pattern: {e}")
    except ReplaceDOMTextError as e:
        return _error(str(e))

    return _status(cached, matches=len(finder.matches), portions=len(finder.reverts))


def undo(server: ReplaceServer, path: str) -> dict[str, Any]:
    """Revert the most recent find/replace pass on a document."""
    cached, error = _lookup(server, path)
    if error:
        return error

    finder = cached.document.undo()
    if finder is None:
        return _error("Nothing to undo")
    return _status(cached, reverted_matches=len(finder.matches))


def revert_all(server: ReplaceServer, path: str) -> dict[str, Any]:
    """Revert every find/replace pass made since the document was opened."""
    cached, error = _lookup(server, path)
    if error:
        return error
    return _status(cached, reverted=cached.document.revert_all())


# =============================================================================
# Read Tools
# =============================================================================


def count_matches(
    server: ReplaceServer,
    path: str,
    find: str,
    regex: bool = False,
    ignore_case: bool = False,
    preset: str | None = None,
    tag: str | None = None,
    index: int = 0,
) -> dict[str, Any]:
    """Count matches of ``find`` without modifying the document."""
    cached, error = _lookup(server, path)
    if error:
        return error

    try:
        pattern = _build_find(find, regex, ignore_case)
        count = cached.document.count_matches(pattern, tag=tag, index=index, preset=preset, global_match=True)
    except re.error as e:
        return _error(f"Invalid pattern: {e}")
    except ReplaceDOMTextError as e:
        return _error(str(e))
    return {"success": True, "count": count}


def get_visible_text(server: ReplaceServer, path: str, tag: str | None = None, index: int = 0) -> dict[str, Any]:
    """Get the text of a document (or one of its elements) as the matcher sees it."""
    cached, error = _lookup(server, path)
    if error:
        return error

    try:
        text = cached.document.visible_text(tag=tag, index=index)
    except DocumentError as e:
        return _error(str(e))
    return {"success": True, "text": text}
