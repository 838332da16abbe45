"""XML/XHTML document loading and editing on top of the Finder.

Documents are parsed with defusedxml so untrusted files cannot trigger
entity expansion or external entity resolution.
"""

import logging
import re
from xml.dom import Node
from xml.dom.minidom import Document, Element
from xml.parsers.expat import ExpatError

from defusedxml import DefusedXmlException, minidom

from .aggregate import ElementPredicate, aggregate_text, flatten
from .exceptions import DocumentError
from .finder import Finder
from .matching import search
from .options import Options

logger = logging.getLogger(__name__)


def _parse(xml: str | bytes) -> Document:
    try:
        return minidom.parseString(xml)
    except (ExpatError, DefusedXmlException) as e:
        raise DocumentError(f"Could not parse document: {e}") from e


def parse_fragment(markup: str, container: str = "div") -> Element:
    """Parse a markup fragment into a fresh ``container`` element.

    Args:
        markup: Well-formed XML content (text and elements, no root required).
        container: Tag name of the element wrapping the fragment.

    Returns:
        The container element; it is the document element of a new Document.

    Raises:
        DocumentError: If the markup is not well-formed.
    """
    return _parse(f"<{container}>{markup}</{container}>").documentElement


def inner_xml(node: Node) -> str:
    """Serialize the children of ``node``."""
    return "".join(child.toxml() for child in node.childNodes)


def visible_text(node: Node, filter_elements: ElementPredicate | None = None) -> str:
    """Text of ``node`` as the matcher sees it."""
    return "".join(flatten(aggregate_text(node, filter_elements)))


class XMLDocument:
    """An XML document with an undo history of find/replace passes."""

    def __init__(self, dom: Document, path: str | None = None):
        """Initialize with a parsed DOM.

        Args:
            dom: xml.dom.minidom Document.
            path: File the document was read from, used as the default save target.
        """
        self.dom = dom
        self.path = path
        self._finders: list[Finder] = []

    @classmethod
    def open(cls, path: str) -> "XMLDocument":
        """Read and parse an XML file.

        Raises:
            DocumentError: If the file is missing or not well-formed.
        """
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise DocumentError(f"Could not read {path}: {e}") from e
        logger.debug("Opened %s (%d bytes)", path, len(data))
        return cls(_parse(data), path=path)

    @classmethod
    def from_string(cls, xml: str) -> "XMLDocument":
        """Parse a document from a string."""
        return cls(_parse(xml))

    @property
    def root(self) -> Element:
        """The document element."""
        return self.dom.documentElement

    @property
    def edit_count(self) -> int:
        """Number of find/replace passes that can still be undone."""
        return len(self._finders)

    def select(self, tag: str | None = None, index: int = 0) -> Element:
        """Return the ``index``-th element named ``tag``, or the root when tag is None.

        Raises:
            DocumentError: If no such element exists.
        """
        if tag is None:
            return self.root
        elements = self.dom.getElementsByTagName(tag)
        if not 0 <= index < len(elements):
            raise DocumentError(f"Only {len(elements)} <{tag}> element(s) found, index={index} requested")
        return elements[index]

    def find_and_replace(self, find: str | re.Pattern, *, tag: str | None = None, index: int = 0, **options) -> Finder:
        """Run a find/replace pass and push it onto the undo history.

        Args:
            find: Literal string or compiled pattern.
            tag: Restrict the pass to the element selected by select().
            index: Which ``tag`` element to use (0-indexed).
            **options: Options fields (replace, wrap, preset, ...).

        Returns:
            The Finder for this pass.
        """
        finder = Finder(self.select(tag, index), Options(find=find, **options))
        if finder.reverts:
            self._finders.append(finder)
        logger.debug("find_and_replace(%r) matched %d time(s)", find, len(finder.matches))
        return finder

    def count_matches(self, find: str | re.Pattern, *, tag: str | None = None, index: int = 0, **options) -> int:
        """Count matches without modifying the document."""
        resolved = Options(find=find, **options).resolve()
        aggregation = aggregate_text(self.select(tag, index), resolved.filter_elements, resolved.force_context)
        return len(search(resolved.find, aggregation, resolved.global_match))

    def undo(self) -> Finder | None:
        """Revert the most recent pass. Returns it, or None if there was nothing to undo."""
        if not self._finders:
            return None
        return self._finders.pop().revert()

    def revert_all(self) -> int:
        """Revert every pass, newest first. Returns the number reverted."""
        count = 0
        while self.undo() is not None:
            count += 1
        return count

    def visible_text(
        self, tag: str | None = None, index: int = 0, filter_elements: ElementPredicate | None = None
    ) -> str:
        """Text of the selected element as the matcher sees it."""
        return visible_text(self.select(tag, index), filter_elements)

    def to_xml(self) -> str:
        """Serialize the whole document."""
        return self.dom.toxml()

    def save(self, path: str | None = None) -> str:
        """Write the document to ``path`` (default: the file it was opened from).

        Returns:
            The path written.

        Raises:
            DocumentError: If there is no target path or it cannot be written.
        """
        target = path or self.path
        if not target:
            raise DocumentError("No path to save to")
        try:
            with open(target, "wb") as f:
                f.write(self.dom.toxml(encoding="utf-8"))
        except OSError as e:
            raise DocumentError(f"Could not write {target}: {e}") from e
        self.path = target
        return target

    def close(self) -> None:
        """Drop the undo history and release the DOM."""
        self._finders.clear()
        if self.dom is not None:
            self.dom.unlink()
            self.dom = None
