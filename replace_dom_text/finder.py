"""Find and replace text across element boundaries in a DOM tree.

The Finder reads the tree's text once (see aggregate.py), runs the pattern
over it, and then walks the live tree a second time. While walking it maps
each match's [start, end) range back onto the text nodes it touches, splits
those nodes and splices in replacement nodes. Every splice is logged so the
whole pass can be undone with revert().
"""

import logging
from collections import deque
from dataclasses import dataclass
from xml.dom import Node

from .aggregate import aggregate_text
from .matching import Match, search
from .options import Options, PortionMode
from .template import expand_template

logger = logging.getLogger(__name__)


@dataclass
class Portion:
    """One text node's share of a match.

    Attributes:
        node: The text node the portion was read from.
        index: Position of this portion within the match (0-based).
        text: The part of the node's text that belongs to the match.
        index_in_match: Offset of ``text`` within the whole matched text.
        index_in_node: Offset where the portion starts in the node's text.
        end_index_in_node: Offset where the portion ends in the node's text.
        is_end: True for the portion that completes the match.
    """

    node: Node
    index: int
    text: str
    index_in_match: int
    index_in_node: int
    end_index_in_node: int
    is_end: bool = False


@dataclass
class Splice:
    """Undo record for one text node swapped out of the tree."""

    parent: Node
    original: Node
    replacement: Node
    leftovers: tuple[Node, ...] = ()

    def undo(self) -> None:
        """Put the original node back and drop the nodes created around it."""
        for node in self.leftovers:
            if node.parentNode is self.parent:
                self.parent.removeChild(node)
        if self.replacement.parentNode is not None:
            self.replacement.parentNode.replaceChild(self.original, self.replacement)


class Finder:
    """Encapsulates one find-and-replace pass over a subtree.

    Searching and replacing happen on construction; the instance is the
    handle used to inspect the matches and to revert the edits.
    """

    def __init__(self, node: Node, options: Options):
        self.node = node
        self.options = options.resolve()
        self.document = node if node.nodeType == Node.DOCUMENT_NODE else node.ownerDocument
        self.reverts: list[Splice] = []
        self._created: set[Node] = set()

        self.matches = self._search()
        if self.matches:
            self._process_matches()

    def is_created(self, node: Node) -> bool:
        """Whether ``node`` was synthesized by this finder as a replacement."""
        return node in self._created

    def revert(self) -> "Finder":
        """Undo every edit, newest first. Calling it again is a no-op."""
        for splice in reversed(self.reverts):
            splice.undo()
        self.reverts = []
        self._created.clear()
        return self

    def _search(self) -> list[Match]:
        aggregation = aggregate_text(self.node, self.options.filter_elements, self.options.force_context)
        return search(self.options.find, aggregation, self.options.global_match)

    def _next_node(self, node: Node, stack: list[Node]) -> Node | None:
        """Next node in document order after ``node``'s subtree, never leaving the root."""
        while node is not self.node:
            if node.nextSibling is not None:
                return node.nextSibling
            if not stack:
                return None
            node = stack.pop()
        return None

    def _process_matches(self) -> None:
        """Walk the tree, resolving portions for each match in offset order."""
        pending = deque(self.matches)
        match = pending.popleft()

        start_portion: Portion | None = None
        end_portion: Portion | None = None
        inner_portions: list[Portion] = []
        at_index = 0
        portion_index = 0
        consumed_in_match = 0
        stack: list[Node] = []
        cur: Node | None = self.node

        while cur is not None:
            # Replacement nodes did not exist when the text was aggregated
            if cur in self._created:
                cur = self._next_node(cur, stack)
                continue

            if cur.nodeType == Node.TEXT_NODE:
                text = cur.data
                node_end = at_index + len(text)

                if end_portion is None and node_end >= match.end_index:
                    local_start = max(0, match.start_index - at_index)
                    local_end = match.end_index - at_index
                    end_portion = Portion(
                        node=cur,
                        index=portion_index,
                        text=text[local_start:local_end],
                        index_in_match=consumed_in_match,
                        index_in_node=local_start,
                        end_index_in_node=local_end,
                        is_end=True,
                    )
                    portion_index += 1
                elif start_portion is not None:
                    inner_portions.append(
                        Portion(
                            node=cur,
                            index=portion_index,
                            text=text,
                            index_in_match=consumed_in_match,
                            index_in_node=0,
                            end_index_in_node=len(text),
                        )
                    )
                    portion_index += 1
                    consumed_in_match += len(text)

                if start_portion is None and node_end > match.start_index:
                    local_start = match.start_index - at_index
                    local_end = min(len(text), match.end_index - at_index)
                    start_portion = Portion(
                        node=cur,
                        index=portion_index,
                        text=text[local_start:local_end],
                        index_in_match=0,
                        index_in_node=local_start,
                        end_index_in_node=local_end,
                    )
                    portion_index += 1
                    consumed_in_match = len(start_portion.text)

                at_index = node_end

            if start_portion is not None and end_portion is not None:
                next_node = self._replace_match(match, start_portion, inner_portions, end_portion)
                start_portion = end_portion = None
                inner_portions = []
                portion_index = 0
                consumed_in_match = 0

                if next_node is None:
                    cur = self._next_node(cur, stack)
                else:
                    at_index = match.end_index
                    cur = next_node

                if not pending:
                    break
                match = pending.popleft()
                continue

            skip_children = cur.nodeType == Node.ELEMENT_NODE and not self.options.accepts(cur)
            if not skip_children and cur.firstChild is not None:
                stack.append(cur)
                cur = cur.firstChild
                continue

            cur = self._next_node(cur, stack)

    def _replace_match(
        self,
        match: Match,
        start_portion: Portion,
        inner_portions: list[Portion],
        end_portion: Portion,
    ) -> Node | None:
        """Splice replacements for every portion of ``match`` into the tree.

        Returns:
            The node traversal should continue from: the text left over after
            the match if any, else the last replacement node. None if the
            match was skipped.
        """
        start_node = start_portion.node
        end_node = end_portion.node
        if start_node.nodeType != Node.TEXT_NODE or end_node.nodeType != Node.TEXT_NODE:
            logger.debug("Skipping %r: portion node is not a text node", match)
            return None

        if start_node is end_node:
            replacement = self._portion_replacement(end_portion, match)
            return self._splice(end_portion, replacement)

        # Build every replacement before touching the tree
        first = self._portion_replacement(start_portion, match)
        inner = [(portion, self._portion_replacement(portion, match)) for portion in inner_portions]
        last = self._portion_replacement(end_portion, match)

        self._splice(start_portion, first)
        for portion, replacement in inner:
            self._splice(portion, replacement)
        return self._splice(end_portion, last)

    def _splice(self, portion: Portion, replacement: Node) -> Node:
        """Swap ``portion.node`` for its leading text, ``replacement`` and its trailing text."""
        node = portion.node
        parent = node.parentNode
        data = node.data

        preceding = following = None
        if portion.index_in_node > 0:
            preceding = self.document.createTextNode(data[: portion.index_in_node])
            parent.insertBefore(preceding, node)
        parent.insertBefore(replacement, node)
        if portion.end_index_in_node < len(data):
            following = self.document.createTextNode(data[portion.end_index_in_node :])
            parent.insertBefore(following, node)
        parent.removeChild(node)

        self._created.add(replacement)
        leftovers = tuple(n for n in (preceding, following) if n is not None)
        self.reverts.append(Splice(parent, node, replacement, leftovers))
        return following if following is not None else replacement

    def _portion_replacement(self, portion: Portion, match: Match) -> Node:
        replace = self.options.replace

        if callable(replace):
            result = replace(portion, match)
            if isinstance(result, Node):
                return result
            return self.document.createTextNode(str(result))

        text = self._replacement_text("$&" if replace is None else replace, portion, match)
        text_node = self.document.createTextNode(text)

        wrap = self.options.wrap
        # No empty wrappers
        if wrap is None or wrap == "" or not text:
            return text_node

        if isinstance(wrap, str):
            el = self.document.createElement(wrap)
        else:
            el = self.document.importNode(wrap, False)
        if self.options.wrap_class:
            el.setAttribute("class", self.options.wrap_class)
        el.appendChild(text_node)
        return el

    def _replacement_text(self, template: str, portion: Portion, match: Match) -> str:
        """The slice of the expanded template that belongs to ``portion``."""
        portion_mode = self.options.portion_mode
        if portion_mode is PortionMode.FIRST and portion.index_in_match > 0:
            return ""

        text = expand_template(template, match)

        if portion_mode is PortionMode.FIRST:
            return text
        if portion.is_end:
            return text[portion.index_in_match :]
        return text[portion.index_in_match : portion.index_in_match + len(portion.text)]


def find_and_replace_dom_text(node: Node, find, **options) -> Finder:
    """Search ``node`` for ``find`` and replace or wrap every match.

    Matches may span several text nodes; each touched node is replaced
    individually so the surrounding markup is preserved.

    Args:
        node: Root of the subtree to search (Document, Element or fragment).
        find: Literal string or compiled ``re`` pattern.
        **options: Any other Options field (replace, wrap, wrap_class,
            portion_mode, filter_elements, force_context, preset, global_match).

    Returns:
        The Finder, whose revert() undoes the edits.

    Raises:
        ZeroLengthMatchError: The pattern matched the empty string. Nothing
            is modified in that case.
        InvalidOptionError: An option value is not recognised.
    """
    return Finder(node, Options(find=find, **options))
