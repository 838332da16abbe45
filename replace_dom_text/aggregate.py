"""Text aggregation: the matcher's view of a DOM tree's text.

The aggregation is a nested list of strings. Sibling text and the text of
ordinary inline elements are fused into one string so that matches can
cross element boundaries; elements that force their own context become a
nested list, bounded by fresh strings on either side.
"""

from collections.abc import Iterator
from typing import Callable, Union
from xml.dom import Node

TextAgg = list[Union[str, "TextAgg"]]
ElementPredicate = Callable[[Node], bool]

_CONTAINER_TYPES = (Node.ELEMENT_NODE, Node.DOCUMENT_NODE, Node.DOCUMENT_FRAGMENT_NODE)


def aggregate_text(
    node: Node,
    filter_elements: ElementPredicate | None = None,
    force_context: bool | ElementPredicate | None = None,
) -> TextAgg:
    """Build the aggregation for ``node``.

    Args:
        node: Root of the subtree to read.
        filter_elements: Predicate; elements for which it returns False
            contribute no text.
        force_context: True, False/None, or a predicate selecting elements
            whose text must not fuse with their siblings' text.

    Returns:
        Nested list of strings whose leaves, concatenated in order, are the
        visible text of the subtree.
    """

    def forced(el: Node) -> bool:
        if callable(force_context):
            return bool(force_context(el))
        return bool(force_context)

    def get_text(node: Node) -> TextAgg:
        if node.nodeType == Node.TEXT_NODE:
            return [node.data]
        if node.nodeType not in _CONTAINER_TYPES:
            return []
        if node.nodeType == Node.ELEMENT_NODE and filter_elements and not filter_elements(node):
            return []

        txt: TextAgg = [""]
        for child in node.childNodes:
            if child.nodeType == Node.TEXT_NODE:
                txt[-1] += child.data
                continue
            if child.nodeType != Node.ELEMENT_NODE:
                continue

            inner = get_text(child)
            if forced(child):
                txt.append(inner)
                txt.append("")
                continue

            # Inline element: its leading text continues the current string
            if inner and isinstance(inner[0], str):
                txt[-1] += inner.pop(0)
            if inner:
                txt.append(inner)
                txt.append("")
        return txt

    return get_text(node)


def flatten(agg: TextAgg) -> Iterator[str]:
    """Yield the leaf strings of an aggregation in document order."""
    for item in agg:
        if isinstance(item, str):
            yield item
        else:
            yield from flatten(item)
