"""Options accepted by find_and_replace_dom_text."""

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable
from xml.dom import Node

from .aggregate import ElementPredicate
from .exceptions import InvalidOptionError
from .presets import PRESETS, Preset


class PortionMode(str, Enum):
    """How a multi-node match's replacement is spread over its portions."""

    RETAIN = "retain"
    FIRST = "first"


# XML Name, optionally prefixed: a letter or underscore, then letters, digits, "_", "-" or "."
_ELEMENT_NAME = re.compile(r"[^\W\d][\w.\-]*(?::[^\W\d][\w.\-]*)?")


@dataclass
class Options:
    """Find/replace configuration.

    Attributes:
        find: Text to search for. A string is escaped and searched globally;
            a compiled pattern is single-shot unless global_match is set.
        replace: Template string ($n, $0, $&, $`, $') or a function
            ``(portion, match) -> str | Node``. None means "$&".
        wrap: Element name, or a stencil element cloned for every portion.
        wrap_class: Class attribute applied to each created wrapper.
        portion_mode: RETAIN (every portion replaced in place) or FIRST
            (the whole replacement goes into the first portion).
        filter_elements: Returning False excludes an element and its subtree.
        force_context: True, False, or a predicate; forced elements are
            their own matching context.
        preset: Named bundle of filter_elements / force_context defaults.
        global_match: Explicit global flag; None picks the default for the
            kind of ``find``.
    """

    find: str | re.Pattern
    replace: str | Callable[..., Any] | None = None
    wrap: str | Node | None = None
    wrap_class: str | None = None
    portion_mode: PortionMode | str = PortionMode.RETAIN
    filter_elements: ElementPredicate | None = None
    force_context: bool | ElementPredicate | None = None
    preset: Preset | str | None = None
    global_match: bool | None = None

    def resolve(self) -> "Options":
        """Return a copy with defaults applied and preset values filled in."""
        if isinstance(self.find, str):
            if not self.find:
                raise InvalidOptionError("find must not be an empty string")
        elif not isinstance(self.find, re.Pattern):
            raise InvalidOptionError(f"find must be a string or compiled pattern, got {type(self.find).__name__}")

        if isinstance(self.wrap, str):
            if self.wrap and not _ELEMENT_NAME.fullmatch(self.wrap):
                raise InvalidOptionError(f"wrap is not a valid element name: {self.wrap!r}")
        elif self.wrap is not None and not isinstance(self.wrap, Node):
            raise InvalidOptionError(f"wrap must be an element name or a Node, got {type(self.wrap).__name__}")

        try:
            portion_mode = PortionMode(self.portion_mode or PortionMode.RETAIN)
        except ValueError:
            raise InvalidOptionError(f"Unknown portion mode: {self.portion_mode!r}") from None

        resolved = replace(self, portion_mode=portion_mode)

        if self.preset is not None:
            try:
                preset = Preset(self.preset)
            except ValueError:
                raise InvalidOptionError(f"Unknown preset: {self.preset!r}") from None
            # Explicit options win over preset values
            for name, value in PRESETS[preset].items():
                if getattr(resolved, name) is None:
                    setattr(resolved, name, value)
            resolved.preset = preset

        if resolved.global_match is None:
            resolved.global_match = isinstance(self.find, str)

        return resolved

    def accepts(self, el: Node) -> bool:
        """Whether ``el`` passes filter_elements."""
        return self.filter_elements is None or bool(self.filter_elements(el))
