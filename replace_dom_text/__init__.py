"""replace_dom_text - find and replace text across element boundaries in a DOM tree.

Example:
    import re

    from replace_dom_text import find_and_replace_dom_text, parse_fragment

    root = parse_fragment("Testing 123 HE<em>LLO there</em>")
    finder = find_and_replace_dom_text(root, re.compile("hello", re.I), wrap="span")
    # Testing 123 <span>HE</span><em><span>LLO</span> there</em>
    finder.revert()
"""

from .aggregate import TextAgg, aggregate_text, flatten
from .exceptions import DocumentError, InvalidOptionError, ReplaceDOMTextError, ZeroLengthMatchError
from .finder import Finder, Portion, Splice, find_and_replace_dom_text
from .matching import Match, search
from .options import Options, PortionMode
from .presets import (
    NON_CONTIGUOUS_PROSE_ELEMENTS,
    NON_PROSE_ELEMENTS,
    PRESETS,
    Preset,
    is_prose_element,
    non_inline_prose,
)
from .template import expand_template
from .xml_editor import XMLDocument, inner_xml, parse_fragment, visible_text

__version__ = "1.0.0"

__all__ = [
    "DocumentError",
    "Finder",
    "InvalidOptionError",
    "Match",
    "NON_CONTIGUOUS_PROSE_ELEMENTS",
    "NON_PROSE_ELEMENTS",
    "Options",
    "PRESETS",
    "Portion",
    "PortionMode",
    "Preset",
    "ReplaceDOMTextError",
    "Splice",
    "TextAgg",
    "XMLDocument",
    "ZeroLengthMatchError",
    "aggregate_text",
    "expand_template",
    "find_and_replace_dom_text",
    "flatten",
    "inner_xml",
    "is_prose_element",
    "non_inline_prose",
    "parse_fragment",
    "search",
    "visible_text",
]
