"""Element tables and the named option presets built on them."""

from enum import Enum

NON_PROSE_ELEMENTS = frozenset(
    {
        "br",
        "hr",
        # Media / source elements
        "script",
        "style",
        "img",
        "video",
        "audio",
        "canvas",
        "svg",
        "map",
        "object",
        # Input elements
        "input",
        "textarea",
        "select",
        "option",
        "optgroup",
        "button",
    }
)

# Elements that will not contain prose, or block elements where prose
# must not be matched across the element border.
NON_CONTIGUOUS_PROSE_ELEMENTS = frozenset(
    {
        # Block elements
        "address",
        "article",
        "aside",
        "blockquote",
        "dd",
        "div",
        "dl",
        "fieldset",
        "figcaption",
        "figure",
        "footer",
        "form",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "header",
        "hgroup",
        "hr",
        "main",
        "nav",
        "noscript",
        "ol",
        "output",
        "p",
        "pre",
        "section",
        "ul",
        # Misc. elements that are not part of continuous inline prose
        "br",
        "li",
        "summary",
        "dt",
        "details",
        "rp",
        "rt",
        "rtc",
        "script",
        "style",
        "img",
        "video",
        "audio",
        "canvas",
        "svg",
        "map",
        "object",
        "input",
        "textarea",
        "select",
        "option",
        "optgroup",
        "button",
        # Table related elements
        "table",
        "tbody",
        "thead",
        "th",
        "tr",
        "td",
        "caption",
        "col",
        "tfoot",
        "colgroup",
    }
)


class Preset(str, Enum):
    """Named bundles of filter_elements / force_context defaults."""

    PROSE = "prose"


def element_name(el) -> str:
    """Lowercase local name of an element, ignoring any namespace prefix."""
    return (el.localName or el.nodeName).lower()


def non_inline_prose(el) -> bool:
    """Return True for elements whose text must not fuse with surrounding prose."""
    return element_name(el) in NON_CONTIGUOUS_PROSE_ELEMENTS


def is_prose_element(el) -> bool:
    """Return True unless the element holds media, scripting or form controls."""
    return element_name(el) not in NON_PROSE_ELEMENTS


PRESETS = {
    Preset.PROSE: {
        "force_context": non_inline_prose,
        "filter_elements": is_prose_element,
    },
}
