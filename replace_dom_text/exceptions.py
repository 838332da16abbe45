"""Exceptions raised by replace_dom_text."""


class ReplaceDOMTextError(Exception):
    """Base class for all replace_dom_text errors."""


class ZeroLengthMatchError(ReplaceDOMTextError, ValueError):
    """The pattern produced a match that consumed no text."""


class InvalidOptionError(ReplaceDOMTextError, ValueError):
    """An option value is missing or not recognised."""


class DocumentError(ReplaceDOMTextError):
    """A document could not be read or parsed."""
