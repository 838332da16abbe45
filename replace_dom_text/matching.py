"""Running the pattern over an aggregation and recording global offsets."""

import logging
import re
from dataclasses import dataclass

from .aggregate import TextAgg, flatten
from .exceptions import ZeroLengthMatchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Match:
    """A match located in the concatenated text of an aggregation.

    Offsets are relative to ``input``, the full concatenated text, never to
    the individual string the pattern engine was run on.
    """

    index: int
    start_index: int
    end_index: int
    text: str
    groups: tuple[str | None, ...]
    input: str

    def group(self, n: int = 0) -> str | None:
        """Return group ``n`` (0 is the whole match), or None if it did not take part."""
        if n == 0:
            return self.text
        if 0 < n <= len(self.groups):
            return self.groups[n - 1]
        return None

    def __repr__(self) -> str:
        return f"Match(#{self.index} [{self.start_index}:{self.end_index}] {self.text!r})"


def compile_find(find: str | re.Pattern) -> re.Pattern:
    """Literal strings are escaped; compiled patterns are used as-is."""
    if isinstance(find, str):
        return re.compile(re.escape(find))
    return find


def _prep_match(m: re.Match, match_index: int, offset: int, full_text: str) -> Match:
    if not m.group(0):
        raise ZeroLengthMatchError(f"Pattern {m.re.pattern!r} produced a zero-length match; cannot replace it")
    return Match(
        index=match_index,
        start_index=offset + m.start(),
        end_index=offset + m.end(),
        text=m.group(0),
        groups=m.groups(),
        input=full_text,
    )


def search(find: str | re.Pattern, aggregation: TextAgg, global_match: bool = True) -> list[Match]:
    """Find matches across the leaf strings of an aggregation.

    Each leaf string is searched on its own, so matches never cross a forced
    context boundary. Leaves are laid end to end to form a single offset space.

    Args:
        find: Literal string or compiled pattern.
        aggregation: Output of aggregate_text().
        global_match: Find every match, or only the first one.

    Returns:
        Matches ordered by start offset, indexed 0..N-1.

    Raises:
        ZeroLengthMatchError: If the pattern matches the empty string.
    """
    regex = compile_find(find)
    leaves = list(flatten(aggregation))
    full_text = "".join(leaves)

    matches: list[Match] = []
    offset = 0
    for leaf in leaves:
        if global_match:
            for m in regex.finditer(leaf):
                matches.append(_prep_match(m, len(matches), offset, full_text))
        else:
            m = regex.search(leaf)
            if m:
                matches.append(_prep_match(m, 0, offset, full_text))
                break
        offset += len(leaf)

    logger.debug("Pattern %r produced %d match(es) over %d characters", regex.pattern, len(matches), len(full_text))
    return matches
