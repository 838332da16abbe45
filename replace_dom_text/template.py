"""Replacement template expansion ($1, $0, $&, $`, $')."""

import re

from .matching import Match

_TOKEN = re.compile(r"\$(\d+|[&`'])")


def expand_template(template: str, match: Match) -> str:
    """Interpolate match data into ``template``.

    ``$n`` inserts group n (empty if the group did not participate or does
    not exist), ``$0`` and ``$&`` the whole match, ``$``` the text before
    the match and ``$'`` the text after it. Other ``$`` sequences are left
    as they are.
    """

    def substitute(m: re.Match) -> str:
        token = m.group(1)
        if token == "&":
            return match.text
        if token == "`":
            return match.input[: match.start_index]
        if token == "'":
            return match.input[match.end_index :]
        return match.group(int(token)) or ""

    return _TOKEN.sub(substitute, template)
