"""Tests for replacement template expansion."""

import pytest

from replace_dom_text import Match, expand_template


@pytest.fixture
def match():
    return Match(index=0, start_index=4, end_index=7, text="abc", groups=("a", None), input="xyz abc def")


@pytest.mark.parametrize(
    "template,expected",
    [
        ("$1", "a"),
        ("$2", ""),
        ("$9", ""),
        ("$0", "abc"),
        ("$&", "abc"),
        ("$`", "xyz "),
        ("$'", " def"),
        ("<$1|$&>", "<a|abc>"),
        ("plain", "plain"),
    ],
)
def test_tokens(match, template, expected):
    assert expand_template(template, match) == expected


@pytest.mark.parametrize("template", ["$x", "$", "$$", "cost: $ 5"])
def test_unknown_sequences_are_literal(match, template):
    assert expand_template(template, match) == template
