"""Shared fixtures for replace_dom_text tests."""

import re

import pytest

SAMPLE_XML = (
    '<?xml version="1.0" encoding="utf-8"?>'
    "<html><body><p>Hello <em>world</em>, foo bar</p><p>baz foo</p></body></html>"
)


def _normalize(markup: str) -> str:
    markup = markup.lower().replace("\r", "").replace("\n", "")
    return re.sub(r'="([^"]+)"', r"=\1", markup)


@pytest.fixture
def html_equal():
    """Assert two markup strings are equivalent (case, newlines and attribute quotes ignored)."""

    def _assert(actual: str, expected: str) -> None:
        assert _normalize(actual) == _normalize(expected)

    return _assert


@pytest.fixture
def sample_xml(tmp_path):
    """A small XHTML-like document on disk."""
    path = tmp_path / "sample.xml"
    path.write_text(SAMPLE_XML, encoding="utf-8")
    return path
