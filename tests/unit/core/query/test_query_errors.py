"""Unit tests for query parse errors and their rendering"""

import pytest

from mdq.core.errors import SUGGESTIONS, MdqError, QueryParseError
from mdq.core.query.parse import parse_query


def _error(text) -> QueryParseError:
    with pytest.raises(QueryParseError) as exc:
        parse_query(text)
    return exc.value


def test_caret_diagram():
    err = _error("$ ! invalid query string ! $")
    assert str(err) == (
        " --> 1:1\n"
        "  |\n"
        "1 | $ ! invalid query string ! $\n"
        "  | ^---\n"
        "  |\n"
        "  = expected valid query"
    )


@pytest.mark.parametrize("query, position, message", [
    ("!invalid", 0, "expected valid query"),
    ("invalid-", 0, "expected valid query"),
    ("# a | ", 6, "expected selector"),
    ("-x", 1, "expected space after list marker"),
    ("- [y] item", 2, "expected task marker"),
    ("[text", 5, "expected ]"),
    ("[text]url", 6, "expected ("),
    ("# /unclosed", 2, "unterminated regex"),
    ("# *x", 3, "expected | after matcher"),
    ('# "open', 2, "unterminated quoted string"),
    (r'# "a\q"', 4, "invalid escape sequence"),
])
def test_error_positions(query, position, message):
    err = _error(query)
    assert err.position == position
    assert err.message == message


def test_invalid_regex():
    err = _error("# /(/")
    assert err.message.startswith("invalid regex:")


def test_caret_column_follows_position():
    lines = str(_error("# a | ")).splitlines()
    assert lines[0] == " --> 1:7"
    assert lines[3] == "  |       ^---"


def test_error_is_value_error():
    err = _error("???")
    assert isinstance(err, ValueError)
    assert isinstance(err, MdqError)


@pytest.mark.parametrize("query", ["!invalid", "invalid-", "abc[123]", "invalid```", "invalidP:", "xyz|abc"])
def test_suggestions_listed(query):
    text = _error(query).to_string_with_suggestions(query)
    assert "Suggestions:" in text
    assert f"  • {SUGGESTIONS[0]}" in text
    assert "Use | to separate multiple selectors" in text


def test_suggestions_include_expected_token():
    text = _error("[text").to_string_with_suggestions("[text")
    assert "Expected: `]`" in text
    assert text.index("Expected:") < text.index("Suggestions:")
