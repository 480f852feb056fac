"""Unit tests for core/pipeline.py"""

import io

import pytest

from mdq.config import Settings
from mdq.core.errors import DocumentParseError, QueryParseError
from mdq.core.pipeline import check_footnotes, read_inputs, run_query


def test_read_inputs_stdin_when_no_paths():
    assert read_inputs([], stdin=io.StringIO("# From stdin\n")) == "# From stdin\n"


def test_read_inputs_dash_reads_stdin(tmp_path):
    (tmp_path / "a.md").write_text("A\n")
    text = read_inputs(["a.md", "-"], stdin=io.StringIO("B\n"))
    assert text == "A\n\nB\n"


def test_read_inputs_expands_directories(tmp_path):
    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "b.md").write_text("b")
    (docs / "a.md").write_text("a")
    (docs / "skip.txt").write_text("x")
    assert read_inputs(["docs"]) == "a\nb"


def test_read_inputs_missing_file():
    with pytest.raises(RuntimeError, match="Failed to read missing.md"):
        read_inputs(["missing.md"])


def test_run_query_counts_and_renders(test_doc_path):
    result = run_query(test_doc_path.read_text(), "# one | 1. *", Settings(add_breaks=False))
    assert result.count == 2
    assert result.output == "1. Ordered one\n\n2. Ordered two"
    assert len(result.document.blocks) == 17


def test_run_query_no_match(test_doc_path):
    result = run_query(test_doc_path.read_text(), "# nowhere", Settings())
    assert result.count == 0
    assert result.output == ""


def test_run_query_parses_query_before_document():
    """A bad query is reported even when the document is also invalid."""
    with pytest.raises(QueryParseError):
        run_query("---\n[bad\n---\n", "??", Settings())


def test_run_query_bad_document():
    with pytest.raises(DocumentParseError):
        run_query("---\n[bad\n---\n", "# x", Settings())


def test_check_footnotes():
    assert check_footnotes("a[^1] b[^2]\n\n[^1]: one\n") == ["2"]
    assert check_footnotes("no refs\n") == []
