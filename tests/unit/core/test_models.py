"""Unit tests for core/models.py"""

from mdq.core.models import Block, BlockKind, Document, InlineSpan, SpanKind, TableCell, walk_spans
from mdq.core.parse import parse_document


def test_block_text_falls_back_to_content():
    block = Block(id=0, kind=BlockKind.code, line=0, end_line=3, source="```\nx\n```", content="x\n")
    assert block.text == "x\n"


def test_table_text_joins_cells():
    cell = lambda s: TableCell(source=s, spans=(InlineSpan(kind=SpanKind.text, text=s),))
    block = Block(
        id=0, kind=BlockKind.table, line=0, end_line=3, source="",
        header=(cell("a"), cell("b")), rows=((cell("1"), cell("2")),),
    )
    assert block.text == "a\tb\n1\t2"


def test_walk_spans_depth_first():
    inner = InlineSpan(kind=SpanKind.text, text="in")
    outer = InlineSpan(kind=SpanKind.strong, text="in", children=(inner,))
    tail = InlineSpan(kind=SpanKind.text, text="tail")
    assert list(walk_spans((outer, tail))) == [outer, inner, tail]


def test_document_children_and_top_level(test_doc):
    assert [b.id for b in test_doc.children(test_doc.block(4))] == [5]
    assert 5 not in [b.id for b in test_doc.top_level()]
    assert test_doc.children(test_doc.block(0)) == []


def test_footnote_defs_first_wins():
    doc = parse_document("a[^x]\n\n[^x]: first\n\n[^x]: second\n")
    assert doc.footnote_defs()["x"].content == "first"


def test_footnote_refs_and_unresolved(test_doc):
    refs = list(test_doc.footnote_refs())
    assert [(b.id, s.label) for b, s in refs] == [(14, "1")]
    assert test_doc.unresolved_footnotes() == []


def test_unresolved_footnotes_reported_in_order():
    doc = parse_document("a[^missing] b[^ok] c[^gone]\n\n[^ok]: here\n")
    assert [s.label for _, s in doc.unresolved_footnotes()] == ["missing", "gone"]


def test_footnote_ref_in_table_cell():
    doc = parse_document("| a | b |\n|---|---|\n| c[^t] | d |\n")
    assert [s.label for _, s in doc.footnote_refs()] == ["t"]


def test_empty_document():
    doc = Document(source="", blocks=())
    assert doc.lines == []
    assert doc.footnote_defs() == {}
