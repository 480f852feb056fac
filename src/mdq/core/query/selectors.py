"""Selector types: one stage of a query, matched against tree nodes"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from mdq.core.models import Block, BlockKind, Document, InlineSpan, SpanKind, TableCell
from mdq.core.query.matcher import Matcher
from mdq.core.tree import Section


Node = Union[Section, Block, InlineSpan]


class TaskFilter(str, Enum):
    """List item task state required by a selector"""
    unchecked = "[ ]"
    checked = "[x]"
    either = "[?]"


@dataclass(frozen=True)
class SectionSelector:
    title: Matcher

    def select(self, node: Node, doc: Document) -> Optional[Node]:
        if isinstance(node, Section) and node.heading and self.title.matches(node.title):
            return node
        return None


@dataclass(frozen=True)
class ListItemSelector:
    ordered: bool
    text: Matcher
    task: Optional[TaskFilter] = None

    def _task_ok(self, checked: Optional[bool]) -> bool:
        if self.task is None:
            return True
        if self.task == TaskFilter.either:
            return checked is not None
        return checked is (self.task == TaskFilter.checked)

    def select(self, node: Node, doc: Document) -> Optional[Node]:
        if (isinstance(node, Block) and node.kind == BlockKind.list_item
                and node.ordered == self.ordered
                and self._task_ok(node.checked)
                and self.text.matches(node.text)):
            return node
        return None


@dataclass(frozen=True)
class LinkSelector:
    text: Matcher
    url: Matcher
    image: bool = False

    def select(self, node: Node, doc: Document) -> Optional[Node]:
        kind = SpanKind.image if self.image else SpanKind.link
        if (isinstance(node, InlineSpan) and node.kind == kind
                and self.text.matches(node.text) and self.url.matches(node.url)):
            return node
        return None


@dataclass(frozen=True)
class BlockSelector:
    """Match a block kind by a single text matcher over the block's text."""
    kind: BlockKind
    text: Matcher

    def select(self, node: Node, doc: Document) -> Optional[Node]:
        if isinstance(node, Block) and node.kind == self.kind and self.text.matches(self._subject(node)):
            return node
        return None

    def _subject(self, block: Block) -> str:
        if self.kind == BlockKind.footnote_def:
            return block.label
        if self.kind in (BlockKind.html, BlockKind.front_matter):
            return block.content
        return block.text


@dataclass(frozen=True)
class CodeSelector:
    language: Matcher
    content: Matcher

    def select(self, node: Node, doc: Document) -> Optional[Node]:
        if (isinstance(node, Block) and node.kind == BlockKind.code
                and self.language.matches(node.language) and self.content.matches(node.content)):
            return node
        return None


@dataclass(frozen=True)
class TableSelector:
    """Slice a table: keep matching columns, then rows with a kept cell matching `row`."""
    column: Matcher
    row: Matcher

    def select(self, node: Node, doc: Document) -> Optional[Node]:
        if not (isinstance(node, Block) and node.kind == BlockKind.table):
            return None
        keep = [i for i, cell in enumerate(node.header) if self.column.matches(cell.text)]
        if not keep:
            return None
        header = tuple(node.header[i] for i in keep)
        rows = tuple(
            tuple(row[i] for i in keep if i < len(row))
            for row in node.rows
            if any(self.row.matches(row[i].text) for i in keep if i < len(row))
        )
        if header == node.header and rows == node.rows:
            return node
        return node.model_copy(update={"header": header, "rows": rows, "source": table_markdown(header, rows)})


def table_markdown(header: tuple[TableCell, ...], rows: tuple[tuple[TableCell, ...], ...]) -> str:
    """Render table cells back into a pipe table."""
    lines = [
        "| " + " | ".join(c.source for c in header) + " |",
        "|" + "|".join(" --- " for _ in header) + "|",
    ]
    lines += ["| " + " | ".join(c.source for c in row) + " |" for row in rows]
    return "\n".join(lines)


Selector = Union[SectionSelector, ListItemSelector, LinkSelector, BlockSelector, CodeSelector, TableSelector]
