"""Immutable document model produced by the block and inline parsers"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Optional

from pydantic import BaseModel, ConfigDict


NEWLINES_RE = re.compile(r"\r\n?")


def normalize_newlines(text: str) -> str:
    """Convert \\r\\n and lone \\r line ends to \\n, as markdown-it does before parsing."""
    return NEWLINES_RE.sub("\n", text)


def split_lines(text: str) -> list[str]:
    """Split on \\n only, keeping line ends; indexes match markdown-it token maps."""
    parts = text.split("\n")
    lines = [p + "\n" for p in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


class BlockKind(str, Enum):
    """Restrict the types of blocks to a predefined set of elements"""
    heading = "heading"
    paragraph = "paragraph"
    list_item = "list_item"
    code = "code"
    blockquote = "blockquote"
    footnote_def = "footnote_def"
    table = "table"
    html = "html"
    front_matter = "front_matter"


class SpanKind(str, Enum):
    """Inline span variants found inside text-bearing blocks"""
    text = "text"
    emphasis = "emphasis"
    strong = "strong"
    strikethrough = "strikethrough"
    code = "code"
    link = "link"
    image = "image"
    footnote_ref = "footnote_ref"
    html = "html"


class InlineSpan(BaseModel):
    """A run of inline content; container kinds keep their children and the flattened text."""
    model_config = ConfigDict(frozen=True)

    kind: SpanKind
    text: str = ""
    url: Optional[str] = None       # link href or image src
    title: Optional[str] = None
    label: Optional[str] = None     # footnote reference label
    children: tuple["InlineSpan", ...] = ()


class TableCell(BaseModel):
    """One table cell: raw inline markdown plus its parsed spans."""
    model_config = ConfigDict(frozen=True)

    source: str
    spans: tuple[InlineSpan, ...] = ()

    @property
    def text(self) -> str:
        return "".join(s.text for s in self.spans)


class Block(BaseModel):
    """A single typed block; `id` is its position in document order."""
    model_config = ConfigDict(frozen=True)

    id: int
    kind: BlockKind
    line: int                       # first source line, 0-based
    end_line: int                   # exclusive
    source: str
    parent: Optional[int] = None    # id of the enclosing list item or blockquote
    spans: tuple[InlineSpan, ...] = ()
    level: Optional[int] = None     # heading level (1-6)
    ordered: Optional[bool] = None
    depth: Optional[int] = None     # list nesting, 0 for top-level items
    number: Optional[int] = None    # ordered list item number
    checked: Optional[bool] = None  # task state; None when the item is not a task
    language: Optional[str] = None
    content: Optional[str] = None   # raw body of code, html, front matter and footnote blocks
    label: Optional[str] = None     # footnote label
    variant: Optional[str] = None   # front matter syntax: yaml or toml
    data: Optional[dict[str, Any]] = None
    header: tuple[TableCell, ...] = ()
    rows: tuple[tuple[TableCell, ...], ...] = ()

    @property
    def text(self) -> str:
        """Plain text of the block."""
        if self.kind == BlockKind.table:
            lines = [self.header, *self.rows]
            return "\n".join("\t".join(c.text for c in row) for row in lines)
        if self.spans:
            return "".join(s.text for s in self.spans)
        return self.content or ""


@dataclass
class Document:
    """Parsed markdown: the source text and its blocks in document order."""
    source: str
    blocks: tuple[Block, ...]
    front_matter: dict[str, Any] = field(default_factory=dict)
    _children: dict[int, list[Block]] = field(init=False, repr=False, default_factory=dict)

    def __post_init__(self):
        for b in self.blocks:
            if b.parent is not None:
                self._children.setdefault(b.parent, []).append(b)

    @property
    def lines(self) -> list[str]:
        return split_lines(self.source)

    def block(self, block_id: int) -> Block:
        return self.blocks[block_id]

    def children(self, block: Block) -> list[Block]:
        """Blocks nested directly inside block, in document order."""
        return list(self._children.get(block.id, []))

    def top_level(self) -> list[Block]:
        return [b for b in self.blocks if b.parent is None]

    def footnote_defs(self) -> dict[str, Block]:
        """Footnote definitions by label; the first definition of a label wins."""
        defs: dict[str, Block] = {}
        for b in self.blocks:
            if b.kind == BlockKind.footnote_def and b.label not in defs:
                defs[b.label] = b
        return defs

    def footnote_refs(self) -> Iterator[tuple[Block, InlineSpan]]:
        """Yield (block, span) for every footnote reference in document order."""
        for b in self.blocks:
            spans = [s for c in (*b.header, *(c for row in b.rows for c in row)) for s in c.spans]
            for span in walk_spans((*b.spans, *spans)):
                if span.kind == SpanKind.footnote_ref:
                    yield b, span

    def unresolved_footnotes(self) -> list[tuple[Block, InlineSpan]]:
        defs = self.footnote_defs()
        return [(b, s) for b, s in self.footnote_refs() if s.label not in defs]


def walk_spans(spans) -> Iterator[InlineSpan]:
    """Depth-first iteration over spans and their children."""
    for span in spans:
        yield span
        yield from walk_spans(span.children)
