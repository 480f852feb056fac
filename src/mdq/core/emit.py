"""Render query results as markdown, JSON, or plain text"""

import json
from typing import Any

from mdq.core.models import Block, Document, InlineSpan, SpanKind
from mdq.core.query.selectors import Node
from mdq.core.tree import Section


OUTPUT_FORMATS = ("md", "json", "plain")
THEMATIC_BREAK = "   -----"


def span_markdown(span: InlineSpan) -> str:
    """Markdown for a single inline span."""
    inner = "".join(span_markdown(c) for c in span.children) if span.children else span.text
    if span.kind == SpanKind.link:
        title = f' "{span.title}"' if span.title else ""
        return f"[{inner}]({span.url or ''}{title})"
    if span.kind == SpanKind.image:
        title = f' "{span.title}"' if span.title else ""
        return f"![{span.text}]({span.url or ''}{title})"
    if span.kind == SpanKind.footnote_ref:
        return f"[^{span.label}]"
    if span.kind == SpanKind.code:
        fence = "``" if "`" in span.text else "`"
        return f"{fence}{span.text}{fence}"
    if span.kind == SpanKind.emphasis:
        return f"_{inner}_"
    if span.kind == SpanKind.strong:
        return f"**{inner}**"
    if span.kind == SpanKind.strikethrough:
        return f"~~{inner}~~"
    return span.text


def to_markdown(node: Node, doc: Document) -> str:
    """Source markdown of a node; sections span from their heading to the section end."""
    if isinstance(node, Section):
        return "".join(doc.lines[node.line:node.end_line]).strip()
    if isinstance(node, Block):
        return node.source
    return span_markdown(node)


def to_plain(node: Node, doc: Document) -> str:
    if isinstance(node, Section):
        parts = [node.title] if node.heading else []
        parts += [to_plain(c, doc) for c in node.children]
        return "\n\n".join(p for p in parts if p)
    if isinstance(node, Block):
        parts = [node.text.strip()] + [to_plain(c, doc) for c in doc.children(node)]
        return "\n".join(p for p in parts if p)
    return node.text


def to_json(node: Node, doc: Document) -> dict[str, Any]:
    """JSON-ready dict for a node; every object carries a `kind` tag."""
    if isinstance(node, Section):
        return {
            "kind": "section",
            "level": node.level,
            "title": node.title,
            "line": node.line,
            "end_line": node.end_line,
            "children": [to_json(c, doc) for c in node.children],
        }
    data = node.model_dump(mode="json", exclude_none=True, exclude_defaults=True)
    if isinstance(node, Block) and doc.children(node):
        data["children"] = [to_json(c, doc) for c in doc.children(node)]
    return data


def render(results: list[Node], doc: Document, fmt: str = "md", add_breaks: bool = True) -> str:
    """Render results in the requested format; raises ValueError on an unknown format."""
    if fmt == "json":
        return json.dumps({"items": [to_json(n, doc) for n in results]}, indent=2, ensure_ascii=False)
    if fmt == "plain":
        return "\n".join(to_plain(n, doc) for n in results)
    if fmt == "md":
        sep = f"\n\n{THEMATIC_BREAK}\n\n" if add_breaks else "\n\n"
        return sep.join(to_markdown(n, doc) for n in results)
    raise ValueError(f"Unknown output format: {fmt} (expected one of {', '.join(OUTPUT_FORMATS)})")
