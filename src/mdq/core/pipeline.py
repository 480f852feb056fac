"""Pipeline step functions: read inputs, parse, select, and render"""

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, TextIO

from mdq.config import Settings
from mdq.core.emit import render
from mdq.core.models import Document
from mdq.core.parse import discover_files, parse_document
from mdq.core.query.parse import parse_query


@dataclass
class QueryResult:
    """Rendered output of a query run plus the number of matched nodes."""
    output: str
    count: int
    document: Document


def read_inputs(paths: list[str], stdin: Optional[TextIO] = None) -> str:
    """Read and concatenate markdown inputs; '-' (or no paths) reads stdin.

    Directories are expanded to the markdown files beneath them.
    """
    stdin = stdin or sys.stdin
    if not paths:
        return stdin.read()

    parts = []
    for raw in paths:
        if raw == "-":
            parts.append(stdin.read())
            continue
        files = discover_files(Path(raw)) if Path(raw).is_dir() else [Path(raw)]
        for p in files:
            try:
                parts.append(p.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError) as e:
                raise RuntimeError(f"Failed to read {p}: {e}") from e
    return "\n".join(parts)


def run_query(markdown: str, query: str, settings: Settings) -> QueryResult:
    """Parse query and document, select nodes, and render them per settings.

    The query is parsed first so an invalid query fails before any document work.
    """
    parsed = parse_query(query)
    doc = parse_document(markdown, settings.parser_config)
    nodes = parsed.find_nodes(doc)
    output = render(nodes, doc, settings.output_format, settings.add_breaks)
    return QueryResult(output=output, count=len(nodes), document=doc)


def check_footnotes(markdown: str, parser_config: str = "gfm-like") -> list[str]:
    """Return labels of footnote references with no matching definition, in document order."""
    doc = parse_document(markdown, parser_config)
    return [span.label for _, span in doc.unresolved_footnotes()]
