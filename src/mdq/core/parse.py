"""File discovery, front matter and footnote extraction, and markdown-it block parsing"""

import logging
import re
import tomllib
from pathlib import Path
from typing import Any, Optional

import yaml
from markdown_it import MarkdownIt

from mdq.config import log_event
from mdq.core.errors import DocumentParseError
from mdq.core.inline import inline_spans
from mdq.core.models import (
    Block,
    BlockKind,
    Document,
    InlineSpan,
    SpanKind,
    TableCell,
    normalize_newlines,
    split_lines,
)


FRONTMATTER_RE = re.compile(r'\A(---|\+\+\+)[ \t]*\n(.*?\n)?\1[ \t]*(?:\n|\Z)', re.DOTALL)
FOOTNOTE_DEF_RE = re.compile(r'^ {0,3}\[\^([^\]\s]+)\]:[ \t]?(.*)$')
FENCE_RE = re.compile(r'^ {0,3}(`{3,}|~{3,})')
TASK_RE = re.compile(r'^\[([ xX])\](?:[ \t]+|$)')
MD_EXTENSIONS = {'.md', '.mdx', '.markdown'}


def _make_parser(preset: str) -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def _heading_level(token) -> int | None:
    """Return the heading level (1-6) for a heading_open token, else None."""
    if token.tag and token.tag[0] == 'h' and token.tag[1:].isdigit():
        return int(token.tag[1:])
    return None


def _load_front_matter(variant: str, content: str) -> dict[str, Any]:
    try:
        data = yaml.safe_load(content) if variant == 'yaml' else tomllib.loads(content)
    except (yaml.YAMLError, tomllib.TOMLDecodeError) as e:
        raise DocumentParseError(f"Invalid {variant.upper()} front matter: {e}") from e
    data = data or {}
    if not isinstance(data, dict):
        raise DocumentParseError(
            f"Invalid {variant.upper()} front matter: expected a mapping, got {type(data).__name__}"
        )
    return data


def _front_matter(text: str) -> tuple[Optional[dict], str]:
    """Return (front matter draft or None, text with the header replaced by blank lines)."""
    m = FRONTMATTER_RE.match(text)
    if not m:
        return None, text
    variant = 'yaml' if m.group(1) == '---' else 'toml'
    content = m.group(2) or ''
    header = m.group(0)
    line_count = header.count('\n') + (0 if header.endswith('\n') else 1)
    draft = {
        "kind": BlockKind.front_matter,
        "line": 0,
        "end_line": line_count,
        "source": header.rstrip(),
        "content": content.rstrip('\n'),
        "variant": variant,
        "data": _load_front_matter(variant, content),
    }
    return draft, '\n' * header.count('\n') + text[m.end():]


def _is_indented(line: str) -> bool:
    return line.startswith('    ') or line.startswith('\t')


def _extract_footnotes(lines: list[str]) -> tuple[list[dict], list[str]]:
    """Pull [^label]: definitions out of lines, outside fenced code.

    Definition lines (and their indented continuation lines) are replaced by
    blank lines so markdown-it sees the rest of the document at unchanged
    line numbers.
    """
    out = list(lines)
    drafts: list[dict] = []
    fence = None
    i = 0
    while i < len(lines):
        line = lines[i]
        fm = FENCE_RE.match(line)
        if fence:
            run = fm.group(1) if fm else ''
            if run and run[0] == fence[0] and len(run) >= len(fence) and line.strip() == run:
                fence = None
            i += 1
            continue
        if fm:
            fence = fm.group(1)
            i += 1
            continue

        m = FOOTNOTE_DEF_RE.match(line.rstrip('\n'))
        if not m:
            i += 1
            continue

        body = [m.group(2)]
        j = i + 1
        while j < len(lines):
            nxt = lines[j]
            if _is_indented(nxt):
                body.append(nxt[4:] if nxt.startswith('    ') else nxt[1:])
            elif not nxt.strip():
                ahead = next((k for k in range(j + 1, len(lines)) if lines[k].strip()), None)
                if ahead is None or not _is_indented(lines[ahead]):
                    break
                body.append('')
            else:
                break
            j += 1

        drafts.append({
            "kind": BlockKind.footnote_def,
            "line": i,
            "end_line": j,
            "source": ''.join(lines[i:j]).rstrip(),
            "label": m.group(1),
            "content": '\n'.join(b.rstrip('\n') for b in body).strip(),
        })
        for k in range(i, j):
            out[k] = '\n'
        i = j
    return drafts, out


def _source_slice(token, source_lines: list[str]) -> str:
    """Extract raw source for a block via token.map; fallback to token.content."""
    if token.map:
        start, end = token.map
        return ''.join(source_lines[start:end]).rstrip()
    return token.content.rstrip()


def _draft(kind: BlockKind, token, source_lines: list[str], parent: Optional[int], **fields) -> dict:
    start, end = token.map if token.map else (0, 0)
    return {
        "kind": kind,
        "line": start,
        "end_line": end,
        "source": _source_slice(token, source_lines),
        "parent": parent,
        "spans": list(fields.pop("spans", ())),
        **fields,
    }


def _task_state(spans: tuple[InlineSpan, ...]) -> tuple[Optional[bool], tuple[InlineSpan, ...]]:
    """Detect a leading [ ] / [x] task marker; return (checked, spans without marker)."""
    if not spans or spans[0].kind != SpanKind.text:
        return None, spans
    m = TASK_RE.match(spans[0].text)
    if not m:
        return None, spans
    rest = spans[0].text[m.end():]
    head = (InlineSpan(kind=SpanKind.text, text=rest),) if rest else ()
    return m.group(1) != ' ', head + spans[1:]


def _absorb(draft: dict, spans: tuple[InlineSpan, ...]) -> None:
    """Append a nested paragraph's spans to its container block."""
    if draft["kind"] == BlockKind.list_item and not draft["spans"] and draft.get("checked") is None:
        draft["checked"], spans = _task_state(spans)
    if draft["spans"]:
        draft["spans"].append(InlineSpan(kind=SpanKind.text, text='\n'))
    draft["spans"].extend(spans)


def _table_cells(tokens: list, start: int) -> tuple[int, tuple, tuple]:
    """Collect header and body cells from table_open at start; return (close index, header, rows)."""
    header: list[TableCell] = []
    rows: list[tuple[TableCell, ...]] = []
    row: list[TableCell] = []
    in_head = False
    i = start
    while tokens[i].type != 'table_close':
        tok = tokens[i]
        if tok.type == 'thead_open':
            in_head = True
        elif tok.type == 'thead_close':
            in_head = False
        elif tok.type == 'tr_open':
            row = []
        elif tok.type == 'tr_close':
            if in_head:
                header = row
            else:
                rows.append(tuple(row))
        elif tok.type == 'inline':
            row.append(TableCell(source=tok.content, spans=inline_spans(tok.children)))
        i += 1
    return i, tuple(header), tuple(rows)


def tokens_to_drafts(tokens: list, source_lines: list[str]) -> list[dict]:
    """Walk block tokens into block drafts; `parent` holds the index of the enclosing draft."""
    drafts: list[dict] = []
    stack: list[dict] = []
    i = 0

    while i < len(tokens):
        tok = tokens[i]
        container = next((f["draft"] for f in reversed(stack) if f["kind"] != 'list'), None)

        if tok.type in ('bullet_list_open', 'ordered_list_open'):
            ordered = tok.type == 'ordered_list_open'
            start = tok.attrGet('start') if ordered else None
            stack.append({"kind": 'list', "ordered": ordered, "next": int(start) if start else 1})

        elif tok.type == 'list_item_open':
            lists = [f for f in stack if f["kind"] == 'list']
            frame = lists[-1]
            number = None
            if frame["ordered"]:
                number = int(tok.info) if tok.info and tok.info.isdigit() else frame["next"]
                frame["next"] = number + 1
            drafts.append(_draft(
                BlockKind.list_item, tok, source_lines, container,
                ordered=frame["ordered"], depth=len(lists) - 1, number=number, checked=None,
            ))
            stack.append({"kind": 'item', "draft": len(drafts) - 1})

        elif tok.type == 'blockquote_open':
            drafts.append(_draft(BlockKind.blockquote, tok, source_lines, container))
            stack.append({"kind": 'quote', "draft": len(drafts) - 1})

        elif tok.type in ('bullet_list_close', 'ordered_list_close', 'list_item_close', 'blockquote_close'):
            stack.pop()

        elif tok.type in ('paragraph_open', 'heading_open'):
            spans = inline_spans(tokens[i + 1].children)
            if container is not None:
                _absorb(drafts[container], spans)
            elif tok.type == 'heading_open':
                drafts.append(_draft(
                    BlockKind.heading, tok, source_lines, None, level=_heading_level(tok), spans=spans,
                ))
            else:
                drafts.append(_draft(BlockKind.paragraph, tok, source_lines, None, spans=spans))
            i += 3  # open, inline, close
            continue

        elif tok.type in ('fence', 'code_block'):
            info = tok.info.strip()
            drafts.append(_draft(
                BlockKind.code, tok, source_lines, container,
                language=info.split()[0] if info else None, content=tok.content,
            ))

        elif tok.type == 'html_block':
            drafts.append(_draft(BlockKind.html, tok, source_lines, container, content=tok.content))

        elif tok.type == 'table_open':
            close, header, rows = _table_cells(tokens, i)
            drafts.append(_draft(BlockKind.table, tok, source_lines, container, header=header, rows=rows))
            i = close

        i += 1

    return drafts


def _assemble(token_drafts: list[dict], extra: list[dict]) -> tuple[Block, ...]:
    """Merge drafts into document order and assign ids; remap parent indexes to ids."""
    keyed = [(("t", n), d) for n, d in enumerate(token_drafts)]
    keyed += [(("x", n), d) for n, d in enumerate(extra)]
    keyed.sort(key=lambda kd: kd[1]["line"])

    ids = {key: n for n, (key, _) in enumerate(keyed)}
    blocks = []
    for key, d in keyed:
        fields = dict(d)
        parent = fields.pop("parent", None)
        fields["spans"] = tuple(fields.get("spans", ()))
        blocks.append(Block(
            id=ids[key],
            parent=ids[("t", parent)] if parent is not None else None,
            **fields,
        ))
    return tuple(blocks)


def parse_document(text: str, parser_config: str = 'gfm-like') -> Document:
    """Parse markdown text into an immutable Document."""
    md = _make_parser(parser_config)
    text = normalize_newlines(text)
    fm_draft, body = _front_matter(text)
    footnotes, lines = _extract_footnotes(split_lines(body))

    for d in footnotes:
        d["spans"] = inline_spans(md.parseInline(d["content"])[0].children)

    # Slices come from the original text so blanked regions never leak into sources.
    source_lines = split_lines(text)
    tokens = md.parse(''.join(lines))
    extra = ([fm_draft] if fm_draft else []) + footnotes
    doc = Document(
        source=text,
        blocks=_assemble(tokens_to_drafts(tokens, source_lines), extra),
        front_matter=fm_draft["data"] if fm_draft else {},
    )

    log_event(logging.DEBUG, "document_parsed", blocks=len(doc.blocks), footnotes=len(footnotes))
    for _, span in doc.unresolved_footnotes():
        log_event(logging.INFO, "footnote_unresolved", label=span.label)
    return doc


def discover_files(path: Path) -> list[Path]:
    """Return sorted markdown files under path, or [path] if a single file."""
    if path.is_file():
        return [path]
    return sorted(p for p in path.rglob('*') if p.suffix in MD_EXTENSIONS)


def parse_file(path: Path, parser_config: str = 'gfm-like') -> Document:
    """Parse a single markdown file into a Document."""
    return parse_document(path.read_text(encoding='utf-8'), parser_config)
