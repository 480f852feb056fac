"""Inline token conversion: markdown-it inline children to InlineSpan trees"""

import re

from mdq.core.models import InlineSpan, SpanKind


FOOTNOTE_REF_RE = re.compile(r'\[\^([^\]\s]+)\]')

CONTAINER_KINDS: dict[str, SpanKind] = {
    'em':     SpanKind.emphasis,
    'strong': SpanKind.strong,
    's':      SpanKind.strikethrough,
    'link':   SpanKind.link,
}


def _text_spans(text: str) -> list[InlineSpan]:
    """Split text around [^label] references into text and footnote_ref spans."""
    spans: list[InlineSpan] = []
    pos = 0
    for m in FOOTNOTE_REF_RE.finditer(text):
        if m.start() > pos:
            spans.append(InlineSpan(kind=SpanKind.text, text=text[pos:m.start()]))
        spans.append(InlineSpan(kind=SpanKind.footnote_ref, text=m.group(1), label=m.group(1)))
        pos = m.end()
    if pos < len(text):
        spans.append(InlineSpan(kind=SpanKind.text, text=text[pos:]))
    return spans


def _leaf_span(tok) -> list[InlineSpan]:
    """Convert a non-container inline token; unknown token types are dropped."""
    if tok.type in ('text', 'text_special'):
        return [InlineSpan(kind=SpanKind.text, text=tok.content)]
    if tok.type == 'softbreak':
        return [InlineSpan(kind=SpanKind.text, text=' ')]
    if tok.type == 'hardbreak':
        return [InlineSpan(kind=SpanKind.text, text='\n')]
    if tok.type == 'code_inline':
        return [InlineSpan(kind=SpanKind.code, text=tok.content)]
    if tok.type == 'image':
        return [InlineSpan(
            kind=SpanKind.image,
            text=tok.content,
            url=tok.attrGet('src'),
            title=tok.attrGet('title') or None,
        )]
    if tok.type == 'html_inline':
        return [InlineSpan(kind=SpanKind.html, text=tok.content)]
    return []


def _container_span(open_tok, children: list[InlineSpan]) -> InlineSpan:
    kind = CONTAINER_KINDS[open_tok.type[:-len('_open')]]
    url = title = None
    if kind == SpanKind.link:
        url = open_tok.attrGet('href')
        title = open_tok.attrGet('title') or None
    return InlineSpan(kind=kind, text=plain_text(children), url=url, title=title, children=tuple(children))


def inline_spans(children: list | None) -> tuple[InlineSpan, ...]:
    """Convert an inline token's children into nested spans, merging adjacent text."""
    root: list[InlineSpan] = []
    stack: list[tuple[object, list[InlineSpan]]] = []

    for tok in children or []:
        target = stack[-1][1] if stack else root
        name = tok.type.rsplit('_', 1)[0]
        if tok.nesting == 1 and name in CONTAINER_KINDS:
            stack.append((tok, []))
        elif tok.nesting == -1 and stack and name in CONTAINER_KINDS:
            open_tok, kids = stack.pop()
            parent = stack[-1][1] if stack else root
            parent.append(_container_span(open_tok, _finish(kids)))
        else:
            target.extend(_leaf_span(tok))

    # Unbalanced openers are flattened into their parent.
    while stack:
        _, kids = stack.pop()
        (stack[-1][1] if stack else root).extend(kids)
    return tuple(_finish(root))


def _finish(spans: list[InlineSpan]) -> list[InlineSpan]:
    """Merge adjacent text spans, then split out footnote references."""
    merged: list[InlineSpan] = []
    for span in spans:
        if merged and span.kind == SpanKind.text and merged[-1].kind == SpanKind.text:
            merged[-1] = InlineSpan(kind=SpanKind.text, text=merged[-1].text + span.text)
        else:
            merged.append(span)
    return [s for span in merged
            for s in (_text_spans(span.text) if span.kind == SpanKind.text else [span])]


def plain_text(spans) -> str:
    """Flatten spans to their concatenated text."""
    return "".join(s.text for s in spans)
