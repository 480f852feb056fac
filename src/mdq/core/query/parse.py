"""Query text to selector chain: `# title | - item | [text](url)`"""

import logging
import re
from enum import Enum

from mdq.config import log_event
from mdq.core.errors import QueryParseError
from mdq.core.models import BlockKind
from mdq.core.query.matcher import Matcher, MatcherKind
from mdq.core.query.select import Query
from mdq.core.query.selectors import (
    BlockSelector,
    CodeSelector,
    LinkSelector,
    ListItemSelector,
    SectionSelector,
    Selector,
    TableSelector,
    TaskFilter,
)


class Until(str, Enum):
    """Where an unquoted matcher stops"""
    pipe = "|"
    bracket = "]"
    paren = ")"
    word = " "


ESCAPES = {'\\': '\\', '"': '"', "'": "'", '`': '`', 'n': '\n', 'r': '\r', 't': '\t'}
SIMPLE_BLOCKS = (
    ('>',   BlockKind.blockquote),
    ('+++', BlockKind.front_matter),
    ('</>', BlockKind.html),
    ('P:',  BlockKind.paragraph),
)


class QueryParser:
    """Recursive-descent parser over the query string."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def error(self, message: str, expected: str = None, pos: int = None) -> QueryParseError:
        return QueryParseError(self.text, self.pos if pos is None else pos, message, expected)

    # --- scanning helpers ---

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self, s: str) -> bool:
        return self.text.startswith(s, self.pos)

    def skip_ws(self) -> None:
        while not self.at_end() and self.text[self.pos].isspace():
            self.pos += 1

    def at_boundary(self) -> bool:
        """True at end of input, whitespace, or a selector delimiter."""
        return self.at_end() or self.text[self.pos].isspace() or self.peek('|')

    def _stops(self, until: Until) -> bool:
        if self.at_end():
            return True
        ch = self.text[self.pos]
        if until == Until.word:
            return ch.isspace() or ch == '|'
        return ch == until.value

    def expect(self, s: str) -> None:
        if not self.peek(s):
            raise self.error(f"expected {s}", expected=s)
        self.pos += len(s)

    # --- grammar ---

    def parse(self) -> list[Selector]:
        self.skip_ws()
        if self.at_end():
            return []
        selectors = [self.selector()]
        self.skip_ws()
        while not self.at_end():
            if not self.peek('|'):
                raise self.error("expected | or end of input", expected="|")
            self.pos += 1
            self.skip_ws()
            if self.at_end():
                raise self.error("expected selector", expected="selector")
            selectors.append(self.selector())
            self.skip_ws()
        return selectors

    def selector(self) -> Selector:
        if self.peek('#'):
            self.pos += 1
            return SectionSelector(title=self.matcher(Until.pipe))
        if self.peek('-') or self.peek('1.'):
            return self.list_item()
        if self.peek('[^'):
            self.pos += 2
            label = self.matcher(Until.bracket)
            self.expect(']')
            return BlockSelector(kind=BlockKind.footnote_def, text=label)
        if self.peek('![') or self.peek('['):
            return self.link()
        if self.peek('```'):
            return self.code_block()
        if self.peek(':-:'):
            self.pos += 3
            self.skip_ws()
            column = self.matcher(Until.word)
            return TableSelector(column=column, row=self.matcher(Until.pipe))
        for prefix, kind in SIMPLE_BLOCKS:
            if self.peek(prefix):
                self.pos += len(prefix)
                return BlockSelector(kind=kind, text=self.matcher(Until.pipe))
        raise self.error("expected valid query")

    def list_item(self) -> ListItemSelector:
        ordered = self.peek('1.')
        self.pos += 2 if ordered else 1
        if not self.at_boundary():
            raise self.error("expected space after list marker", expected="space")
        self.skip_ws()
        task = None
        if self.peek('['):
            start = self.pos
            task = next((t for t in TaskFilter if self.peek(t.value)), None)
            if task is None:
                raise self.error("expected task marker", expected="[ ], [x], or [?]")
            self.pos += len(task.value)
            if not self.at_boundary():
                raise self.error("expected space after task marker", expected="space", pos=start + 3)
        return ListItemSelector(ordered=ordered, task=task, text=self.matcher(Until.pipe))

    def link(self) -> LinkSelector:
        image = self.peek('!')
        self.pos += 2 if image else 1
        text = self.matcher(Until.bracket)
        self.expect(']')
        self.expect('(')
        url = self.matcher(Until.paren)
        self.expect(')')
        return LinkSelector(text=text, url=url, image=image)

    def code_block(self) -> CodeSelector:
        self.pos += 3
        language = Matcher.any() if self.at_boundary() else self.matcher(Until.word)
        return CodeSelector(language=language, content=self.matcher(Until.pipe))

    # --- matchers ---

    def matcher(self, until: Until) -> Matcher:
        """Parse one matcher; leading spaces are skipped, trailing spaces are dropped."""
        while not self.at_end() and self.text[self.pos] in ' \t' and until != Until.word:
            self.pos += 1
        if self._stops(until):
            return Matcher.any()

        if self.peek('*'):
            self.pos += 1
            self._end_of_matcher(until)
            return Matcher.any()
        if self.peek('/'):
            m = self.regex()
            self._end_of_matcher(until)
            return m

        anchor_start = self.peek('^')
        if anchor_start:
            self.pos += 1

        if self.peek('"') or self.peek("'"):
            value = self.quoted()
            anchor_end = self.peek('$')
            if anchor_end:
                self.pos += 1
            self._end_of_matcher(until)
            return Matcher(MatcherKind.text, value, True, anchor_start, anchor_end)

        start = self.pos
        while not self._stops(until):
            self.pos += 1
        value = self.text[start:self.pos].rstrip()
        anchor_end = value.endswith('$')
        if anchor_end:
            value = value[:-1]
        return Matcher(MatcherKind.text, value, False, anchor_start, anchor_end)

    def _end_of_matcher(self, until: Until) -> None:
        """After a self-delimited matcher only spaces may precede the terminator."""
        while not self.at_end() and self.text[self.pos] in ' \t' and until != Until.word:
            self.pos += 1
        if not self._stops(until) and not (until == Until.word and self.text[self.pos].isspace()):
            expected = "|" if until in (Until.pipe, Until.word) else until.value
            raise self.error(f"expected {expected} after matcher", expected=expected)

    def quoted(self) -> str:
        quote = self.text[self.pos]
        start = self.pos
        self.pos += 1
        out = []
        while True:
            if self.at_end():
                raise self.error("unterminated quoted string", expected=quote, pos=start)
            ch = self.text[self.pos]
            if ch == quote:
                self.pos += 1
                return ''.join(out)
            if ch == '\\':
                out.append(self.escape())
                continue
            out.append(ch)
            self.pos += 1

    def escape(self) -> str:
        start = self.pos
        self.pos += 1
        if self.at_end():
            raise self.error("invalid escape sequence", expected="escape sequence", pos=start)
        ch = self.text[self.pos]
        if ch in ESCAPES:
            self.pos += 1
            return ESCAPES[ch]
        if ch == 'u':
            m = re.compile(r'u\{([0-9a-fA-F]{1,6})\}').match(self.text, self.pos)
            if m and int(m.group(1), 16) <= 0x10FFFF:
                self.pos = m.end()
                return chr(int(m.group(1), 16))
            raise self.error("invalid unicode sequence", expected="unicode sequence", pos=start)
        raise self.error("invalid escape sequence", expected="escape sequence", pos=start)

    def regex(self) -> Matcher:
        start = self.pos
        self.pos += 1
        out = []
        while True:
            if self.at_end():
                raise self.error("unterminated regex", expected="/", pos=start)
            ch = self.text[self.pos]
            if ch == '/':
                self.pos += 1
                break
            if ch == '\\' and self.text.startswith('/', self.pos + 1):
                out.append('/')
                self.pos += 2
                continue
            out.append(ch)
            self.pos += 1
        try:
            pattern = re.compile(''.join(out))
        except re.error as e:
            raise self.error(f"invalid regex: {e}", expected="regex", pos=start) from e
        return Matcher(MatcherKind.regex, pattern=pattern)


def parse_query(text: str) -> Query:
    """Parse query text into a Query; raises QueryParseError."""
    selectors = tuple(QueryParser(text).parse())
    log_event(logging.DEBUG, "query_parsed", query=text, selectors=len(selectors))
    return Query(text=text, selectors=selectors)
