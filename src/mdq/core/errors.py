"""Exception types raised while parsing documents and queries"""

from typing import Optional


SUGGESTIONS = (
    "Use # for sections (e.g., '# My Section')",
    "Use - for list items (e.g., '- List item')",
    "Use [] for links (e.g., '[text](url)')",
    "Use > for blockquotes (e.g., '> Quote text')",
    "Use ``` for code blocks (e.g., '```python code')",
    "Use +++ for front matter (e.g., '+++ title')",
    "Use </> for HTML (e.g., '</> <div>')",
    "Use P: for paragraphs (e.g., 'P: paragraph text')",
    "Use :-: for tables (e.g., ':-: column row')",
    "Use | to separate multiple selectors (e.g., '# Section | - List item')",
)


class MdqError(Exception):
    """Base class for all mdq errors."""


class DocumentParseError(MdqError, ValueError):
    """Raised when a markdown document cannot be turned into a Document."""


class QueryParseError(MdqError, ValueError):
    """An invalid selector query, located at a character offset of the query text."""

    def __init__(self, query: str, position: int, message: str, expected: Optional[str] = None):
        super().__init__(message)
        self.query = query
        self.position = position
        self.message = message
        self.expected = expected

    def __str__(self) -> str:
        return self.to_string(self.query)

    def _line_col(self, query_text: str) -> tuple[int, int, str]:
        """Return 1-based (line, column) of the error position and the source line."""
        pos = min(self.position, len(query_text))
        before = query_text[:pos]
        line_no = before.count("\n") + 1
        line_start = before.rfind("\n") + 1
        line_end = query_text.find("\n", pos)
        line = query_text[line_start:] if line_end == -1 else query_text[line_start:line_end]
        return line_no, pos - line_start + 1, line

    def to_string(self, query_text: str) -> str:
        """Render the error as a caret diagram pointing into query_text.

         --> 1:1
          |
        1 | $ bad
          | ^---
          |
          = expected valid query
        """
        line_no, col, line = self._line_col(query_text)
        gutter = " " * len(str(line_no))
        return "\n".join([
            f"{gutter}--> {line_no}:{col}",
            f"{gutter} |",
            f"{line_no} | {line}",
            f"{gutter} | {' ' * (col - 1)}^---",
            f"{gutter} |",
            f"{gutter} = {self.message}",
        ])

    def to_string_with_suggestions(self, query_text: str) -> str:
        """Render the caret diagram followed by the expected token and selector suggestions."""
        parts = [self.to_string(query_text)]
        if self.expected:
            parts.append(f"Expected: `{self.expected}`")
        parts.append("Suggestions:\n" + "\n".join(f"  • {s}" for s in SUGGESTIONS))
        return "\n\n".join(parts)
