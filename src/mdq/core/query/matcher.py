"""Text predicates used inside selectors"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class MatcherKind(str, Enum):
    any = "any"
    text = "text"
    regex = "regex"


@dataclass(frozen=True)
class Matcher:
    """Match a string by substring (optionally anchored) or regex.

    Unquoted text compares case-insensitively; quoted text is case-sensitive.
    """
    kind: MatcherKind = MatcherKind.any
    value: str = ""
    case_sensitive: bool = False
    anchor_start: bool = False
    anchor_end: bool = False
    pattern: Optional[re.Pattern] = None

    @classmethod
    def any(cls) -> "Matcher":
        return cls()

    def matches(self, text: Optional[str]) -> bool:
        text = text or ""
        if self.kind == MatcherKind.any:
            return True
        if self.kind == MatcherKind.regex:
            return self.pattern.search(text) is not None

        haystack, needle = (text, self.value) if self.case_sensitive else (text.lower(), self.value.lower())
        if self.anchor_start and self.anchor_end:
            return haystack == needle
        if self.anchor_start:
            return haystack.startswith(needle)
        if self.anchor_end:
            return haystack.endswith(needle)
        return needle in haystack

    def __str__(self) -> str:
        if self.kind == MatcherKind.any:
            return "*"
        if self.kind == MatcherKind.regex:
            return f"/{self.pattern.pattern}/"
        body = f'"{self.value}"' if self.case_sensitive else self.value
        return f"{'^' if self.anchor_start else ''}{body}{'$' if self.anchor_end else ''}"
