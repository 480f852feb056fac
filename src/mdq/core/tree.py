"""Section tree: nest top-level blocks under headings by heading level"""

from dataclasses import dataclass, field
from typing import Optional, Union

from mdq.core.models import Block, BlockKind, Document


@dataclass
class Section:
    """A heading plus everything up to the next heading of equal or higher rank.

    The root section has no heading and spans the whole document.
    """
    heading: Optional[Block]
    line: int
    end_line: int
    children: list[Union[Block, "Section"]] = field(default_factory=list)

    @property
    def level(self) -> int:
        return self.heading.level if self.heading else 0

    @property
    def title(self) -> str:
        return self.heading.text if self.heading else ""

    def subsections(self) -> list["Section"]:
        return [c for c in self.children if isinstance(c, Section)]


def build_sections(doc: Document) -> Section:
    """Group the document's top-level blocks into a tree of sections."""
    root = Section(heading=None, line=0, end_line=len(doc.lines))
    stack: list[Section] = [root]

    for block in doc.top_level():
        if block.kind == BlockKind.heading:
            while stack[-1].heading and stack[-1].level >= block.level:
                stack.pop().end_line = block.line
            section = Section(heading=block, line=block.line, end_line=root.end_line)
            stack[-1].children.append(section)
            stack.append(section)
        else:
            stack[-1].children.append(block)

    return root
