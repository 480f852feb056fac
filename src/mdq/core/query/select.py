"""Run parsed selectors against a Document's section tree"""

import logging
from dataclasses import dataclass
from typing import Iterator

from mdq.config import log_event
from mdq.core.models import Block, Document
from mdq.core.query.selectors import Node, Selector
from mdq.core.tree import Section, build_sections


def children_of(node: Node, doc: Document) -> list[Node]:
    """Direct children of a tree node in document order."""
    if isinstance(node, Section):
        return ([node.heading] if node.heading else []) + list(node.children)
    if isinstance(node, Block):
        cells = [s for row in (node.header, *node.rows) for cell in row for s in cell.spans]
        return [*node.spans, *cells, *doc.children(node)]
    return list(node.children)


def _search(selector: Selector, node: Node, doc: Document) -> Iterator[Node]:
    """Yield matches below node; a match is not searched further."""
    for child in children_of(node, doc):
        found = selector.select(child, doc)
        if found is not None:
            yield found
        else:
            yield from _search(selector, child, doc)


@dataclass(frozen=True)
class Query:
    """A parsed query: selectors applied in order, each searching inside the previous results."""
    text: str
    selectors: tuple[Selector, ...]

    def find_nodes(self, doc: Document) -> list[Node]:
        """Return matching nodes in document order; an empty query selects the whole document."""
        nodes: list[Node] = [build_sections(doc)]
        for selector in self.selectors:
            nodes = [found for node in nodes for found in _search(selector, node, doc)]
        log_event(logging.DEBUG, "query_matched", query=self.text, results=len(nodes))
        return nodes
