"""Hierarchical table-of-contents trees built from flat heading lists"""

from typing import Iterable, Optional

from mdcms.core.headings import MAX_LEVEL, extract_headings
from mdcms.core.models import Heading, TOCNode


def build_tree(headings: Iterable[Heading]) -> list[TOCNode]:
    """Nest headings by level; roots are the shallowest headings seen, not necessarily h1.

    A heading becomes a child of the nearest preceding heading with a lower
    level, so skipped levels (h1 then h3) nest one step deep.
    """
    roots: list[TOCNode] = []
    stack: list[TOCNode] = []

    for h in headings:
        while stack and stack[-1].level >= h.level:
            stack.pop()
        node = TOCNode(id=h.id, text=h.text, level=h.level)
        if stack:
            stack[-1].children.append(node)
        else:
            roots.append(node)
        stack.append(node)

    return roots


def flatten(tree: Iterable[TOCNode]) -> list[TOCNode]:
    """Pre-order walk returning childless copies of every node."""
    flat: list[TOCNode] = []

    def _walk(nodes: Iterable[TOCNode]) -> None:
        for node in nodes:
            flat.append(TOCNode(id=node.id, text=node.text, level=node.level))
            _walk(node.children)

    _walk(tree)
    return flat


def parse_document_toc(body: str, max_depth: int = MAX_LEVEL) -> list[TOCNode]:
    """Extract headings from a markdown body and nest them into a TOC tree."""
    return build_tree(extract_headings(body, max_depth))


def find_by_id(tree: Iterable[TOCNode], id: str) -> Optional[TOCNode]:
    """Depth-first lookup of a node by anchor id."""
    for node in tree:
        if node.id == id:
            return node
        found = find_by_id(node.children, id)
        if found is not None:
            return found
    return None


def all_heading_ids(tree: Iterable[TOCNode]) -> list[str]:
    return [node.id for node in flatten(tree)]
