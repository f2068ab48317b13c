"""Provides `parse_html()`, the markup front-end of the transformer.

The rich-text dialect is parsed with `lxml` and converted into the `DomNode` tree the transformer
consumes. In `lxml`, text is held in the `.text` of an element (text before its first child) and
the `.tail` of each child (text after that child's closing tag, before the next sibling). The
conversion turns each of those into its own `DomTextNode` so the children of a node read left to
right in document order, the way a browser DOM presents them.
"""

from __future__ import annotations

from typing import Iterator

from lxml import etree
from lxml import html as lxml_html

from rich_text_resolver.config import env_config
from rich_text_resolver.errors import ParserDepthExceededError
from rich_text_resolver.logger import logger
from rich_text_resolver.parser.nodes import DomHtmlNode, DomNode, DomTextNode

# -- libxml2 silently truncates trees nested past its own limit; `huge_tree` lifts it so
#    `MAX_TREE_DEPTH` is the only bound --
html_parser = lxml_html.HTMLParser(remove_comments=True, huge_tree=True)

# -- whitespace directly inside these is source formatting, never content --
STRUCTURAL_CONTAINERS = frozenset(("table", "thead", "tbody", "tfoot", "tr", "ul", "ol"))


def parse_html(markup: str) -> list[DomNode]:
    """Parse a rich-text `markup` fragment into its top-level nodes.

    Whitespace-only text between top-level elements and directly inside structural containers
    (tables, rows, lists) is dropped. Raises `ParserDepthExceededError` when elements are nested
    deeper than `MAX_TREE_DEPTH`.
    """
    # -- lxml rejects an empty document, nip that edge-case in the bud here --
    if not markup.strip():
        return []

    root = lxml_html.fragment_fromstring(markup, create_parent="div", parser=html_parser)
    nodes = _convert_children(root, depth=0, max_depth=env_config.MAX_TREE_DEPTH)
    logger.debug("parsed rich-text markup into %d top-level nodes", len(nodes))
    return [n for n in nodes if not _is_whitespace_text(n)]


def _convert_children(element: etree._Element, depth: int, max_depth: int) -> list[DomNode]:
    """Convert the text, children, and child tails of `element` into nodes."""
    if depth > max_depth:
        raise ParserDepthExceededError(max_depth)

    nodes = list(_iter_child_nodes(element, depth, max_depth))

    if element.tag in STRUCTURAL_CONTAINERS:
        return [n for n in nodes if not _is_whitespace_text(n)]
    return nodes


def _iter_child_nodes(element: etree._Element, depth: int, max_depth: int) -> Iterator[DomNode]:
    if element.text:
        yield DomTextNode(element.text)

    for child in element:
        # -- processing instructions and the like have a non-str tag; only their tail counts --
        if isinstance(child.tag, str):
            yield DomHtmlNode(
                tag_name=child.tag.lower(),
                attributes={str(k): str(v) for k, v in child.attrib.items()},
                children=_convert_children(child, depth + 1, max_depth),
            )
        if child.tail:
            yield DomTextNode(child.tail)


def _is_whitespace_text(node: DomNode) -> bool:
    return isinstance(node, DomTextNode) and not node.content.strip()
