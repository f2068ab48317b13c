"""Classifies input nodes by the role they play in the rich-text dialect.

The dialect is a closed set of element kinds. Every tag the transformer understands is registered
in `TAG_ROLES` below. Any other element is a pass-through container: it contributes nothing itself
but its children are still transformed.
"""

from __future__ import annotations

import enum

from rich_text_resolver.parser.nodes import DomHtmlNode, DomNode, DomTextNode


class Role(enum.Enum):
    """The part a node plays in the rich-text dialect."""

    TEXT = "text"
    LINE_BREAK = "line-break"
    BLOCK = "block"
    INLINE_STYLE = "inline-style"
    LINK = "link"
    LIST_CONTAINER = "list-container"
    LIST_ITEM = "list-item"
    IMAGE = "image"
    EMBEDDED_OBJECT = "embedded-object"
    TABLE = "table"
    TABLE_ROW = "table-row"
    TABLE_CELL = "table-cell"
    PASS_THROUGH = "pass-through"


TAG_ROLES: dict[str, Role] = {
    # -- block items --
    "p": Role.BLOCK,
    "h1": Role.BLOCK,
    "h2": Role.BLOCK,
    "h3": Role.BLOCK,
    "h4": Role.BLOCK,
    "h5": Role.BLOCK,
    "h6": Role.BLOCK,
    # -- annotated phrasing --
    "a": Role.LINK,
    "b": Role.INLINE_STYLE,
    "code": Role.INLINE_STYLE,
    "em": Role.INLINE_STYLE,
    "i": Role.INLINE_STYLE,
    "strong": Role.INLINE_STYLE,
    "sub": Role.INLINE_STYLE,
    "sup": Role.INLINE_STYLE,
    "br": Role.LINE_BREAK,
    # -- list blocks --
    "ol": Role.LIST_CONTAINER,
    "ul": Role.LIST_CONTAINER,
    "li": Role.LIST_ITEM,
    # -- table --
    "table": Role.TABLE,
    "tr": Role.TABLE_ROW,
    "td": Role.TABLE_CELL,
    "th": Role.TABLE_CELL,
    # -- embedded references --
    "figure": Role.IMAGE,
    "object": Role.EMBEDDED_OBJECT,
}

# -- the mark value each style tag contributes; `<b>` and `<i>` are aliases --
STYLE_MARK_NAMES: dict[str, str] = {
    "b": "strong",
    "code": "code",
    "em": "em",
    "i": "em",
    "strong": "strong",
    "sub": "sub",
    "sup": "sup",
}

# -- attributes that identify an `<a>` element as a link to another content item --
ITEM_LINK_ATTRIBUTES = ("data-item-id", "data-item-external-id", "data-item-codename")


def classify(node: DomNode) -> Role:
    """The role of `node`; unregistered elements are `Role.PASS_THROUGH`."""
    if isinstance(node, DomTextNode):
        return Role.TEXT
    return TAG_ROLES.get(node.tag_name.lower(), Role.PASS_THROUGH)


def is_text(node: DomNode) -> bool:
    return isinstance(node, DomTextNode)


def is_element(node: DomNode) -> bool:
    return isinstance(node, DomHtmlNode)


def is_ordered_list(node: DomHtmlNode) -> bool:
    return node.tag_name.lower() == "ol"


def is_external_link(node: DomHtmlNode) -> bool:
    """True when `node` is an `<a>` element that does not point at another content item."""
    return not any(name in node.attributes for name in ITEM_LINK_ATTRIBUTES)
