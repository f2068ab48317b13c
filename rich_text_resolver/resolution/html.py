"""Renders portable-text blocks to HTML using a configurable map of resolvers.

A resolver is a function `(value, children_html) -> str`. It is looked up by the "kind" of the item
being rendered:

- block styles: `"normal"`, `"h1"` .. `"h6"` (value is the `Block`),
- lists: `"bullet"` and `"number"` (value is a `ListGroup`) and `"listItem"` (value is the
  `ListBlock`),
- objects: `"image"`, `"componentOrItem"`, `"table"`, `"row"`, `"cell"`,
- marks: style names like `"strong"` (value is the name) and `"link"`, `"internalLink"` (value is
  the mark definition).

Children are always rendered first so each resolver receives finished markup for whatever it
encloses.
"""

from __future__ import annotations

import dataclasses as dc
from typing import Any, Callable, Iterable, Iterator, Mapping, Optional, Sequence, Union

from bs4.dammit import EntitySubstitution
from typing_extensions import TypeAlias

from rich_text_resolver.config import env_config
from rich_text_resolver.documents.blocks import (
    STYLE_MARKS,
    Block,
    BlockItem,
    Component,
    ExternalLink,
    Image,
    InternalLink,
    ListBlock,
    ListType,
    MarkDef,
    Span,
    Table,
    TableCell,
    TableRow,
)
from rich_text_resolver.logger import logger
from rich_text_resolver.transformers.references import ITEM_LINK_CANDIDATES, reference_attribute

ResolverFunction: TypeAlias = Callable[[Any, str], str]
ResolverConfig: TypeAlias = Mapping[str, ResolverFunction]


# ------------------------------------------------------------------------------------------------
# MARKUP HELPERS
# ------------------------------------------------------------------------------------------------


def escape_text(text: str) -> str:
    """`text` with `&`, `<`, and `>` replaced by entities."""
    return EntitySubstitution.substitute_xml(text)


def html_attributes(attributes: Mapping[str, Optional[str]]) -> str:
    """Attribute markup for a start tag, with a leading space; None values are omitted."""
    return "".join(
        f" {name}={EntitySubstitution.substitute_xml(value, make_quoted_attribute=True)}"
        for name, value in attributes.items()
        if value is not None
    )


def html_element(tag_name: str, children: str = "", **attributes: Optional[str]) -> str:
    return f"<{tag_name}{html_attributes(attributes)}>{children}</{tag_name}>"


def _render_text(text: str) -> str:
    """Escaped `text` with each newline rendered as a line break."""
    return "<br/>".join(escape_text(line) for line in text.split("\n"))


def to_html_image_default(image: Image) -> str:
    return f"<img{html_attributes({'src': image.url, 'alt': image.alt or ''})}>"


def resolve_image(image: Image, to_tag: Callable[[Image], str] = to_html_image_default) -> str:
    """Render `image` with `to_tag`; a hook for custom image resolvers."""
    return to_tag(image)


def resolve_table(table: Table, render_blocks: Callable[[Sequence[BlockItem]], str]) -> str:
    """Render `table` as an HTML table, using `render_blocks` for the content of each cell."""
    rows = "".join(
        html_element("tr", "".join(html_element("td", render_blocks(c.content)) for c in r.cells))
        for r in table.rows
    )
    return html_element("table", html_element("tbody", rows))


# ------------------------------------------------------------------------------------------------
# DEFAULT RESOLVERS
# ------------------------------------------------------------------------------------------------


def _element_resolver(tag_name: str) -> ResolverFunction:
    """Resolver that wraps children in `tag_name` and ignores the value."""

    def resolve(value: Any, children: str) -> str:
        return html_element(tag_name, children)

    return resolve


def resolve_link(link: ExternalLink, children: str) -> str:
    """An `<a>` element carrying every attribute of the source link."""
    return f"<a{html_attributes(link.attributes)}>{children}</a>"


def resolve_internal_link(link: InternalLink, children: str) -> str:
    """An `<a>` element identifying the linked content item by its reference attribute."""
    attribute = reference_attribute(link.reference, ITEM_LINK_CANDIDATES)
    return f"<a{html_attributes({attribute: link.reference.ref})}>{children}</a>"


DEFAULT_RESOLVERS: dict[str, ResolverFunction] = {
    # -- block styles --
    "normal": _element_resolver("p"),
    **{f"h{n}": _element_resolver(f"h{n}") for n in range(1, 7)},
    # -- lists --
    "bullet": _element_resolver("ul"),
    "number": _element_resolver("ol"),
    "listItem": _element_resolver("li"),
    # -- objects --
    "image": lambda image, children: resolve_image(image),
    "table": lambda table, children: html_element("table", html_element("tbody", children)),
    "row": _element_resolver("tr"),
    "cell": _element_resolver("td"),
    # -- marks --
    "code": _element_resolver("code"),
    "em": _element_resolver("em"),
    "strong": _element_resolver("strong"),
    "sub": _element_resolver("sub"),
    "sup": _element_resolver("sup"),
    "link": resolve_link,
    "internalLink": resolve_internal_link,
}


# ------------------------------------------------------------------------------------------------
# LIST GROUPING
# ------------------------------------------------------------------------------------------------


@dc.dataclass
class ListItemNode:
    """A list item and the lists nested inside it."""

    block: ListBlock
    sublists: list[ListGroup] = dc.field(default_factory=list)


@dc.dataclass
class ListGroup:
    """Consecutive list items of the same type at the same level, i.e. one `<ul>` or `<ol>`."""

    list_item: ListType
    level: int
    items: list[ListItemNode] = dc.field(default_factory=list)


def nest_list_blocks(blocks: Iterable[ListBlock]) -> list[ListGroup]:
    """Rebuild list nesting from a run of flat list blocks.

    A deeper item opens a list nested in the preceding shallower item. An item whose type differs
    from the open list at its level closes that list and starts another.
    """
    roots: list[ListGroup] = []
    stack: list[ListGroup] = []

    for block in blocks:
        while stack and (
            stack[-1].level > block.level
            or (stack[-1].level == block.level and stack[-1].list_item != block.list_item)
        ):
            stack.pop()

        if stack and stack[-1].level == block.level:
            group = stack[-1]
        else:
            group = ListGroup(block.list_item, block.level)
            if stack:
                stack[-1].items[-1].sublists.append(group)
            else:
                roots.append(group)
            stack.append(group)

        group.items.append(ListItemNode(block))

    return roots


# ------------------------------------------------------------------------------------------------
# MARK NESTING
# ------------------------------------------------------------------------------------------------


@dc.dataclass
class _MarkNode:
    """A mark wrapping a run of spans and nested marks; the root node has no mark."""

    mark: Optional[str]
    children: list[Union[_MarkNode, Span]] = dc.field(default_factory=list)


def _build_mark_tree(spans: Sequence[Span]) -> _MarkNode:
    """Nest the marks of `spans` so a mark shared by consecutive spans is opened only once.

    When a span opens several marks, the one that runs over the most following spans is opened
    first (outermost), so it does not need to be closed and reopened when a shorter one ends. On a
    tie, links are opened before styles.
    """
    root = _MarkNode(None)
    stack: list[_MarkNode] = [root]

    for idx, span in enumerate(spans):
        # -- close the first open mark this span lacks, and everything opened after it --
        for pos in range(1, len(stack)):
            if stack[pos].mark not in span.marks:
                del stack[pos:]
                break

        open_marks = {node.mark for node in stack[1:]}
        to_open = sorted(
            (m for m in span.marks if m not in open_marks),
            key=lambda m: (-_run_length(spans, idx, m), m in STYLE_MARKS),
        )
        for mark in to_open:
            node = _MarkNode(mark)
            stack[-1].children.append(node)
            stack.append(node)

        stack[-1].children.append(span)

    return root


def _run_length(spans: Sequence[Span], start: int, mark: str) -> int:
    """Number of consecutive spans from `start` on that carry `mark`."""
    count = 0
    for span in spans[start:]:
        if mark not in span.marks:
            break
        count += 1
    return count


# ------------------------------------------------------------------------------------------------
# RENDERER
# ------------------------------------------------------------------------------------------------


class HtmlRenderer:
    """Renders portable-text block items using `resolvers` layered over `DEFAULT_RESOLVERS`."""

    def __init__(self, resolvers: Optional[ResolverConfig] = None):
        self._resolvers: dict[str, ResolverFunction] = {**DEFAULT_RESOLVERS, **(resolvers or {})}

    def render(self, blocks: Sequence[BlockItem]) -> str:
        return "".join(self._iter_block_markup(blocks))

    def _iter_block_markup(self, blocks: Sequence[BlockItem]) -> Iterator[str]:
        list_run: list[ListBlock] = []

        for block in blocks:
            if isinstance(block, ListBlock):
                list_run.append(block)
                continue
            if list_run:
                yield from (self._render_list_group(g) for g in nest_list_blocks(list_run))
                list_run = []
            yield self._render_block_item(block)

        if list_run:
            yield from (self._render_list_group(g) for g in nest_list_blocks(list_run))

    def _render_block_item(self, item: BlockItem) -> str:
        if isinstance(item, Block):
            return self._resolve_block_style(item, self._render_spans(item))
        if isinstance(item, Table):
            rows = "".join(self._render_row(row) for row in item.rows)
            return self._resolve_type(item._type, item, rows)
        if isinstance(item, (Image, Component)):
            return self._resolve_type(item._type, item, "")
        raise ValueError(f"cannot render {type(item).__name__} at block level")

    def _render_row(self, row: TableRow) -> str:
        return self._resolve_type(row._type, row, "".join(self._render_cell(c) for c in row.cells))

    def _render_cell(self, cell: TableCell) -> str:
        return self._resolve_type(cell._type, cell, self.render(cell.content))

    def _render_list_group(self, group: ListGroup) -> str:
        items = "".join(self._render_list_item(item) for item in group.items)
        return self._resolve_type(group.list_item, group, items)

    def _render_list_item(self, item: ListItemNode) -> str:
        children = self._render_spans(item.block) + "".join(
            self._render_list_group(g) for g in item.sublists
        )
        return self._resolve_type("listItem", item.block, children)

    def _render_spans(self, block: Block) -> str:
        mark_defs = {mark_def.key: mark_def for mark_def in block.mark_defs}
        return self._render_mark_node(_build_mark_tree(block.children), mark_defs)

    def _render_mark_node(self, node: _MarkNode, mark_defs: Mapping[str, MarkDef]) -> str:
        children = "".join(
            _render_text(child.text)
            if isinstance(child, Span)
            else self._render_mark_node(child, mark_defs)
            for child in node.children
        )
        if node.mark is None:
            return children
        return self._resolve_mark(node.mark, mark_defs, children)

    # -- resolver lookup --------------------------------------------------

    def _resolve_block_style(self, block: Block, children: str) -> str:
        resolver = self._resolvers.get(block.style)
        if resolver is None:
            logger.warning(f"No resolver for block style {block.style!r}, rendering as normal.")
            resolver = self._resolvers["normal"]
        return resolver(block, children)

    def _resolve_mark(self, mark: str, mark_defs: Mapping[str, MarkDef], children: str) -> str:
        mark_def = mark_defs.get(mark)
        kind = mark_def._type if mark_def is not None else mark
        resolver = self._resolvers.get(kind)
        if resolver is None:
            if not env_config.RENDER_UNKNOWN_MARKS_AS_TEXT:
                raise KeyError(f"no resolver for mark {kind!r}")
            logger.warning(f"No resolver for mark {kind!r}, rendering its text only.")
            return children
        return resolver(mark_def if mark_def is not None else mark, children)

    def _resolve_type(self, kind: str, value: Any, children: str) -> str:
        resolver = self._resolvers.get(kind)
        if resolver is None:
            logger.warning(f"No resolver for {kind!r} items. Skipping.")
            return ""
        return resolver(value, children)


def to_html(blocks: Sequence[BlockItem], resolvers: Optional[ResolverConfig] = None) -> str:
    """Render portable-text `blocks` to an HTML string.

    `resolvers` overrides or extends `DEFAULT_RESOLVERS`; see the module docstring for the keys.
    """
    return HtmlRenderer(resolvers).render(blocks)
