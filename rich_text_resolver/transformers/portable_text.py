# pyright: reportPrivateUsage=false

"""Provides `transform()`, which turns a rich-text node tree into portable-text blocks.

PRINCIPLES

- _The walk is bottom-up._ Each node's children are transformed first and the node's own
  transform then assembles those finished children. There is no flatten-then-merge pass; every
  item is complete by the time its parent frame sees it.

- _Blocks own their spans and links._ Text becomes `Span` items. Style wrappers (`<strong>`,
  `<em>`, ...) and links add a mark to each span produced beneath them and pass the spans up
  unwrapped. The nearest enclosing block (`<p>`, `<h1>`, `<li>`, a table cell) collects the spans
  and any link definitions that came up with them. So a link wrapping partially-styled text marks
  exactly the spans inside it:
  ```html
  <p><a href="https://example.com"><strong>bold link</strong> plain link</a> plain</p>
  ```
  - "bold link" gets `["strong", <link-key>]`
  - " plain link" gets `[<link-key>]`
  - " plain" gets no marks

- _Lists are flat._ Portable text has no list container. Each `<li>` becomes a `ListBlock`
  carrying its nesting depth and list type. Depth is incremented only on entering a `<ul>` or
  `<ol>`, never for repeated items at the same level. Items of a nested list bubble up past the
  item that contains them, following it in document order.

- _Tables are nested._ A table holds rows, a row holds cells, and a cell holds block items. Loose
  text in a cell is wrapped in a synthetic "normal" block.

- _References are mandatory._ Images, internal links, and embedded objects must identify their
  target. When they don't the whole transformation fails; there is no partial output.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Callable, Iterable, Iterator, Mapping, NamedTuple, Optional, Sequence, cast

from typing_extensions import TypeAlias

from rich_text_resolver.documents.blocks import (
    Block,
    BlockItem,
    Component,
    ExternalLink,
    Image,
    InternalLink,
    KeyGenerator,
    ListBlock,
    ListType,
    MarkDef,
    PortableTextItem,
    Span,
    Table,
    TableCell,
    TableRow,
)
from rich_text_resolver.errors import UnsupportedRoleError
from rich_text_resolver.logger import logger, trace_logger
from rich_text_resolver.parser.html import parse_html
from rich_text_resolver.parser.nodes import DomHtmlNode, DomNode, DomTextNode
from rich_text_resolver.transformers.categorizer import categorize
from rich_text_resolver.transformers.classifier import (
    STYLE_MARK_NAMES,
    Role,
    classify,
    is_external_link,
    is_ordered_list,
)
from rich_text_resolver.transformers.references import (
    ASSET_CANDIDATES,
    ITEM_LINK_CANDIDATES,
    OBJECT_CANDIDATES,
    require_reference,
)

# ------------------------------------------------------------------------------------------------
# LIST CONTEXT
# ------------------------------------------------------------------------------------------------


class ListContext(NamedTuple):
    """List nesting state threaded top-down through the walk.

    `depth` counts the list containers enclosing a node. `list_type` is the type of the innermost
    one, None outside any list.
    """

    depth: int = 0
    list_type: Optional[ListType] = None


ROOT_CONTEXT = ListContext(0, None)


def next_context(node: DomNode, context: ListContext) -> ListContext:
    """The list context for the children of `node`.

    Identical to `context` unless `node` is a list container, in which case depth is incremented
    and the list type is taken from the container.
    """
    if isinstance(node, DomHtmlNode) and classify(node) is Role.LIST_CONTAINER:
        return ListContext(context.depth + 1, "number" if is_ordered_list(node) else "bullet")
    return context


# ------------------------------------------------------------------------------------------------
# ENTRY POINTS
# ------------------------------------------------------------------------------------------------


def transform(
    nodes: Iterable[DomNode], key_factory: Optional[Callable[[], str]] = None
) -> list[BlockItem]:
    """Transform the top-level `nodes` of a rich-text field into portable-text block items.

    Each call generates its own keys. Pass `key_factory` to control key values, for example to get
    deterministic output.

    Raises `ReferenceResolutionError` when an image, internal link, or embedded object doesn't
    identify its target.
    """
    keys = KeyGenerator(key_factory)

    items: list[PortableTextItem] = []
    for node in nodes:
        items.extend(_transform_node(node, ROOT_CONTEXT, keys))

    blocks = list(_wrap_loose_spans(items, keys))
    logger.debug("transformed rich text into %d top-level blocks", len(blocks))
    return blocks


def transform_html(
    markup: str, key_factory: Optional[Callable[[], str]] = None
) -> list[BlockItem]:
    """Parse rich-text `markup` and transform it into portable-text block items."""
    return transform(parse_html(markup), key_factory)


def _transform_node(node: DomNode, context: ListContext, keys: KeyGenerator) -> PortableTextItems:
    """Recursively transform `node`, children first."""
    role = classify(node)
    trace_logger.detail(  # type: ignore
        "transforming %s node at list depth %d", role.value, context.depth
    )

    children: PortableTextItems = []
    if isinstance(node, DomHtmlNode):
        child_context = next_context(node, context)
        for child in node.children:
            children.extend(_transform_node(child, child_context, keys))

    return _transform_function_for(role)(node, children, context, keys)


def _transform_function_for(role: Role) -> TransformFunction:
    try:
        return TRANSFORMS[role]
    except KeyError:
        raise UnsupportedRoleError(role) from None


# ------------------------------------------------------------------------------------------------
# LOOSE-SPAN ACCUMULATOR
# ------------------------------------------------------------------------------------------------


class _LooseSpanAccumulator:
    """Accumulates spans found outside any block and forms them into a block on flush().

    - The accumulator starts empty.
    - `.flush()` is a block iterator and generates zero or one `Block`.
    - `.flush()` generates zero blocks when no spans have been accumulated, or when
      `drop_whitespace` is set and the accumulated spans contain only whitespace.
    - `.flush()` resets the accumulator to its initial empty state.
    - A link definition goes to the block whose spans carry its key, wherever it arrives. A link
      around a block item delivers its definition after that block item, when the spans it marks
      have already been flushed.
    """

    def __init__(
        self, keys: KeyGenerator, drop_whitespace: bool, mark_defs: Mapping[str, MarkDef]
    ):
        self._keys = keys
        self._drop_whitespace = drop_whitespace
        self._mark_defs_by_key = mark_defs
        self._spans: list[Span] = []
        self._unused_mark_defs: list[MarkDef] = []

    def add(self, span: Span) -> None:
        """Add `span` to the block-under-construction."""
        self._spans.append(span)

    def add_unused_mark_def(self, mark_def: MarkDef) -> None:
        """Add a link definition no span refers to, e.g. that of an empty anchor."""
        self._unused_mark_defs.append(mark_def)

    def flush(self) -> Iterator[Block]:
        """Generate zero-or-one synthetic "normal" `Block` and clear the accumulator."""
        spans, unused_mark_defs = self._spans[:], self._unused_mark_defs[:]
        self._spans.clear()
        self._unused_mark_defs.clear()

        if not spans:
            return

        if self._drop_whitespace and not "".join(s.text for s in spans).strip():
            return

        mark_defs = [*self._iter_mark_defs_for(spans), *unused_mark_defs]
        yield Block(self._keys(), style="normal", children=spans, mark_defs=mark_defs)

    def _iter_mark_defs_for(self, spans: Sequence[Span]) -> Iterator[MarkDef]:
        """The link definitions of `spans`, each once, in order of first use."""
        seen: set[str] = set()
        for span in spans:
            for mark in span.marks:
                if mark in seen or mark not in self._mark_defs_by_key:
                    continue
                seen.add(mark)
                yield self._mark_defs_by_key[mark]


def _wrap_loose_spans(
    items: Sequence[PortableTextItem], keys: KeyGenerator
) -> Iterator[BlockItem]:
    """Generate block items from `items`, wrapping each run of loose spans in a "normal" block.

    When any block item is present, runs of whitespace-only spans are formatting between blocks
    and are dropped.
    """
    has_block_items = any(_is_block_item(item) for item in items)
    mark_defs = {
        item.key: item for item in items if isinstance(item, (ExternalLink, InternalLink))
    }
    used_marks = {mark for item in items if isinstance(item, Span) for mark in item.marks}
    accum = _LooseSpanAccumulator(keys, drop_whitespace=has_block_items, mark_defs=mark_defs)

    for item in items:
        if isinstance(item, Span):
            accum.add(item)
        elif isinstance(item, (ExternalLink, InternalLink)):
            # -- definitions in use are delivered with the spans that carry their key --
            if item.key not in used_marks:
                accum.add_unused_mark_def(item)
        elif isinstance(item, (TableRow, TableCell)):
            logger.warning("dropping table %s found outside of a table", item._type)
        else:
            yield from accum.flush()
            yield item

    yield from accum.flush()


def _is_block_item(item: PortableTextItem) -> bool:
    return isinstance(item, (Block, Image, Component, Table))


# ------------------------------------------------------------------------------------------------
# TRANSFORM FUNCTIONS
# ------------------------------------------------------------------------------------------------


PortableTextItems: TypeAlias = "list[PortableTextItem]"

TransformFunction: TypeAlias = Callable[
    [DomNode, "list[PortableTextItem]", ListContext, KeyGenerator], "list[PortableTextItem]"
]
"""Signature shared by every transform: node, its transformed children, list context, keys."""


def _transform_text(
    node: DomNode, children: PortableTextItems, context: ListContext, keys: KeyGenerator
) -> PortableTextItems:
    return [Span(keys(), cast(DomTextNode, node).content)]


def _transform_line_break(
    node: DomNode, children: PortableTextItems, context: ListContext, keys: KeyGenerator
) -> PortableTextItems:
    return [Span(keys(), "\n")]


def _transform_block(
    node: DomNode, children: PortableTextItems, context: ListContext, keys: KeyGenerator
) -> PortableTextItems:
    """A `<p>` becomes a "normal" block, a heading a block styled with its tag name.

    Block items nested inside (not valid in the dialect but it happens) follow the block.
    """
    tag_name = cast(DomHtmlNode, node).tag_name.lower()
    categories = categorize(children)
    block = Block(
        keys(),
        style="normal" if tag_name == "p" else tag_name,
        children=categories.spans,
        mark_defs=categories.marks,
    )
    return [block, *categories.block_level]


def _transform_inline_style(
    node: DomNode, children: PortableTextItems, context: ListContext, keys: KeyGenerator
) -> PortableTextItems:
    """Style marks are the style name itself, they need no `markDefs` entry."""
    tag_name = cast(DomHtmlNode, node).tag_name.lower()
    return _mark_spans(STYLE_MARK_NAMES[tag_name], children)


def _transform_link(
    node: DomNode, children: PortableTextItems, context: ListContext, keys: KeyGenerator
) -> PortableTextItems:
    """Mark the spans within the link with the key of a new link definition.

    The definition travels up with the spans until a block collects it into its `markDefs`.
    """
    element = cast(DomHtmlNode, node)

    link: MarkDef = (
        ExternalLink(keys(), attributes=dict(element.attributes))
        if is_external_link(element)
        else InternalLink(
            keys(),
            require_reference(
                element.tag_name, element.attributes, ITEM_LINK_CANDIDATES, "item link"
            ),
        )
    )

    return [*_mark_spans(link.key, children), link]


def _transform_list_container(
    node: DomNode, children: PortableTextItems, context: ListContext, keys: KeyGenerator
) -> PortableTextItems:
    """A list contributes only its items; the depth change was applied on the way down."""
    return [
        item for item in children if not (isinstance(item, Span) and not item.text.strip())
    ]


def _transform_list_item(
    node: DomNode, children: PortableTextItems, context: ListContext, keys: KeyGenerator
) -> PortableTextItems:
    """One list block for this item, then the items of any nested list, unchanged."""
    categories = categorize(children)
    list_block = ListBlock(
        keys(),
        children=categories.spans,
        mark_defs=categories.marks,
        # -- an `<li>` outside any list is still a list item, at the first level --
        list_item=context.list_type or "bullet",
        level=max(context.depth, 1),
    )
    return [list_block, *categories.block_level]


def _transform_image(
    node: DomNode, children: PortableTextItems, context: ListContext, keys: KeyGenerator
) -> PortableTextItems:
    """A `<figure>` becomes an image; `src` and `alt` come from its `<img>` when it has one."""
    figure = cast(DomHtmlNode, node)
    img = _find_descendant(figure, "img")
    # -- attributes on the figure win over those on its img --
    attributes = {**(img.attributes if img else {}), **figure.attributes}

    reference = require_reference(figure.tag_name, attributes, ASSET_CANDIDATES, "asset")

    return [Image(keys(), reference, url=attributes.get("src"), alt=attributes.get("alt"))]


def _transform_embedded_object(
    node: DomNode, children: PortableTextItems, context: ListContext, keys: KeyGenerator
) -> PortableTextItems:
    element = cast(DomHtmlNode, node)
    reference = require_reference(
        element.tag_name, element.attributes, OBJECT_CANDIDATES, "component"
    )
    data_type = element.attributes.get("data-rel") or element.attributes.get("data-type")
    return [Component(keys(), reference, data_type=data_type)]


def _transform_table(
    node: DomNode, children: PortableTextItems, context: ListContext, keys: KeyGenerator
) -> PortableTextItems:
    return [Table(keys(), rows=categorize(children).rows)]


def _transform_table_row(
    node: DomNode, children: PortableTextItems, context: ListContext, keys: KeyGenerator
) -> PortableTextItems:
    return [TableRow(keys(), cells=categorize(children).cells)]


def _transform_table_cell(
    node: DomNode, children: PortableTextItems, context: ListContext, keys: KeyGenerator
) -> PortableTextItems:
    return [TableCell(keys(), content=list(_wrap_loose_spans(children, keys)))]


def _transform_pass_through(
    node: DomNode, children: PortableTextItems, context: ListContext, keys: KeyGenerator
) -> PortableTextItems:
    return children


def _mark_spans(mark: str, items: PortableTextItems) -> PortableTextItems:
    """Add `mark` to each span in `items`; spans already inside a block are not touched."""
    for item in items:
        if isinstance(item, Span) and mark not in item.marks:
            item.marks.append(mark)
    return items


def _find_descendant(node: DomHtmlNode, tag_name: str) -> Optional[DomHtmlNode]:
    """The first element named `tag_name` below `node`, depth-first."""
    for child in node.children:
        if not isinstance(child, DomHtmlNode):
            continue
        if child.tag_name.lower() == tag_name:
            return child
        if (found := _find_descendant(child, tag_name)) is not None:
            return found
    return None


# ------------------------------------------------------------------------------------------------
# DISPATCH TABLE
# ------------------------------------------------------------------------------------------------


TRANSFORMS: Mapping[Role, TransformFunction] = MappingProxyType(
    {
        Role.TEXT: _transform_text,
        Role.LINE_BREAK: _transform_line_break,
        Role.BLOCK: _transform_block,
        Role.INLINE_STYLE: _transform_inline_style,
        Role.LINK: _transform_link,
        Role.LIST_CONTAINER: _transform_list_container,
        Role.LIST_ITEM: _transform_list_item,
        Role.IMAGE: _transform_image,
        Role.EMBEDDED_OBJECT: _transform_embedded_object,
        Role.TABLE: _transform_table,
        Role.TABLE_ROW: _transform_table_row,
        Role.TABLE_CELL: _transform_table_cell,
        Role.PASS_THROUGH: _transform_pass_through,
    }
)


def _check_dispatch_table_is_exhaustive() -> None:
    """A role without a transform is a coding error; fail at import rather than mid-document."""
    for role in Role:
        if role not in TRANSFORMS:
            raise UnsupportedRoleError(role)


_check_dispatch_table_is_exhaustive()
