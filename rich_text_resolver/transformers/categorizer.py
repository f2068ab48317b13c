"""Partitions transformed children into buckets by item kind.

Each composite transform (blocks, style wrappers, list items, table parts) receives a mixed
sequence of already-transformed children and needs only some of them. `categorize()` sorts them in
a single pass so each transform can pick the buckets it cares about.
"""

from __future__ import annotations

import dataclasses as dc
from typing import Iterable

from rich_text_resolver.documents.blocks import (
    Block,
    BlockItem,
    Component,
    ExternalLink,
    Image,
    InternalLink,
    ListBlock,
    MarkDef,
    PortableTextItem,
    Span,
    Table,
    TableCell,
    TableRow,
)


@dc.dataclass
class Categories:
    """Children of one composite node, sorted by kind.

    Order within each bucket is document order. A fresh instance is created for each composite
    node, it is never shared across transforms.
    """

    spans: list[Span] = dc.field(default_factory=list)
    links: list[ExternalLink] = dc.field(default_factory=list)
    item_links: list[InternalLink] = dc.field(default_factory=list)
    # -- every link definition pending attachment to the enclosing block, both kinds --
    marks: list[MarkDef] = dc.field(default_factory=list)
    cells: list[TableCell] = dc.field(default_factory=list)
    rows: list[TableRow] = dc.field(default_factory=list)
    list_blocks: list[ListBlock] = dc.field(default_factory=list)
    blocks: list[Block] = dc.field(default_factory=list)
    images: list[Image] = dc.field(default_factory=list)
    component_refs: list[Component] = dc.field(default_factory=list)
    tables: list[Table] = dc.field(default_factory=list)
    # -- every item that can stand on its own at the top level, in document order --
    block_level: list[BlockItem] = dc.field(default_factory=list)


def categorize(items: Iterable[PortableTextItem]) -> Categories:
    """Sort `items` into a `Categories` instance in a single pass."""
    categories = Categories()

    for item in items:
        if isinstance(item, Span):
            categories.spans.append(item)
        elif isinstance(item, ExternalLink):
            categories.links.append(item)
            categories.marks.append(item)
        elif isinstance(item, InternalLink):
            categories.item_links.append(item)
            categories.marks.append(item)
        elif isinstance(item, TableCell):
            categories.cells.append(item)
        elif isinstance(item, TableRow):
            categories.rows.append(item)
        else:
            # -- `ListBlock` is a subclass of `Block` so it must be tested first --
            if isinstance(item, ListBlock):
                categories.list_blocks.append(item)
            elif isinstance(item, Block):
                categories.blocks.append(item)
            elif isinstance(item, Image):
                categories.images.append(item)
            elif isinstance(item, Component):
                categories.component_refs.append(item)
            elif isinstance(item, Table):
                categories.tables.append(item)
            categories.block_level.append(item)

    return categories
