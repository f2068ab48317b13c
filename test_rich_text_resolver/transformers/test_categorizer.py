"""Test suite for `rich_text_resolver.transformers.categorizer` module."""

from __future__ import annotations

from rich_text_resolver.documents.blocks import (
    Block,
    Component,
    ExternalLink,
    Image,
    InternalLink,
    ListBlock,
    Reference,
    Span,
    Table,
    TableCell,
    TableRow,
)
from rich_text_resolver.transformers.categorizer import Categories, categorize


def it_starts_with_empty_buckets():
    categories = Categories()

    assert categories.spans == []
    assert categories.marks == []
    assert categories.block_level == []


def it_sorts_items_into_buckets_by_kind_in_a_single_pass():
    span_1, span_2 = Span("s1", "a"), Span("s2", "b")
    link = ExternalLink("l1", {"href": "#"})
    item_link = InternalLink("l2", Reference("i1"))
    cell = TableCell("c1")
    row = TableRow("r1")
    list_block = ListBlock("li1")
    block = Block("b1")
    image = Image("im1", Reference("a1"))
    component = Component("co1", Reference("o1"))
    table = Table("t1")

    categories = categorize(
        [span_1, link, list_block, block, item_link, cell, row, image, component, table, span_2]
    )

    assert categories.spans == [span_1, span_2]
    assert categories.links == [link]
    assert categories.item_links == [item_link]
    # -- both kinds of link definition are pending marks, in document order --
    assert categories.marks == [link, item_link]
    assert categories.cells == [cell]
    assert categories.rows == [row]
    assert categories.list_blocks == [list_block]
    assert categories.blocks == [block]
    assert categories.images == [image]
    assert categories.component_refs == [component]
    assert categories.tables == [table]
    assert categories.block_level == [list_block, block, image, component, table]


def it_gives_each_call_its_own_buckets():
    first = categorize([Span("s1", "a")])
    second = categorize([])

    assert first.spans != second.spans
    assert second.spans == []
