import json
import pathlib

import pytest

from rich_text_resolver.documents.blocks import (
    Block,
    Component,
    Image,
    ListBlock,
    Reference,
    Span,
    Table,
    TableCell,
    TableRow,
)
from rich_text_resolver.staging import base
from test_rich_text_resolver.unit_utils import assert_round_trips_through_JSON


def test_blocks_to_dicts():
    blocks = [Block("b1", children=[Span("s1", "hello")]), Image("i1", Reference("a1"))]

    block_dicts = base.blocks_to_dicts(blocks)

    assert block_dicts == [
        {
            "_type": "block",
            "_key": "b1",
            "children": [{"_type": "span", "_key": "s1", "marks": [], "text": "hello"}],
            "markDefs": [],
            "style": "normal",
        },
        {
            "_type": "image",
            "_key": "i1",
            "asset": {
                "_type": "reference",
                "_ref": "a1",
                "referenceType": "id",
                "alt": None,
                "url": None,
            },
        },
    ]


def test_blocks_from_dicts_restores_each_kind_of_block_item():
    blocks = [
        Block("b1", "h3", children=[Span("s1", "title")]),
        ListBlock("l1", children=[Span("s2", "item")], list_item="number", level=2),
        Image("i1", Reference("a1"), url="/a.png", alt=""),
        Component("c1", Reference("hero", "codename"), data_type="component"),
        Table("t1", [TableRow("r1", [TableCell("c2", [Block("b2", children=[Span("s3", "x")])])])]),
    ]

    assert base.blocks_from_dicts(base.blocks_to_dicts(blocks)) == blocks


def test_blocks_from_dicts_rejects_an_item_that_cannot_stand_at_block_level():
    with pytest.raises(ValueError, match="'span' item cannot appear at block level"):
        base.blocks_from_dicts([{"_type": "span", "_key": "s1", "text": "x"}])


def test_blocks_to_json_returns_a_sorted_indented_json_string():
    json_str = base.blocks_to_json([Block("b1", children=[Span("s1", "x")])], indent=2)

    assert json_str is not None
    assert json_str.startswith('[\n  {\n    "_key": "b1",')
    assert json.loads(json_str)[0]["children"][0]["text"] == "x"


def test_blocks_to_json_writes_a_file_when_a_filename_is_given(tmp_path: pathlib.Path):
    filename = str(tmp_path / "blocks.json")
    blocks = [Block("b1", children=[Span("s1", "héllo")])]

    assert base.blocks_to_json(blocks, filename=filename) is None

    assert base.blocks_from_json(filename=filename) == blocks


def test_blocks_from_json_reads_a_string():
    text = '[{"_type": "block", "_key": "b1", "children": [{"_key": "s1", "text": "x"}]}]'

    assert base.blocks_from_json(text=text) == [Block("b1", children=[Span("s1", "x")])]


def test_blocks_from_json_requires_exactly_one_source():
    with pytest.raises(ValueError, match="Exactly one of filename and text must be specified."):
        base.blocks_from_json()
    with pytest.raises(ValueError, match="Exactly one of filename and text must be specified."):
        base.blocks_from_json(filename="blocks.json", text="[]")


def test_blocks_to_text_joins_the_text_of_each_block_item():
    blocks = [
        Block("b1", children=[Span("s1", "Hello, "), Span("s2", "world")]),
        Image("i1", Reference("a1")),
        Block("b2", children=[Span("s3", "  ")]),
        Table("t1", [TableRow("r1", [TableCell("c1", [Block("b3", children=[Span("s4", "x")])])])]),
    ]

    assert base.blocks_to_text(blocks) == "Hello, world\n\nx"


def test_round_trip_of_a_transformed_document():
    blocks = [
        ListBlock("l1", children=[Span("s1", "a", ["strong"])], list_item="bullet", level=1),
        Component("c1", Reference("item", "external-id"), data_type="link"),
    ]

    assert_round_trips_through_JSON(blocks)
