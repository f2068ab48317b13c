"""The portable-text block-document model.

Every item produced by the transformer is one of the dataclasses in this module. Each serializes
to the JSON-ready portable-text form with `.to_dict()` and can be restored with `item_from_dict()`.
"""

from __future__ import annotations

import dataclasses as dc
import uuid
from typing import Any, Callable, ClassVar, Iterable, Iterator, Optional, Union

from typing_extensions import Literal, TypeAlias

from rich_text_resolver.config import env_config

ListType: TypeAlias = Literal["bullet", "number"]
ReferenceType: TypeAlias = Literal["id", "external-id", "codename"]

STYLE_MARKS: tuple[str, ...] = ("strong", "em", "sub", "sup", "code")
"""Mark values that are style names rather than keys into `markDefs`."""


# ------------------------------------------------------------------------------------------------
# KEY GENERATION
# ------------------------------------------------------------------------------------------------


class KeyGenerator:
    """Produces `_key` values that are unique for the lifetime of this generator.

    One generator is created for each transformation run. By default keys are the leading hex
    characters of a random UUID. A `key_factory` can be supplied for deterministic keys, in which
    case a repeated key is an error rather than something to retry.
    """

    def __init__(
        self, key_factory: Optional[Callable[[], str]] = None, length: Optional[int] = None
    ):
        self._key_factory = key_factory
        self._length = env_config.KEY_LENGTH if length is None else length
        self._issued: set[str] = set()

    def __call__(self) -> str:
        key = self._next_key()
        while key in self._issued:
            if self._key_factory is not None:
                raise ValueError(f"key factory produced duplicate key {key!r}")
            key = self._next_key()
        self._issued.add(key)
        return key

    def _next_key(self) -> str:
        if self._key_factory is not None:
            return self._key_factory()
        return uuid.uuid4().hex[: self._length]


# ------------------------------------------------------------------------------------------------
# INLINE ITEMS
# ------------------------------------------------------------------------------------------------


@dc.dataclass
class Span:
    """A run of text and the marks that apply to it.

    Each mark is either a style name from `STYLE_MARKS` or the key of a link definition in the
    `markDefs` of the enclosing block.
    """

    _type: ClassVar[str] = "span"

    key: str
    text: str
    marks: list[str] = dc.field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"_type": self._type, "_key": self.key, "marks": list(self.marks), "text": self.text}

    @classmethod
    def from_dict(cls, input_dict: dict[str, Any]) -> Span:
        return cls(
            key=input_dict["_key"],
            text=input_dict.get("text", ""),
            marks=list(input_dict.get("marks", [])),
        )


@dc.dataclass
class Reference:
    """Pointer to an asset or content item, tagged with which identifier was used."""

    _type: ClassVar[str] = "reference"

    ref: str
    reference_type: ReferenceType = "id"

    def to_dict(self) -> dict[str, Any]:
        return {"_type": self._type, "_ref": self.ref, "referenceType": self.reference_type}

    @classmethod
    def from_dict(cls, input_dict: dict[str, Any]) -> Reference:
        return cls(ref=input_dict["_ref"], reference_type=input_dict.get("referenceType", "id"))


@dc.dataclass
class ExternalLink:
    """Mark definition for an `<a href="...">` pointing outside the CMS.

    All attributes of the source element are kept (`href`, `title`, `target`, `rel`,
    `data-new-window`, ...) so the link can be rendered back faithfully.
    """

    _type: ClassVar[str] = "link"

    key: str
    attributes: dict[str, str] = dc.field(default_factory=dict)

    @property
    def href(self) -> Optional[str]:
        return self.attributes.get("href")

    def to_dict(self) -> dict[str, Any]:
        return {"_type": self._type, "_key": self.key, **self.attributes}

    @classmethod
    def from_dict(cls, input_dict: dict[str, Any]) -> ExternalLink:
        attributes = {k: v for k, v in input_dict.items() if k not in ("_type", "_key")}
        return cls(key=input_dict["_key"], attributes=attributes)


@dc.dataclass
class InternalLink:
    """Mark definition for a link to another content item."""

    _type: ClassVar[str] = "internalLink"

    key: str
    reference: Reference

    def to_dict(self) -> dict[str, Any]:
        return {"_type": self._type, "_key": self.key, "reference": self.reference.to_dict()}

    @classmethod
    def from_dict(cls, input_dict: dict[str, Any]) -> InternalLink:
        return cls(key=input_dict["_key"], reference=Reference.from_dict(input_dict["reference"]))


MarkDef: TypeAlias = Union[ExternalLink, InternalLink]


# ------------------------------------------------------------------------------------------------
# BLOCK-LEVEL ITEMS
# ------------------------------------------------------------------------------------------------


@dc.dataclass
class Block:
    """A paragraph or heading; spans plus the link definitions those spans refer to."""

    _type: ClassVar[str] = "block"

    key: str
    style: str = "normal"
    children: list[Span] = dc.field(default_factory=list)
    mark_defs: list[MarkDef] = dc.field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(span.text for span in self.children)

    def to_dict(self) -> dict[str, Any]:
        return {
            "_type": self._type,
            "_key": self.key,
            "children": [span.to_dict() for span in self.children],
            "markDefs": [mark_def.to_dict() for mark_def in self.mark_defs],
            "style": self.style,
        }

    @classmethod
    def from_dict(cls, input_dict: dict[str, Any]) -> Block:
        return cls(
            key=input_dict["_key"],
            style=input_dict.get("style", "normal"),
            children=[Span.from_dict(d) for d in input_dict.get("children", [])],
            mark_defs=[_mark_def_from_dict(d) for d in input_dict.get("markDefs", [])],
        )


@dc.dataclass
class ListBlock(Block):
    """A list item; a block that also knows its list nesting depth and list type."""

    list_item: ListType = "bullet"
    level: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "level": self.level, "listItem": self.list_item}

    @classmethod
    def from_dict(cls, input_dict: dict[str, Any]) -> ListBlock:
        block = Block.from_dict(input_dict)
        return cls(
            key=block.key,
            style=block.style,
            children=block.children,
            mark_defs=block.mark_defs,
            list_item=input_dict["listItem"],
            level=input_dict.get("level", 1),
        )


@dc.dataclass
class Image:
    """An embedded image asset."""

    _type: ClassVar[str] = "image"

    key: str
    reference: Reference
    url: Optional[str] = None
    alt: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "_type": self._type,
            "_key": self.key,
            "asset": {**self.reference.to_dict(), "alt": self.alt, "url": self.url},
        }

    @classmethod
    def from_dict(cls, input_dict: dict[str, Any]) -> Image:
        asset = input_dict["asset"]
        return cls(
            key=input_dict["_key"],
            reference=Reference.from_dict(asset),
            url=asset.get("url"),
            alt=asset.get("alt"),
        )


@dc.dataclass
class Component:
    """A component or linked content item embedded in the rich text."""

    _type: ClassVar[str] = "componentOrItem"

    key: str
    reference: Reference
    # -- relation discriminator, e.g. "component", "item" or "link" --
    data_type: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "_type": self._type,
            "_key": self.key,
            "componentOrItem": self.reference.to_dict(),
            "dataType": self.data_type,
        }

    @classmethod
    def from_dict(cls, input_dict: dict[str, Any]) -> Component:
        return cls(
            key=input_dict["_key"],
            reference=Reference.from_dict(input_dict["componentOrItem"]),
            data_type=input_dict.get("dataType"),
        )


@dc.dataclass
class TableCell:
    _type: ClassVar[str] = "cell"

    key: str
    content: list[BlockItem] = dc.field(default_factory=list)

    @property
    def child_blocks_count(self) -> int:
        return len(self.content)

    def to_dict(self) -> dict[str, Any]:
        return {
            "_type": self._type,
            "_key": self.key,
            "childBlocksCount": self.child_blocks_count,
            "content": [item.to_dict() for item in self.content],
        }

    @classmethod
    def from_dict(cls, input_dict: dict[str, Any]) -> TableCell:
        return cls(
            key=input_dict["_key"],
            content=[block_item_from_dict(d) for d in input_dict.get("content", [])],
        )


@dc.dataclass
class TableRow:
    _type: ClassVar[str] = "row"

    key: str
    cells: list[TableCell] = dc.field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "_type": self._type,
            "_key": self.key,
            "cells": [cell.to_dict() for cell in self.cells],
        }

    @classmethod
    def from_dict(cls, input_dict: dict[str, Any]) -> TableRow:
        return cls(
            key=input_dict["_key"],
            cells=[TableCell.from_dict(d) for d in input_dict.get("cells", [])],
        )


@dc.dataclass
class Table:
    _type: ClassVar[str] = "table"

    key: str
    rows: list[TableRow] = dc.field(default_factory=list)

    @property
    def num_columns(self) -> int:
        """Cell count of the widest row, zero for a table without rows."""
        return max((len(row.cells) for row in self.rows), default=0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "_type": self._type,
            "_key": self.key,
            "numColumns": self.num_columns,
            "rows": [row.to_dict() for row in self.rows],
        }

    @classmethod
    def from_dict(cls, input_dict: dict[str, Any]) -> Table:
        return cls(
            key=input_dict["_key"],
            rows=[TableRow.from_dict(d) for d in input_dict.get("rows", [])],
        )


BlockItem: TypeAlias = Union[Block, ListBlock, Image, Component, Table]
"""The items allowed at the top level of a transformed document and inside a table cell."""

PortableTextItem: TypeAlias = Union[
    Span, ExternalLink, InternalLink, Block, ListBlock, Image, Component, Table, TableRow, TableCell
]
"""Any item that can be produced while transforming a node."""


# ------------------------------------------------------------------------------------------------
# DESERIALIZATION
# ------------------------------------------------------------------------------------------------


TYPE_TO_ITEM_MAP: dict[str, type[Any]] = {
    Span._type: Span,
    ExternalLink._type: ExternalLink,
    InternalLink._type: InternalLink,
    Block._type: Block,
    Image._type: Image,
    Component._type: Component,
    Table._type: Table,
    TableRow._type: TableRow,
    TableCell._type: TableCell,
}


def item_from_dict(input_dict: dict[str, Any]) -> PortableTextItem:
    """Restore any item from its dict form, dispatching on `_type`."""
    item_type = input_dict.get("_type")
    if item_type == Block._type and "listItem" in input_dict:
        return ListBlock.from_dict(input_dict)
    if item_type not in TYPE_TO_ITEM_MAP:
        raise ValueError(f"unrecognized portable-text item type {item_type!r}")
    return TYPE_TO_ITEM_MAP[item_type].from_dict(input_dict)


def block_item_from_dict(input_dict: dict[str, Any]) -> BlockItem:
    item = item_from_dict(input_dict)
    if not isinstance(item, (Block, Image, Component, Table)):
        raise ValueError(f"{input_dict.get('_type')!r} item cannot appear at block level")
    return item


def _mark_def_from_dict(input_dict: dict[str, Any]) -> MarkDef:
    item = item_from_dict(input_dict)
    if not isinstance(item, (ExternalLink, InternalLink)):
        raise ValueError(f"{input_dict.get('_type')!r} item is not a mark definition")
    return item


# ------------------------------------------------------------------------------------------------
# TRAVERSAL
# ------------------------------------------------------------------------------------------------


def iter_spans(items: Iterable[PortableTextItem]) -> Iterator[Span]:
    """Generate every span within `items` in document order, descending into tables."""
    for item in items:
        if isinstance(item, Span):
            yield item
        elif isinstance(item, Block):
            yield from item.children
        elif isinstance(item, Table):
            yield from iter_spans(item.rows)
        elif isinstance(item, TableRow):
            yield from iter_spans(item.cells)
        elif isinstance(item, TableCell):
            yield from iter_spans(item.content)
