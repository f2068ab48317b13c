from __future__ import annotations

import json
from typing import Any, Iterable, Optional

from rich_text_resolver.documents.blocks import (
    BlockItem,
    block_item_from_dict,
    iter_spans,
)
from rich_text_resolver.utils import exactly_one

# ================================================================================================
# SERIALIZATION/DESERIALIZATION (SERDE) RELATED FUNCTIONS
# ================================================================================================

# == DESERIALIZERS ===============================


def blocks_from_dicts(block_dicts: Iterable[dict[str, Any]]) -> list[BlockItem]:
    """Convert a list of portable-text dicts to a list of block items.

    Raises `ValueError` when a dict has an unrecognized `_type` or is not a block-level item.
    """
    return [block_item_from_dict(item) for item in block_dicts]


def blocks_from_json(
    filename: str = "", text: str = "", encoding: str = "utf-8"
) -> list[BlockItem]:
    """Loads a list of block items from a JSON file or a string."""
    exactly_one(filename=filename, text=text)

    if filename:
        with open(filename, encoding=encoding) as f:
            block_dicts = json.load(f)
    else:
        block_dicts = json.loads(text)

    return blocks_from_dicts(block_dicts)


# == SERIALIZERS =================================


def blocks_to_dicts(blocks: Iterable[BlockItem]) -> list[dict[str, Any]]:
    """Convert block items to portable-text dicts."""
    return [b.to_dict() for b in blocks]


def blocks_to_json(
    blocks: Iterable[BlockItem],
    filename: Optional[str] = None,
    indent: int = 4,
    encoding: str = "utf-8",
) -> Optional[str]:
    """Saves a list of block items to a JSON file if filename is specified.

    Otherwise, return the list of block items as a string.
    """
    json_str = json.dumps(blocks_to_dicts(blocks), indent=indent, sort_keys=True)

    if filename is not None:
        with open(filename, "w", encoding=encoding) as f:
            f.write(json_str)
        return None

    return json_str


def blocks_to_text(blocks: Iterable[BlockItem], separator: str = "\n\n") -> str:
    """Plain text of `blocks`, one entry per block-level item with text, tables included."""
    texts = ("".join(span.text for span in iter_spans([block])) for block in blocks)
    return separator.join(text for text in texts if text.strip())
