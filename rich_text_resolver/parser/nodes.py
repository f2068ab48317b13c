"""Node tree consumed by the transformer.

A parsed rich-text field is an ordered sequence of nodes. A node is either a text node holding a
string payload or an element node holding a tag name, its attributes, and its child nodes.
"""

from __future__ import annotations

import dataclasses as dc
from typing import Any, Union

from typing_extensions import TypeAlias


@dc.dataclass
class DomTextNode:
    content: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "text", "content": self.content}


@dc.dataclass
class DomHtmlNode:
    tag_name: str
    attributes: dict[str, str] = dc.field(default_factory=dict)
    children: list[DomNode] = dc.field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "tag",
            "tagName": self.tag_name,
            "attributes": dict(self.attributes),
            "children": [child.to_dict() for child in self.children],
        }


DomNode: TypeAlias = Union[DomTextNode, DomHtmlNode]
