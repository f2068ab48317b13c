"""Renders portable-text blocks to the rich-text dialect accepted by the Management API.

The output is the same dialect `parse_html()` reads, so transforming it again produces equivalent
blocks. References are written back with the attribute matching their reference type.
"""

from __future__ import annotations

from typing import Sequence

from rich_text_resolver.documents.blocks import BlockItem, Component, Image
from rich_text_resolver.resolution.html import HtmlRenderer, ResolverFunction, html_attributes
from rich_text_resolver.transformers.references import (
    ASSET_CANDIDATES,
    OBJECT_CANDIDATES,
    reference_attribute,
)

OBJECT_TYPE = "application/kenticocloud"


def _resolve_image(image: Image, children: str) -> str:
    attribute = reference_attribute(image.reference, ASSET_CANDIDATES)
    attributes = html_attributes({attribute: image.reference.ref})
    return f'<figure{attributes}><img src="#"{attributes}></figure>'


def _resolve_component(component: Component, children: str) -> str:
    attributes = html_attributes(
        {
            "type": OBJECT_TYPE,
            # -- components keep their discriminator, everything else is a linked item --
            "data-type": "component" if component.data_type == "component" else "item",
            reference_attribute(component.reference, OBJECT_CANDIDATES): component.reference.ref,
        }
    )
    return f"<object{attributes}></object>"


MAPI_RESOLVERS: dict[str, ResolverFunction] = {
    Image._type: _resolve_image,
    Component._type: _resolve_component,
}


def to_management_api_format(blocks: Sequence[BlockItem]) -> str:
    """Render `blocks` as Management API rich-text markup."""
    return HtmlRenderer(MAPI_RESOLVERS).render(blocks)
