"""Resolves which asset or content item an element refers to.

An element can identify its target by internal id, by external id, or by codename. Each kind of
referencing element has its own attribute names for these; they are tried in priority order and
the first one present wins, regardless of the order the attributes appear in the markup.
"""

from __future__ import annotations

from typing import Mapping, NamedTuple, Optional, Sequence

from rich_text_resolver.documents.blocks import Reference, ReferenceType
from rich_text_resolver.errors import ReferenceResolutionError
from rich_text_resolver.logger import logger


class Candidate(NamedTuple):
    """An attribute that may hold a reference and the kind of identifier it holds."""

    attribute: str
    reference_type: ReferenceType


ASSET_CANDIDATES: tuple[Candidate, ...] = (
    Candidate("data-asset-id", "id"),
    Candidate("data-image-id", "id"),
    Candidate("data-asset-external-id", "external-id"),
    Candidate("data-asset-codename", "codename"),
)

ITEM_LINK_CANDIDATES: tuple[Candidate, ...] = (
    Candidate("data-item-id", "id"),
    Candidate("data-item-external-id", "external-id"),
    Candidate("data-item-codename", "codename"),
)

OBJECT_CANDIDATES: tuple[Candidate, ...] = (
    Candidate("data-id", "id"),
    Candidate("data-external-id", "external-id"),
    Candidate("data-codename", "codename"),
)


def resolve_reference(
    attributes: Mapping[str, str], candidates: Sequence[Candidate]
) -> Optional[Reference]:
    """The reference named by the first of `candidates` present in `attributes`.

    An attribute that is present but empty does not count. Returns None when no candidate
    resolves; there is no fallback.
    """
    for candidate in candidates:
        if value := attributes.get(candidate.attribute):
            return Reference(ref=value, reference_type=candidate.reference_type)
    return None


def reference_attribute(reference: Reference, candidates: Sequence[Candidate]) -> str:
    """The preferred attribute name for writing `reference` back out to markup."""
    for candidate in candidates:
        if candidate.reference_type == reference.reference_type:
            return candidate.attribute
    raise ValueError(f"no attribute holds a {reference.reference_type!r} reference")


def require_reference(
    tag_name: str, attributes: Mapping[str, str], candidates: Sequence[Candidate], kind: str
) -> Reference:
    """The reference in the `attributes` of a `tag_name` element.

    Raises `ReferenceResolutionError` when none of `candidates` resolves.
    """
    reference = resolve_reference(attributes, candidates)
    if reference is None:
        logger.debug("<%s> element has no %s reference: %r", tag_name, kind, attributes)
        candidate_names = [c.attribute for c in candidates]
        raise ReferenceResolutionError(tag_name, attributes, candidate_names, kind)
    return reference
