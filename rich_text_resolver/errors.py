from __future__ import annotations

from typing import Mapping, Sequence


class ReferenceResolutionError(ValueError):
    """Error raised when an element lacks every attribute that could identify what it references.

    Images, internal links, and embedded objects must name an asset or content item. When none of
    the recognized attributes is present the source document is malformed and the transformation
    is aborted.
    """

    def __init__(
        self, tag_name: str, attributes: Mapping[str, str], candidates: Sequence[str], kind: str
    ):
        self.tag_name = tag_name
        self.attributes = dict(attributes)
        self.candidates = tuple(candidates)
        self.kind = kind
        self.message = (
            f"Unable to resolve {kind} reference for <{tag_name}> element - "
            f"expected one of {', '.join(self.candidates)}, found attributes "
            f"{sorted(self.attributes) or 'none'}."
        )
        super().__init__(self.message)


class UnsupportedRoleError(NotImplementedError):
    """Error raised when a node role has no transform registered for it."""

    def __init__(self, role: object):
        self.role = role
        self.message = f"No transform is registered for role {role!r}."
        super().__init__(self.message)


class ParserDepthExceededError(ValueError):
    """Error raised when markup nests elements deeper than the configured limit."""

    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        self.message = f"Maximum element nesting depth exceeded - maximum={max_depth}."
        super().__init__(self.message)
