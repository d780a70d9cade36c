"""
Cypher pattern fragments built from type descriptors.

Label and relationship type tokens are only ever taken from descriptors,
never from caller-supplied strings, so they are emitted without escaping.
Keeping parameter names unique within one statement is up to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping, Optional, Tuple, Type, Union

from neo4jidentity.orm.descriptors import TypeDescriptor, describe


InlineFilter = Union[Mapping[str, str], Iterable[str]]


class Direction(str, Enum):
    OUTGOING = "outgoing"
    INCOMING = "incoming"
    BOTH = "both"


class FragmentKind(str, Enum):
    NODE = "node"
    RELATIONSHIP = "relationship"


@dataclass(frozen=True)
class PatternFragment:
    """A node or relationship pattern ready to be embedded in a statement."""

    kind: FragmentKind
    labels: Tuple[str, ...] = ()
    variable: Optional[str] = None
    inline_filter: Tuple[Tuple[str, str], ...] = ()
    direction: Direction = Direction.OUTGOING

    def render(self) -> str:
        body = self.variable or ""
        body += "".join(f":{label}" for label in self.labels)
        if self.inline_filter:
            pairs = ",".join(f"{key}:${ref}" for key, ref in self.inline_filter)
            body += f" {{{pairs}}}" if body else f"{{{pairs}}}"

        if self.kind is FragmentKind.NODE:
            return f"({body})"

        if self.direction is Direction.OUTGOING:
            return f"-[{body}]->"
        if self.direction is Direction.INCOMING:
            return f"<-[{body}]-"
        return f"-[{body}]-"

    def __str__(self) -> str:
        return self.render()


def _normalize_filter(inline_filter: Optional[InlineFilter]) -> Tuple[Tuple[str, str], ...]:
    if not inline_filter:
        return ()
    if isinstance(inline_filter, Mapping):
        return tuple((str(key), str(ref)) for key, ref in inline_filter.items())
    return tuple((str(name), str(name)) for name in inline_filter)


def node_fragment(
    descriptor: TypeDescriptor,
    variable: Optional[str] = None,
    inline_filter: Optional[InlineFilter] = None,
) -> PatternFragment:
    return PatternFragment(
        kind=FragmentKind.NODE,
        labels=descriptor.labels,
        variable=variable,
        inline_filter=_normalize_filter(inline_filter),
    )


def node_pattern(
    descriptor: TypeDescriptor,
    variable: Optional[str] = None,
    inline_filter: Optional[InlineFilter] = None,
) -> str:
    """
    Render ``(variable:Label1:Label2 {key:$ref, ...})``.

    Args:
        descriptor: Descriptor supplying the labels, in its order
        variable: Optional variable to bind the node to
        inline_filter: Mapping of property name to parameter reference, or an
            iterable of names that reference same-named parameters

    Example:
        ```python
        node_pattern(describe(IdentityUser), "p", {"id": "user.id"})
        # '(p:IdentityUser {id:$user.id})'
        ```
    """
    return node_fragment(descriptor, variable, inline_filter).render()


def relationship_fragment(
    relation_type: Union[Type, TypeDescriptor],
    variable: Optional[str] = None,
    direction: Optional[Direction] = None,
) -> PatternFragment:
    if isinstance(relation_type, TypeDescriptor):
        descriptor, directed = relation_type, True
    else:
        descriptor = describe(relation_type)
        directed = getattr(relation_type, 'is_directed', lambda: True)()

    if direction is None:
        direction = Direction.OUTGOING if directed else Direction.BOTH

    return PatternFragment(
        kind=FragmentKind.RELATIONSHIP,
        labels=descriptor.labels[:1],
        variable=variable,
        direction=Direction(direction),
    )


def relationship_pattern(
    relation_type: Union[Type, TypeDescriptor],
    variable: Optional[str] = None,
    direction: Optional[Direction] = None,
) -> str:
    """
    Render ``-[variable:TYPE]->`` (or ``<-[...]-`` / ``-[...]-``).

    When ``direction`` is omitted, directed relationship types render
    outgoing and undirected ones render without an arrow.
    """
    return relationship_fragment(relation_type, variable, direction).render()


def labels_fragment(descriptor: TypeDescriptor) -> str:
    """Render ``:Label1:Label2`` for use in ``SET`` clauses."""
    return "".join(f":{label}" for label in descriptor.labels)
