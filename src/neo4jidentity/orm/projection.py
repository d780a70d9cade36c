"""
Projection of model state into Cypher parameter payloads.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Iterable

from neo4jidentity.exceptions import PreconditionError
from neo4jidentity.orm.descriptors import describe


class ProjectionMode(str, Enum):
    INCLUDE = "include"
    EXCLUDE = "exclude"


def project(
    instance: Any,
    mode: ProjectionMode,
    field_names: Iterable[str] = (),
) -> Dict[str, Any]:
    """
    Build a name -> value payload from an instance's current field values.

    Only fields on the instance type's descriptor are considered, in
    descriptor order, so the internal identifier never appears. Names are
    matched exactly. Values are passed through untouched; nested lists and
    dicts are left for the driver to serialize.

    Args:
        instance: Model instance to read from
        mode: INCLUDE keeps only ``field_names``, EXCLUDE drops them
        field_names: Field names the mode applies to

    Returns:
        Ordered dict suitable as a query parameter

    Raises:
        PreconditionError: If ``instance`` is None
    """
    if instance is None:
        raise PreconditionError("instance")

    names = set(field_names)
    mode = ProjectionMode(mode)
    descriptor = describe(type(instance))

    payload: Dict[str, Any] = {}
    for field in descriptor.fields:
        if not field.readable:
            continue
        selected = field.name in names
        if mode is ProjectionMode.EXCLUDE:
            selected = not selected
        if selected:
            payload[field.name] = getattr(instance, field.name)
    return payload


def include(instance: Any, *field_names: str) -> Dict[str, Any]:
    """Project only the given fields."""
    return project(instance, ProjectionMode.INCLUDE, field_names)


def exclude(instance: Any, *field_names: str) -> Dict[str, Any]:
    """Project every field except the given ones."""
    return project(instance, ProjectionMode.EXCLUDE, field_names)
