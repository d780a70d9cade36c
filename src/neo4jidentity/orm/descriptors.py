"""
Type descriptors: labels and fields of a model class, computed once per type.

``describe`` never raises. Anything that is not a pydantic model class
describes as empty, which callers treat as "no constraint".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple
import weakref

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from neo4jidentity.orm.entities import GraphEntity
from neo4jidentity.orm.relationships import GraphRelationship


@dataclass(frozen=True)
class FieldDescriptor:
    """A named model field and how the mapping layer may access it."""

    name: str
    annotation: Any = None
    readable: bool = True
    writable: bool = True
    # Key pydantic validates this field under; None when not aliased
    alias: Optional[str] = None

    @property
    def input_name(self) -> str:
        return self.alias or self.name


@dataclass(frozen=True)
class TypeDescriptor:
    """Labels and fields derived from a model class."""

    type_name: str
    labels: Tuple[str, ...] = ()
    fields: Tuple[FieldDescriptor, ...] = ()
    identifier: Optional[FieldDescriptor] = None

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    @property
    def is_empty(self) -> bool:
        return not self.labels and not self.fields

    def get_field(self, name: str) -> Optional[FieldDescriptor]:
        for field in self.fields:
            if field.name == name:
                return field
        return None


# Entries are built idempotently; a racing duplicate build is harmless.
_descriptor_cache: "weakref.WeakKeyDictionary[type, TypeDescriptor]" = weakref.WeakKeyDictionary()


def describe(model_type: Any) -> TypeDescriptor:
    """
    Describe a model class.

    Args:
        model_type: A GraphEntity, GraphRelationship or other pydantic model class

    Returns:
        The cached TypeDescriptor for the class
    """
    if not isinstance(model_type, type):
        return TypeDescriptor(type_name=type(model_type).__name__ if model_type is not None else "")

    try:
        return _descriptor_cache[model_type]
    except (KeyError, TypeError):
        pass

    descriptor = _build_descriptor(model_type)
    try:
        _descriptor_cache[model_type] = descriptor
    except TypeError:
        # Not weak-referenceable; describe again next time.
        pass
    return descriptor


def clear_descriptor_cache() -> None:
    """Forget every cached descriptor."""
    _descriptor_cache.clear()


def _build_descriptor(model_type: type) -> TypeDescriptor:
    if not issubclass(model_type, BaseModel) or model_type in (BaseModel, GraphEntity, GraphRelationship):
        return TypeDescriptor(type_name=model_type.__name__)

    identifier_name = getattr(model_type, 'graph_identifier', None)
    identifier = None
    fields = []

    for name, info in model_type.model_fields.items():
        if name == identifier_name:
            identifier = FieldDescriptor(
                name=name, annotation=info.annotation, writable=False, alias=_input_alias(info)
            )
            continue
        if info.exclude:
            # internal-only
            continue
        fields.append(FieldDescriptor(
            name=name,
            annotation=info.annotation,
            writable=not info.frozen,
            alias=_input_alias(info),
        ))

    return TypeDescriptor(
        type_name=model_type.__name__,
        labels=_labels_for(model_type),
        fields=tuple(fields),
        identifier=identifier,
    )


def _input_alias(info: FieldInfo) -> Optional[str]:
    if isinstance(info.validation_alias, str):
        return info.validation_alias
    return info.alias


def _labels_for(model_type: type) -> Tuple[str, ...]:
    if issubclass(model_type, GraphRelationship):
        return (model_type._get_class_relationship_type(),)

    if issubclass(model_type, GraphEntity):
        stop, label_of = GraphEntity, lambda klass: klass._get_class_label()
    else:
        stop, label_of = BaseModel, lambda klass: klass.__name__

    labels = []
    for klass in model_type.__mro__:
        if klass is stop or not isinstance(klass, type) or not issubclass(klass, stop):
            continue
        label = label_of(klass)
        if label not in labels:
            labels.append(label)
    return tuple(labels)
