"""
Materialization of Neo4j records into model instances.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Type, TypeVar

from neo4j import Record
from neo4j.graph import Entity
from pydantic import BaseModel, ValidationError

from neo4jidentity.exceptions import MaterializationError
from neo4jidentity.orm.descriptors import describe


ModelType = TypeVar('ModelType', bound=BaseModel)


def _record_values(record: Any) -> Mapping[str, Any]:
    """Return the name -> value view a record exposes."""
    if isinstance(record, Record):
        # RETURN p: a single column holding a node (or relationship)
        if len(record) == 1 and isinstance(record[0], Entity):
            return dict(record[0].items())
        return dict(record.items())
    if isinstance(record, Entity):
        return dict(record.items())
    if isinstance(record, Mapping):
        return record
    raise TypeError(f"Unsupported record type: {type(record).__name__}")


def _to_python(value: Any) -> Any:
    # neo4j.time types expose to_native(); lists and maps may contain them too
    if hasattr(value, 'to_native'):
        return value.to_native()
    if isinstance(value, list):
        return [_to_python(item) for item in value]
    if isinstance(value, Mapping):
        return {key: _to_python(item) for key, item in value.items()}
    return value


def materialize(model_type: Type[ModelType], record: Any) -> ModelType:
    """
    Build a ``model_type`` instance from a returned record.

    Values are matched to descriptor fields by exact name; keys the model
    does not declare are ignored. Fields missing from the record keep their
    defaults. Properties are stored under the Python field name, the same
    key projections write, and handed to pydantic under the field alias
    when one is declared. The internal identifier is taken from the
    record's engine-assigned value when it carries one.

    Args:
        model_type: Target pydantic model class
        record: neo4j Record, Node/Relationship, or plain mapping

    Returns:
        The validated instance

    Raises:
        MaterializationError: If a value cannot be coerced to its field type
    """
    descriptor = describe(model_type)
    values = _record_values(record)

    data: Dict[str, Any] = {}
    for field in descriptor.fields:
        if field.name in values:
            data[field.input_name] = _to_python(values[field.name])

    identifier = descriptor.identifier
    if identifier is not None and values.get(identifier.name) is not None:
        data[identifier.input_name] = _to_python(values[identifier.name])

    try:
        return model_type.model_validate(data)
    except ValidationError as e:
        raise MaterializationError(model_type, str(e)) from e
