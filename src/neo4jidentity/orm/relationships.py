"""
Neo4jIdentity GraphRelationship - relationship types for Cypher patterns

A GraphRelationship subclass names one relationship type. Relationships carry
exactly one type token, never a label set, so unlike entities the hierarchy
does not contribute additional tokens.
"""

from __future__ import annotations

from typing import Any, ClassVar, Optional, Set, Type, TypeVar, Union
import weakref

from pydantic import BaseModel, ConfigDict

from neo4jidentity.orm.entities import _check_token


# Type variable for GraphRelationship subclasses
RelationshipType = TypeVar('RelationshipType', bound='GraphRelationship')


class GraphRelationshipConfig:
    """Configuration for GraphRelationship classes."""

    def __init__(
        self,
        relationship_type: Optional[str] = None,
        directed: bool = True,
    ):
        self.relationship_type = relationship_type
        self.directed = directed


class GraphRelationshipMeta(type(BaseModel)):
    """
    Metaclass for GraphRelationship.

    Registers every relationship class and attaches its default configuration.
    """

    def __new__(
        mcs,
        name: str,
        bases: tuple[type, ...],
        namespace: dict[str, Any],
        **kwargs: Any
    ) -> GraphRelationshipMeta:

        relationship_config = namespace.pop('_relationship_config', None)
        if relationship_config is None:
            relationship_config = GraphRelationshipConfig(relationship_type=name.upper())

        cls = super().__new__(mcs, name, bases, namespace, **kwargs)

        # Skip processing for the base GraphRelationship class
        if name == 'GraphRelationship' and namespace.get('__module__') == __name__:
            return cls

        cls._relationship_config = relationship_config

        if not hasattr(GraphRelationship, '_relationship_registry'):
            GraphRelationship._relationship_registry = weakref.WeakSet()
        GraphRelationship._relationship_registry.add(cls)

        return cls


class GraphRelationship(BaseModel, metaclass=GraphRelationshipMeta):
    """
    Base class for relationship types.

    Subclasses may declare properties like any pydantic model; the identity
    stores only use property-less marker types (``HAS``, ``IS_IN``).
    """

    model_config = ConfigDict(
        validate_assignment=True,
        use_enum_values=True,
        extra='forbid',
        arbitrary_types_allowed=True,
    )

    # Class-level attributes
    _relationship_registry: ClassVar[weakref.WeakSet] = weakref.WeakSet()
    _relationship_config: ClassVar[GraphRelationshipConfig]

    @classmethod
    def _get_class_relationship_type(cls) -> str:
        """Get relationship type for this relationship class."""
        config = getattr(cls, '_relationship_config', None)
        if config is not None and config.relationship_type:
            return config.relationship_type
        return cls.__name__.upper()

    @classmethod
    def is_directed(cls) -> bool:
        config = getattr(cls, '_relationship_config', None)
        return config.directed if config is not None else True


# =============================================================================
# DECORATOR FUNCTION
# =============================================================================

def graph_relationship(
    cls: Optional[Type] = None,
    *,
    relationship_type: Optional[str] = None,
    directed: bool = True,
) -> Union[Type[GraphRelationship], callable]:
    """
    Decorator configuring a GraphRelationship class.

    Args:
        cls: The class being decorated
        relationship_type: Override the default relationship type (class name, upper-cased)
        directed: Whether patterns for this type default to a direction

    Returns:
        Decorated class or decorator function
    """
    def decorator(target_cls: Type) -> Type:
        if not isinstance(target_cls, type) or not issubclass(target_cls, GraphRelationship):
            raise TypeError("@graph_relationship can only be applied to GraphRelationship subclasses")

        rel_type = _check_token(
            relationship_type or target_cls.__name__.upper(), "Relationship type"
        )
        target_cls._relationship_config = GraphRelationshipConfig(
            relationship_type=rel_type,
            directed=directed,
        )

        return target_cls

    if cls is None:
        return decorator
    else:
        return decorator(cls)


# =============================================================================
# REGISTRY FUNCTIONS
# =============================================================================

def get_relationship_classes() -> Set[Type[GraphRelationship]]:
    """Get all registered GraphRelationship classes."""
    if hasattr(GraphRelationship, '_relationship_registry'):
        return set(GraphRelationship._relationship_registry)
    return set()


def get_relationship_by_type(relationship_type: str) -> Optional[Type[GraphRelationship]]:
    """Get relationship class by its type."""
    for relationship_class in get_relationship_classes():
        if relationship_class._get_class_relationship_type() == relationship_type:
            return relationship_class
    return None
