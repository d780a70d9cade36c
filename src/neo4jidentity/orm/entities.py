"""
Neo4jIdentity GraphEntity - Pydantic V2 base model for graph nodes

Every node type persisted by the identity stores is a GraphEntity subclass.
The metaclass registers each subclass and attaches its label configuration,
which the type descriptor later turns into the node's label set.
"""

from __future__ import annotations

from typing import Any, ClassVar, Optional, Set, Type, TypeVar, Union
import weakref

from pydantic import BaseModel, ConfigDict, Field


# Type variable for GraphEntity subclasses
EntityType = TypeVar('EntityType', bound='GraphEntity')


class GraphEntityConfig:
    """Configuration for GraphEntity classes."""

    def __init__(self, graph_label: Optional[str] = None):
        self.graph_label = graph_label


def _check_token(token: str, kind: str) -> str:
    # Label and relationship type tokens are embedded into Cypher unescaped.
    if not isinstance(token, str) or not token.isidentifier():
        raise ValueError(f"{kind} must be a valid identifier, got {token!r}")
    return token


class GraphEntityMeta(type(BaseModel)):
    """
    Metaclass for GraphEntity.

    Handles entity registration and label configuration on top of
    Pydantic V2's model metaclass.
    """

    def __new__(
        mcs,
        name: str,
        bases: tuple[type, ...],
        namespace: dict[str, Any],
        **kwargs: Any
    ) -> GraphEntityMeta:

        # Extract entity configuration before Pydantic processes the class
        entity_config = namespace.pop('_entity_config', None)
        if entity_config is None:
            entity_config = GraphEntityConfig(graph_label=name)

        cls = super().__new__(mcs, name, bases, namespace, **kwargs)

        # Skip processing for the base GraphEntity class
        if name == 'GraphEntity' and namespace.get('__module__') == __name__:
            return cls

        cls._entity_config = entity_config

        if not hasattr(GraphEntity, '_entity_registry'):
            GraphEntity._entity_registry = weakref.WeakSet()
        GraphEntity._entity_registry.add(cls)

        return cls


class GraphEntity(BaseModel, metaclass=GraphEntityMeta):
    """
    Base class for every node type stored in Neo4j.

    Features:
    - Full Pydantic V2 validation on construction and assignment
    - One label per class in the hierarchy, most-derived first
    - An engine-assigned internal identifier (``entity_id``) that is never
      written from the client side

    Example:
        ```python
        class IdentityRole(GraphEntity):
            id: str = Field(default_factory=lambda: uuid.uuid4().hex)
            name: Optional[str] = None
            normalized_name: Optional[str] = None

        @graph_entity(label="Admin")
        class AdminRole(IdentityRole):
            scope: str = "global"

        describe(AdminRole).labels  # ("Admin", "IdentityRole")
        ```
    """

    # Name of the field carrying the engine-assigned node id
    graph_identifier: ClassVar[str] = 'entity_id'

    entity_id: Optional[int] = Field(
        default=None,
        description="Engine-assigned node identifier, set after creation"
    )

    model_config = ConfigDict(
        validate_assignment=True,
        use_enum_values=True,
        extra='forbid',
        arbitrary_types_allowed=True,
    )

    # Class-level attributes
    _entity_registry: ClassVar[weakref.WeakSet] = weakref.WeakSet()
    _entity_config: ClassVar[GraphEntityConfig]

    @classmethod
    def _get_class_label(cls) -> str:
        """Get the label contributed by this class itself."""
        config = cls.__dict__.get('_entity_config')
        if config is not None and config.graph_label:
            return config.graph_label
        return cls.__name__

    @property
    def is_persisted(self) -> bool:
        """True once the engine has assigned an identifier."""
        return self.entity_id is not None


# =============================================================================
# DECORATOR FUNCTION
# =============================================================================

def graph_entity(
    cls: Optional[Type] = None,
    *,
    label: Optional[str] = None,
) -> Union[Type[GraphEntity], callable]:
    """
    Decorator overriding the label a GraphEntity class contributes.

    Args:
        cls: The class being decorated
        label: Override the default label (class name)

    Returns:
        Decorated class or decorator function

    Example:
        ```python
        @graph_entity(label="Person")
        class User(IdentityUser):
            display_name: str = ""
        ```
    """
    def decorator(target_cls: Type) -> Type:
        if not isinstance(target_cls, type) or not issubclass(target_cls, GraphEntity):
            raise TypeError("@graph_entity can only be applied to GraphEntity subclasses")

        graph_label = _check_token(label or target_cls.__name__, "Label")
        target_cls._entity_config = GraphEntityConfig(graph_label=graph_label)

        return target_cls

    if cls is None:
        return decorator
    else:
        return decorator(cls)


# =============================================================================
# REGISTRY FUNCTIONS
# =============================================================================

def get_entity_classes() -> Set[Type[GraphEntity]]:
    """Get all registered GraphEntity classes."""
    if hasattr(GraphEntity, '_entity_registry'):
        return set(GraphEntity._entity_registry)
    return set()


def get_entity_by_label(label: str) -> Optional[Type[GraphEntity]]:
    """Get entity class by the label it contributes."""
    for entity_class in get_entity_classes():
        if entity_class._get_class_label() == label:
            return entity_class
    return None
