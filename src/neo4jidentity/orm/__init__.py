"""
Neo4jIdentity ORM Module

The mapping layer shared by every store: type descriptors, parameter
projection, Cypher pattern fragments, query execution and materialization.
"""

from neo4jidentity.orm.entities import (
    GraphEntity,
    graph_entity,
    get_entity_classes,
    get_entity_by_label
)
from neo4jidentity.orm.relationships import (
    GraphRelationship,
    graph_relationship,
    get_relationship_classes,
    get_relationship_by_type
)
from neo4jidentity.orm.descriptors import FieldDescriptor, TypeDescriptor, describe
from neo4jidentity.orm.projection import ProjectionMode, project, include, exclude
from neo4jidentity.orm.patterns import (
    Direction,
    PatternFragment,
    node_pattern,
    relationship_pattern,
    labels_fragment
)
from neo4jidentity.orm.materializer import materialize
from neo4jidentity.orm.session import (
    CancellationToken,
    QueryExecutor,
    QueryResult,
    SessionScope
)

__all__ = [
    # Models
    "GraphEntity",
    "graph_entity",
    "get_entity_classes",
    "get_entity_by_label",
    "GraphRelationship",
    "graph_relationship",
    "get_relationship_classes",
    "get_relationship_by_type",

    # Mapping
    "FieldDescriptor",
    "TypeDescriptor",
    "describe",
    "ProjectionMode",
    "project",
    "include",
    "exclude",
    "Direction",
    "PatternFragment",
    "node_pattern",
    "relationship_pattern",
    "labels_fragment",
    "materialize",

    # Execution
    "CancellationToken",
    "QueryExecutor",
    "QueryResult",
    "SessionScope",
]
