r"""
Neo4jIdentity - Identity stores for Neo4j

Neo4jIdentity persists users, roles, claims, logins and tokens as a property
graph. All stores go through one mapping layer:
- Type descriptors derive a class's labels and fields once and cache them
- Projections turn model state into Cypher parameter payloads
- Pattern fragments render `(p:Label {key:$param})` and `-[r:TYPE]->` safely
- A query executor runs statements on short-lived sessions behind a
  cancellation gate
- A materializer turns returned records back into pydantic models

Example:
    ```python
    from neo4jidentity import (
        IdentityDriverProvider, IdentityStoreOptions, IdentityUser, IdentityRole
    )

    options = IdentityStoreOptions(uri="bolt://localhost:7687", auth=("neo4j", "secret"))

    async with IdentityDriverProvider(options) as provider:
        users = provider.user_store()
        roles = provider.role_store()

        await roles.create(IdentityRole(name="Admin", normalized_name="ADMIN"))

        alice = IdentityUser(user_name="alice", normalized_user_name="ALICE")
        await users.create(alice)          # alice.entity_id is now set
        await users.add_to_role(alice, "ADMIN")

        found = await users.find_by_name("ALICE")
        await users.get_roles(found)       # ["Admin"]
    ```
"""

# Mapping layer
from neo4jidentity.orm.entities import GraphEntity, graph_entity
from neo4jidentity.orm.relationships import GraphRelationship, graph_relationship
from neo4jidentity.orm.descriptors import TypeDescriptor, describe
from neo4jidentity.orm.projection import ProjectionMode, project
from neo4jidentity.orm.patterns import Direction, node_pattern, relationship_pattern
from neo4jidentity.orm.materializer import materialize
from neo4jidentity.orm.session import CancellationToken, QueryExecutor, QueryResult

# Identity stores
from neo4jidentity.identity import (
    Claim,
    UserLoginInfo,
    IdentityUser,
    IdentityRole,
    IdentityClaim,
    IdentityUserLogin,
    IdentityUserToken,
    IdentityResult,
    IdentityStoreOptions,
    IdentityDriverProvider,
    UserStore,
    RoleStore,
)

# Errors
from neo4jidentity.exceptions import (
    Neo4jIdentityError,
    PreconditionError,
    OperationCancelledError,
    MaterializationError,
    RoleNotFoundError,
    EngineError,
)

__version__ = "0.1.0"

__all__ = [
    # Mapping layer
    "GraphEntity",
    "graph_entity",
    "GraphRelationship",
    "graph_relationship",
    "TypeDescriptor",
    "describe",
    "ProjectionMode",
    "project",
    "Direction",
    "node_pattern",
    "relationship_pattern",
    "materialize",
    "CancellationToken",
    "QueryExecutor",
    "QueryResult",

    # Identity
    "Claim",
    "UserLoginInfo",
    "IdentityUser",
    "IdentityRole",
    "IdentityClaim",
    "IdentityUserLogin",
    "IdentityUserToken",
    "IdentityResult",
    "IdentityStoreOptions",
    "IdentityDriverProvider",
    "UserStore",
    "RoleStore",

    # Errors
    "Neo4jIdentityError",
    "PreconditionError",
    "OperationCancelledError",
    "MaterializationError",
    "RoleNotFoundError",
    "EngineError",

    # Version
    "__version__",
]
