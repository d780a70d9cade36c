"""
Connection options for the identity stores.

The options are an opaque value handed to ``IdentityDriverProvider``; the
mapping layer never looks inside them.
"""

from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class IdentityStoreOptions(BaseModel):
    """
    Where and how to reach Neo4j.

    Example:
        ```python
        options = IdentityStoreOptions(
            uri="bolt://localhost:7687",
            auth=("neo4j", "secret"),
            driver_config={"max_connection_pool_size": 20},
        )
        ```
    """

    model_config = ConfigDict(frozen=True, extra='forbid')

    uri: str = Field(..., min_length=1, description="Bolt or neo4j URI")
    auth: Optional[Tuple[str, str]] = Field(
        default=None,
        description="(username, password); None connects without authentication"
    )
    database: str = Field(default="neo4j", min_length=1)
    driver_config: Dict[str, Any] = Field(default_factory=dict)
