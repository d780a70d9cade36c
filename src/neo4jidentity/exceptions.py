"""
Neo4jIdentity error taxonomy.

Engine failures are never wrapped: whatever the neo4j driver raises reaches
the caller unchanged. ``EngineError`` is only a convenience tuple for
``except`` clauses.
"""

from neo4j.exceptions import DriverError, Neo4jError


class Neo4jIdentityError(Exception):
    """Base class for errors raised by neo4jidentity itself."""


class PreconditionError(Neo4jIdentityError, ValueError):
    """A required argument was missing or empty."""

    def __init__(self, argument: str, message: str = "Value cannot be None"):
        self.argument = argument
        super().__init__(f"{message} (argument: {argument!r})")


class OperationCancelledError(Neo4jIdentityError):
    """Cancellation was requested before the statement was dispatched."""


class MaterializationError(Neo4jIdentityError):
    """A returned record could not be coerced into the target model."""

    def __init__(self, target: type, message: str):
        self.target = target
        super().__init__(f"Cannot materialize {target.__name__}: {message}")


class RoleNotFoundError(Neo4jIdentityError, LookupError):
    """The normalized role name does not match any stored role."""

    def __init__(self, normalized_role_name: str):
        self.normalized_role_name = normalized_role_name
        super().__init__(f"Role '{normalized_role_name}' not found")


EngineError = (Neo4jError, DriverError)
