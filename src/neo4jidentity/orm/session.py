"""
Query execution over short-lived Neo4j sessions.

Every dispatch is preceded by a cancellation check. The check is a pre-flight
gate only: once a statement has been sent, the token has no effect on it,
because the Bolt session protocol offers no way to abort a running statement.
Callers that need a hard deadline must enforce it around the whole call.

Statements run in auto-commit mode (``session.run``). No explicit
transaction is ever opened, so two statements issued through one
``SessionScope`` commit independently.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import threading
from typing import (
    Any,
    AsyncIterator,
    Dict,
    Generic,
    Iterator,
    List,
    Optional,
    Type,
    TypeVar,
)

from neo4jidentity.exceptions import OperationCancelledError
from neo4jidentity.orm.materializer import materialize


T = TypeVar('T')


class CancellationToken:
    """
    Cooperative cancellation signal.

    ``cancel()`` may be called from any thread or task. Query operations look
    at the token right before acquiring a session and before each statement.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError("Operation was cancelled before dispatch")

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"


def _check(cancellation: Optional[CancellationToken]) -> None:
    if cancellation is not None:
        cancellation.raise_if_cancelled()


class QueryResult(Generic[T]):
    """
    Records returned by one statement, materialized on iteration.

    The records are fetched before the session is released; iterating again
    materializes fresh instances.
    """

    def __init__(self, model_type: Type[T], records: List[Any]):
        self.model_type = model_type
        self._records = records

    def __iter__(self) -> Iterator[T]:
        for record in self._records:
            yield materialize(self.model_type, record)

    def __len__(self) -> int:
        return len(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)

    def first(self) -> Optional[T]:
        """First materialized instance, or None when nothing was returned."""
        for item in self:
            return item
        return None

    def to_list(self) -> List[T]:
        return list(self)

    def __repr__(self) -> str:
        return f"QueryResult({self.model_type.__name__}, records={len(self._records)})"


class SessionScope:
    """Statements issued over a single acquired session."""

    def __init__(self, session: Any, cancellation: Optional[CancellationToken] = None):
        self._session = session
        self._cancellation = cancellation

    async def run(self, query: str, params: Optional[Dict[str, Any]] = None) -> None:
        """Run a statement whose result is not needed."""
        _check(self._cancellation)
        result = await self._session.run(query, params or {})
        await result.consume()

    async def query_many(
        self,
        model_type: Type[T],
        query: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> QueryResult[T]:
        """Run a statement and collect its records as ``model_type``."""
        _check(self._cancellation)
        result = await self._session.run(query, params or {})
        records = [record async for record in result]
        return QueryResult(model_type, records)

    async def query_optional(
        self,
        model_type: Type[T],
        query: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Optional[T]:
        """Run a statement and return its first record as ``model_type``, or None."""
        found = await self.query_many(model_type, query, params)
        return found.first()


class QueryExecutor:
    """
    Runs statements against sessions obtained from a session source.

    Each call acquires its own session and closes it before returning,
    whether the call succeeds, returns nothing, or raises. Errors raised by
    the driver propagate unchanged.

    Example:
        ```python
        executor = QueryExecutor(provider)
        user = await executor.query_optional(
            IdentityUser,
            f"MATCH {node_pattern(describe(IdentityUser), 'p', ['id'])} RETURN p",
            {"id": user_id},
        )
        ```
    """

    def __init__(self, engine: Any, database: Optional[str] = None):
        """
        Args:
            engine: Object whose ``get_session(database)`` returns an async
                neo4j session (normally an IdentityDriverProvider)
            database: Database for the sessions; None uses the source default
        """
        self.engine = engine
        self.database = database

    @asynccontextmanager
    async def session(
        self, cancellation: Optional[CancellationToken] = None
    ) -> AsyncIterator[SessionScope]:
        """Acquire one session for a lookup followed by a dependent statement."""
        _check(cancellation)
        session = self.engine.get_session(database=self.database)
        async with session:
            yield SessionScope(session, cancellation)

    async def run(
        self,
        query: str,
        params: Optional[Dict[str, Any]] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> None:
        async with self.session(cancellation) as scope:
            await scope.run(query, params)

    async def query_many(
        self,
        model_type: Type[T],
        query: str,
        params: Optional[Dict[str, Any]] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> QueryResult[T]:
        async with self.session(cancellation) as scope:
            return await scope.query_many(model_type, query, params)

    async def query_optional(
        self,
        model_type: Type[T],
        query: str,
        params: Optional[Dict[str, Any]] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> Optional[T]:
        async with self.session(cancellation) as scope:
            return await scope.query_optional(model_type, query, params)
