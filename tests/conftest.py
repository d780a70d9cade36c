# tests/conftest.py
"""
Shared test doubles: an engine whose sessions record every statement and
replay queued records instead of talking to Neo4j.
"""

from typing import Any, Dict, List, Optional, Tuple

import pytest

from neo4jidentity.orm.session import QueryExecutor


class FakeResult:
    """Stands in for neo4j.AsyncResult: async-iterable records plus consume()."""

    def __init__(self, records: List[Any]):
        self._records = list(records)
        self.consumed = False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for record in self._records:
            yield record

    async def consume(self) -> None:
        self.consumed = True


class FakeSession:
    """Stands in for neo4j.AsyncSession."""

    def __init__(self, engine: "FakeEngine", database: Optional[str]):
        self.engine = engine
        self.database = database
        self.statements: List[Tuple[str, Dict[str, Any]]] = []
        self.closed = False

    async def run(self, query: str, parameters: Optional[Dict[str, Any]] = None) -> FakeResult:
        self.statements.append((query, parameters))
        self.engine.statements.append((query, parameters))
        response = self.engine.responses.pop(0) if self.engine.responses else []
        if isinstance(response, Exception):
            raise response
        return FakeResult(response)

    async def __aenter__(self) -> "FakeSession":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.closed = True
        return False


class FakeEngine:
    """
    Counts session acquisitions and serves queued responses in order, one per
    statement. A queued exception is raised by the statement that pops it.
    """

    def __init__(self):
        self.sessions: List[FakeSession] = []
        self.statements: List[Tuple[str, Dict[str, Any]]] = []
        self.responses: List[Any] = []

    def queue(self, *responses: Any) -> None:
        self.responses.extend(responses)

    def get_session(self, database: Optional[str] = None) -> FakeSession:
        session = FakeSession(self, database)
        self.sessions.append(session)
        return session

    @property
    def last_query(self) -> str:
        return self.statements[-1][0]

    @property
    def last_params(self) -> Dict[str, Any]:
        return self.statements[-1][1]


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def executor(fake_engine: FakeEngine) -> QueryExecutor:
    return QueryExecutor(fake_engine)
