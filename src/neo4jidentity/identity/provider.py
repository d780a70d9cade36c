"""
Connection lifecycle for the identity stores.

``IdentityDriverProvider`` turns ``IdentityStoreOptions`` into one neo4j
AsyncDriver, hands out sessions on the configured database and builds the
stores that share them. There is no module-level driver.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional, Type

from neo4j import AsyncDriver, AsyncGraphDatabase, AsyncSession

from neo4jidentity.identity.base import require
from neo4jidentity.identity.models import IdentityRole, IdentityUser
from neo4jidentity.identity.options import IdentityStoreOptions
from neo4jidentity.identity.role_store import RoleStore
from neo4jidentity.identity.user_store import UserStore
from neo4jidentity.orm.session import QueryExecutor


USER_AGENT = "neo4jidentity/0.1.0"


class IdentityDriverProvider:
    """
    Owns the driver built from ``IdentityStoreOptions`` and hands out stores
    that share it.

    The provider is itself the session source of its ``QueryExecutor``, so
    every store call acquires a fresh session through ``get_session``.

    Example:
        ```python
        options = IdentityStoreOptions(uri="bolt://localhost:7687", auth=("neo4j", "secret"))
        async with IdentityDriverProvider(options) as provider:
            users = provider.user_store()
            await users.create(IdentityUser(user_name="alice"))
        ```
    """

    def __init__(self, options: IdentityStoreOptions):
        self.options = require(options, "options")
        self.executor = QueryExecutor(self)

        self._driver: Optional[AsyncDriver] = None
        self._lock = asyncio.Lock()

    @property
    def driver_config(self) -> Dict[str, Any]:
        """Keyword arguments for the driver; options override the user agent."""
        return {"user_agent": USER_AGENT, **self.options.driver_config}

    @property
    def connected(self) -> bool:
        return self._driver is not None

    async def connect(self) -> None:
        """
        Build the driver and verify the server is reachable. Calling it again
        once connected does nothing.

        Raises:
            ConnectionError: If the driver cannot be built or verified; no
                driver is kept in that case
        """
        async with self._lock:
            if self._driver is not None:
                return

            uri = self.options.uri
            print(f"IdentityDriverProvider: Connecting to {uri} (database: '{self.options.database}')...")
            driver = None
            try:
                driver = AsyncGraphDatabase.driver(uri, auth=self.options.auth, **self.driver_config)
                await driver.verify_connectivity()
            except Exception as e:
                if driver is not None:
                    await driver.close()
                print(f"IdentityDriverProvider: Connection to {uri} failed: {e}")
                raise ConnectionError(f"Failed to connect to Neo4j at {uri}: {e}") from e

            self._driver = driver
            print(f"IdentityDriverProvider: Connected to {uri}.")

    async def close(self) -> None:
        """Close the driver if one is open."""
        async with self._lock:
            if self._driver is None:
                return
            driver, self._driver = self._driver, None
            await driver.close()
            print(f"IdentityDriverProvider: Connection to {self.options.uri} closed.")

    def get_session(self, database: Optional[str] = None) -> AsyncSession:
        """
        Open a session on ``database``, or on the configured database.

        Raises:
            ConnectionError: If ``connect()`` has not completed
        """
        if self._driver is None:
            raise ConnectionError(
                f"IdentityDriverProvider for {self.options.uri} is not connected; "
                f"call `await provider.connect()` first."
            )
        return self._driver.session(database=database or self.options.database)

    def user_store(
        self,
        user_cls: Type[IdentityUser] = IdentityUser,
        role_cls: Type[IdentityRole] = IdentityRole,
    ) -> UserStore:
        return UserStore(self.executor, user_cls=user_cls, role_cls=role_cls)

    def role_store(self, role_cls: Type[IdentityRole] = IdentityRole) -> RoleStore:
        return RoleStore(self.executor, role_cls=role_cls)

    async def __aenter__(self) -> "IdentityDriverProvider":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
