# tests/identity/test_provider.py

import asyncio
import re
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
from neo4j import AsyncDriver, AsyncSession
from neo4j.exceptions import AuthError, ServiceUnavailable
from pydantic import ValidationError

from neo4jidentity.exceptions import PreconditionError
from neo4jidentity.identity.models import IdentityRole, IdentityUser
from neo4jidentity.identity.options import IdentityStoreOptions
from neo4jidentity.identity.provider import USER_AGENT, IdentityDriverProvider
from neo4jidentity.identity.results import IdentityResult
from neo4jidentity.identity.role_store import RoleStore
from neo4jidentity.identity.user_store import UserStore

IDENTITY_URI = "bolt://identity-db:7687"

NOT_CONNECTED = re.escape(f"IdentityDriverProvider for {IDENTITY_URI} is not connected")


class Employee(IdentityUser):
    badge: str = ""


# --- Fixtures ---

@pytest.fixture
def options():
    return IdentityStoreOptions(
        uri=IDENTITY_URI,
        auth=("identity", "s3cret"),
        database="identity",
        driver_config={"max_connection_pool_size": 20},
    )


@pytest_asyncio.fixture
async def provider(options):
    """A provider for the identity database, not connected yet."""
    provider = IdentityDriverProvider(options)
    assert not provider.connected

    yield provider

    if provider.connected:
        await provider.close()


@pytest.fixture
def driver_factory():
    """Patches the neo4j driver factory; yields (factory, driver, session)."""
    driver = AsyncMock(spec=AsyncDriver)
    driver.verify_connectivity = AsyncMock()
    driver.close = AsyncMock()
    session = AsyncMock(spec=AsyncSession)
    driver.session = MagicMock(return_value=session)

    with patch("neo4jidentity.identity.provider.AsyncGraphDatabase.driver", return_value=driver) as factory:
        yield factory, driver, session


# --- Test Cases ---

class TestIdentityStoreOptions:
    def test_defaults(self):
        options = IdentityStoreOptions(uri="bolt://localhost:7687")

        assert options.auth is None
        assert options.database == "neo4j"
        assert options.driver_config == {}

    def test_uri_required(self):
        with pytest.raises(ValidationError):
            IdentityStoreOptions()

        with pytest.raises(ValidationError):
            IdentityStoreOptions(uri="")

    def test_unknown_options_rejected(self):
        with pytest.raises(ValidationError):
            IdentityStoreOptions(uri="bolt://localhost:7687", pool_size=3)

    def test_options_are_immutable(self, options):
        with pytest.raises(ValidationError):
            options.database = "other"


class TestProviderWiring:
    def test_options_required(self):
        with pytest.raises(PreconditionError):
            IdentityDriverProvider(None)

    def test_driver_config_merges_options(self, options):
        provider = IdentityDriverProvider(options)

        assert provider.driver_config == {"user_agent": USER_AGENT, "max_connection_pool_size": 20}

    def test_options_override_user_agent(self):
        provider = IdentityDriverProvider(
            IdentityStoreOptions(uri=IDENTITY_URI, driver_config={"user_agent": "accounts-api"})
        )

        assert provider.driver_config["user_agent"] == "accounts-api"

    def test_stores_share_the_executor(self, options):
        provider = IdentityDriverProvider(options)

        users = provider.user_store()
        roles = provider.role_store()

        assert isinstance(users, UserStore)
        assert isinstance(roles, RoleStore)
        assert users.executor is provider.executor
        assert roles.executor is provider.executor
        assert provider.executor.engine is provider
        assert users.user_cls is IdentityUser
        assert roles.role_cls is IdentityRole

    def test_custom_store_types(self, options):
        provider = IdentityDriverProvider(options)

        users = provider.user_store(user_cls=Employee)

        assert users.user_cls is Employee
        assert users.descriptor.labels == ("Employee", "IdentityUser")


@pytest.mark.asyncio
class TestConnect:
    async def test_connect_builds_and_verifies_driver(self, provider, driver_factory, capsys):
        factory, driver, _ = driver_factory

        await provider.connect()

        factory.assert_called_once_with(
            IDENTITY_URI,
            auth=("identity", "s3cret"),
            user_agent=USER_AGENT,
            max_connection_pool_size=20,
        )
        driver.verify_connectivity.assert_awaited_once()
        assert provider.connected is True

        out = capsys.readouterr().out
        assert f"IdentityDriverProvider: Connecting to {IDENTITY_URI} (database: 'identity')..." in out
        assert f"IdentityDriverProvider: Connected to {IDENTITY_URI}." in out

    async def test_connect_without_auth(self, driver_factory):
        factory, _, _ = driver_factory
        provider = IdentityDriverProvider(IdentityStoreOptions(uri=IDENTITY_URI))

        await provider.connect()

        assert factory.call_args.kwargs["auth"] is None
        await provider.close()

    async def test_concurrent_connects_build_one_driver(self, provider, driver_factory):
        factory, driver, _ = driver_factory

        await asyncio.gather(*(provider.connect() for _ in range(5)))
        await provider.connect()

        factory.assert_called_once()
        driver.verify_connectivity.assert_awaited_once()

    async def test_failed_verification_closes_driver(self, provider, driver_factory, capsys):
        _, driver, _ = driver_factory
        driver.verify_connectivity.side_effect = AuthError("unauthorized")

        with pytest.raises(ConnectionError, match=re.escape(f"Failed to connect to Neo4j at {IDENTITY_URI}")) as exc_info:
            await provider.connect()

        assert isinstance(exc_info.value.__cause__, AuthError)
        driver.close.assert_awaited_once()
        assert provider.connected is False
        assert f"IdentityDriverProvider: Connection to {IDENTITY_URI} failed" in capsys.readouterr().out

    async def test_driver_creation_failure(self, provider, driver_factory):
        factory, driver, _ = driver_factory
        factory.side_effect = ServiceUnavailable("Cannot resolve identity-db")

        with pytest.raises(ConnectionError):
            await provider.connect()

        driver.close.assert_not_awaited()
        assert provider.connected is False


@pytest.mark.asyncio
class TestCloseAndSessions:
    async def test_close_releases_driver(self, provider, driver_factory, capsys):
        _, driver, _ = driver_factory
        await provider.connect()

        await asyncio.gather(*(provider.close() for _ in range(3)))
        await provider.close()

        driver.close.assert_awaited_once()
        assert provider.connected is False
        assert f"IdentityDriverProvider: Connection to {IDENTITY_URI} closed." in capsys.readouterr().out

    async def test_close_unconnected_provider_is_quiet(self, provider, capsys):
        await provider.close()

        assert "closed" not in capsys.readouterr().out

    async def test_sessions_use_configured_database(self, provider, driver_factory):
        _, driver, session = driver_factory
        await provider.connect()

        assert provider.get_session() is session
        driver.session.assert_called_with(database="identity")

        provider.get_session(database="audit")
        driver.session.assert_called_with(database="audit")

    async def test_session_requires_connection(self, provider):
        with pytest.raises(ConnectionError, match=NOT_CONNECTED):
            provider.get_session()

    async def test_store_call_before_connect_fails(self, provider):
        with pytest.raises(ConnectionError):
            await provider.user_store().find_by_id("u-1")

    async def test_context_manager_connects_and_closes(self, provider, driver_factory):
        _, driver, _ = driver_factory

        with pytest.raises(RuntimeError):
            async with provider as connected:
                assert connected is provider
                assert provider.connected is True
                raise RuntimeError("store failure")

        driver.close.assert_awaited_once()
        assert provider.connected is False


class TestIdentityResult:
    def test_success(self):
        result = IdentityResult.success()

        assert result.succeeded is True
        assert result.errors == []
        assert bool(result) is True

    def test_failed_keeps_errors_in_order(self):
        result = IdentityResult.failed("first", "second")

        assert bool(result) is False
        assert result.errors == ["first", "second"]
