"""
Neo4jIdentity UserStore

Persists IdentityUser nodes together with their role memberships, claims,
external logins and tokens.

Graph shape:
    (u:IdentityUser)-[:IS_IN]->(r:IdentityRole)
    (u:IdentityUser)-[:HAS]->(c:IdentityClaim)
    (u:IdentityUser)-[:HAS]->(l:IdentityUserLogin)
    (u:IdentityUser)-[:HAS]->(t:IdentityUserToken)

Every method accepts an optional ``cancellation`` token that is checked
before each statement is sent.
"""

from __future__ import annotations

from typing import Generic, Iterable, List, Optional, Type, TypeVar

from neo4jidentity.exceptions import RoleNotFoundError
from neo4jidentity.identity.base import GraphStoreBase, require, require_name
from neo4jidentity.identity.models import (
    Claim,
    Has,
    IdentityClaim,
    IdentityRole,
    IdentityUser,
    IdentityUserLogin,
    IdentityUserToken,
    IsIn,
    UserLoginInfo,
)
from neo4jidentity.identity.results import IdentityResult
from neo4jidentity.orm.descriptors import describe
from neo4jidentity.orm.patterns import Direction, node_pattern, relationship_pattern
from neo4jidentity.orm.projection import exclude
from neo4jidentity.orm.session import CancellationToken, QueryExecutor, SessionScope


UserType = TypeVar('UserType', bound=IdentityUser)
RoleType = TypeVar('RoleType', bound=IdentityRole)


class UserStore(GraphStoreBase[UserType], Generic[UserType, RoleType]):
    """
    Store for users of type ``user_cls`` and roles of type ``role_cls``.

    Example:
        ```python
        store = provider.user_store()
        user = IdentityUser(user_name="alice", normalized_user_name="ALICE")
        await store.create(user)
        assert user.entity_id is not None

        await store.add_to_role(user, "ADMIN")
        await store.get_roles(user)  # ["Admin"]
        ```
    """

    def __init__(
        self,
        executor: QueryExecutor,
        user_cls: Type[UserType] = IdentityUser,
        role_cls: Type[RoleType] = IdentityRole,
    ):
        super().__init__(executor, user_cls)
        self.user_cls = user_cls
        self.role_cls = role_cls

    # =============================================================================
    # USERS
    # =============================================================================

    async def create(
        self, user: UserType, cancellation: Optional[CancellationToken] = None
    ) -> IdentityResult:
        """Create the user node and copy the assigned ``entity_id`` back onto ``user``."""
        require(user, "user")
        return await self._create_entity(user, cancellation)

    async def update(
        self, user: UserType, cancellation: Optional[CancellationToken] = None
    ) -> IdentityResult:
        """Overwrite the stored properties of the node matching ``id`` and ``entity_id``."""
        require(user, "user")
        return await self._update_entity(user, cancellation)

    async def delete(
        self, user: UserType, cancellation: Optional[CancellationToken] = None
    ) -> IdentityResult:
        """Delete the user node and every relationship attached to it."""
        require(user, "user")
        return await self._delete_entity(user, cancellation)

    async def find_by_id(
        self, user_id: str, cancellation: Optional[CancellationToken] = None
    ) -> Optional[UserType]:
        return await self._find_by('id', user_id, cancellation)

    async def find_by_name(
        self, normalized_user_name: str, cancellation: Optional[CancellationToken] = None
    ) -> Optional[UserType]:
        return await self._find_by('normalized_user_name', normalized_user_name, cancellation)

    async def find_by_email(
        self, normalized_email: str, cancellation: Optional[CancellationToken] = None
    ) -> Optional[UserType]:
        return await self._find_by('normalized_email', normalized_email, cancellation)

    async def users(self, cancellation: Optional[CancellationToken] = None) -> List[UserType]:
        """All stored users."""
        return await self._all(cancellation)

    # =============================================================================
    # ROLES
    # =============================================================================

    async def _role_id(self, scope: SessionScope, normalized_role_name: str) -> str:
        role = await scope.query_optional(
            self.role_cls,
            f"MATCH {node_pattern(describe(self.role_cls), 'r', {'normalized_name': 'normalized_role_name'})} "
            f"RETURN r",
            {"normalized_role_name": normalized_role_name},
        )
        if role is None:
            raise RoleNotFoundError(normalized_role_name)
        return role.id

    async def add_to_role(
        self,
        user: UserType,
        normalized_role_name: str,
        cancellation: Optional[CancellationToken] = None,
    ) -> None:
        """
        Link ``user`` to the role with the given normalized name.

        Raises:
            RoleNotFoundError: If no such role exists
        """
        require(user, "user")
        require_name(normalized_role_name, "normalized_role_name")

        user_node = node_pattern(self.descriptor, 'n', {'id': 'user_id'})
        role_node = node_pattern(describe(self.role_cls), 'r', {'id': 'role_id'})

        async with self.executor.session(cancellation) as scope:
            role_id = await self._role_id(scope, normalized_role_name)
            await scope.run(
                f"MATCH {user_node} "
                f"MATCH {role_node} "
                f"CREATE (n){relationship_pattern(IsIn)}(r)",
                {"user_id": user.id, "role_id": role_id},
            )

    async def remove_from_role(
        self,
        user: UserType,
        normalized_role_name: str,
        cancellation: Optional[CancellationToken] = None,
    ) -> None:
        """
        Remove the membership of ``user`` in the named role.

        Raises:
            RoleNotFoundError: If no such role exists
        """
        require(user, "user")
        require_name(normalized_role_name, "normalized_role_name")

        async with self.executor.session(cancellation) as scope:
            role_id = await self._role_id(scope, normalized_role_name)
            await scope.run(
                f"MATCH {node_pattern(self.descriptor, 'n', {'id': 'user_id'})}"
                f"{relationship_pattern(IsIn, 'rel')}"
                f"{node_pattern(describe(self.role_cls), 'r', {'id': 'role_id'})} "
                f"DELETE rel",
                {"user_id": user.id, "role_id": role_id},
            )

    async def get_roles(
        self, user: UserType, cancellation: Optional[CancellationToken] = None
    ) -> List[str]:
        """Names of the roles ``user`` is in."""
        require(user, "user")

        found = await self.executor.query_many(
            self.role_cls,
            f"MATCH {node_pattern(self.descriptor, 'n', {'id': 'user_id'})}"
            f"{relationship_pattern(IsIn, 'rel')}"
            f"{node_pattern(describe(self.role_cls), 'r')} "
            f"RETURN r",
            {"user_id": user.id},
            cancellation,
        )
        return [role.name for role in found]

    async def is_in_role(
        self,
        user: UserType,
        normalized_role_name: str,
        cancellation: Optional[CancellationToken] = None,
    ) -> bool:
        require(user, "user")
        require_name(normalized_role_name, "normalized_role_name")

        found = await self.executor.query_many(
            self.role_cls,
            f"MATCH {node_pattern(self.descriptor, 'n', {'id': 'user_id'})}"
            f"{relationship_pattern(IsIn, 'rel')}"
            f"{node_pattern(describe(self.role_cls), 'r', {'normalized_name': 'normalized_role_name'})} "
            f"RETURN r",
            {"user_id": user.id, "normalized_role_name": normalized_role_name},
            cancellation,
        )
        return len(found) > 0

    async def get_users_in_role(
        self, normalized_role_name: str, cancellation: Optional[CancellationToken] = None
    ) -> List[UserType]:
        require_name(normalized_role_name, "normalized_role_name")

        found = await self.executor.query_many(
            self.user_cls,
            f"MATCH {node_pattern(self.descriptor, 'n')}"
            f"{relationship_pattern(IsIn)}"
            f"{node_pattern(describe(self.role_cls), 'c', {'normalized_name': 'normalized_role_name'})} "
            f"RETURN n",
            {"normalized_role_name": normalized_role_name},
            cancellation,
        )
        return found.to_list()

    # =============================================================================
    # CLAIMS
    # =============================================================================

    async def get_claims(
        self, user: UserType, cancellation: Optional[CancellationToken] = None
    ) -> List[Claim]:
        require(user, "user")
        return await self._get_claims(user, cancellation)

    async def add_claims(
        self,
        user: UserType,
        claims: Iterable[Claim],
        cancellation: Optional[CancellationToken] = None,
    ) -> None:
        """Attach one claim node per claim; an empty iterable does nothing."""
        require(user, "user")
        require(claims, "claims")
        await self._add_claims(user, list(claims), cancellation)

    async def replace_claim(
        self,
        user: UserType,
        claim: Claim,
        new_claim: Claim,
        cancellation: Optional[CancellationToken] = None,
    ) -> None:
        """Rewrite every claim node of ``user`` equal to ``claim`` as ``new_claim``."""
        require(user, "user")
        require(claim, "claim")
        require(new_claim, "new_claim")

        claim_node = node_pattern(describe(IdentityClaim), 'c', {
            'claim_value': 'old_claim_value',
            'claim_type': 'old_claim_type',
        })
        await self.executor.run(
            f"MATCH {node_pattern(self.descriptor, 'n', {'id': 'user_id'})}"
            f"{relationship_pattern(Has)}{claim_node} "
            f"SET c.claim_value = $new_claim_value, c.claim_type = $new_claim_type",
            {
                "user_id": user.id,
                "old_claim_type": claim.type,
                "old_claim_value": claim.value,
                "new_claim_type": new_claim.type,
                "new_claim_value": new_claim.value,
            },
            cancellation,
        )

    async def remove_claims(
        self,
        user: UserType,
        claims: Iterable[Claim],
        cancellation: Optional[CancellationToken] = None,
    ) -> None:
        require(user, "user")
        require(claims, "claims")
        await self._remove_claims(user, list(claims), cancellation)

    async def get_users_for_claim(
        self, claim: Claim, cancellation: Optional[CancellationToken] = None
    ) -> List[UserType]:
        require(claim, "claim")

        claim_node = node_pattern(describe(IdentityClaim), 'c', {
            'claim_type': 'claim_type',
            'claim_value': 'claim_value',
        })
        found = await self.executor.query_many(
            self.user_cls,
            f"MATCH {node_pattern(self.descriptor, 'n')}"
            f"{relationship_pattern(Has, direction=Direction.BOTH)}{claim_node} "
            f"RETURN n",
            {"claim_type": claim.type, "claim_value": claim.value},
            cancellation,
        )
        return found.to_list()

    # =============================================================================
    # LOGINS
    # =============================================================================

    async def add_login(
        self,
        user: UserType,
        login: UserLoginInfo,
        cancellation: Optional[CancellationToken] = None,
    ) -> None:
        require(user, "user")
        require(login, "login")

        await self.executor.run(
            f"MATCH {node_pattern(self.descriptor, 'n', {'id': 'user_id'})} "
            f"CREATE (n){relationship_pattern(Has)}{node_pattern(describe(IdentityUserLogin), 'c')} "
            f"SET c += $login, c.{IdentityUserLogin.graph_identifier} = id(c)",
            {"user_id": user.id, "login": exclude(login)},
            cancellation,
        )

    async def remove_login(
        self,
        user: UserType,
        login_provider: str,
        provider_key: str,
        cancellation: Optional[CancellationToken] = None,
    ) -> None:
        require(user, "user")

        await self.executor.run(
            f"MATCH {node_pattern(self.descriptor, 'n', {'id': 'user_id'})}"
            f"{relationship_pattern(Has)}"
            f"{node_pattern(describe(IdentityUserLogin), 'c', ['login_provider', 'provider_key'])} "
            f"DETACH DELETE c",
            {"user_id": user.id, "login_provider": login_provider, "provider_key": provider_key},
            cancellation,
        )

    async def get_logins(
        self, user: UserType, cancellation: Optional[CancellationToken] = None
    ) -> List[UserLoginInfo]:
        require(user, "user")

        found = await self.executor.query_many(
            IdentityUserLogin,
            f"MATCH {node_pattern(self.descriptor, 'n', {'id': 'user_id'})}"
            f"{relationship_pattern(Has)}"
            f"{node_pattern(describe(IdentityUserLogin), 'c')} "
            f"RETURN c",
            {"user_id": user.id},
            cancellation,
        )
        return [login.to_login_info() for login in found]

    async def find_by_login(
        self,
        login_provider: str,
        provider_key: str,
        cancellation: Optional[CancellationToken] = None,
    ) -> Optional[UserType]:
        return await self.executor.query_optional(
            self.user_cls,
            f"MATCH {node_pattern(self.descriptor, 'n')}"
            f"{relationship_pattern(Has)}"
            f"{node_pattern(describe(IdentityUserLogin), 'c', ['login_provider', 'provider_key'])} "
            f"RETURN n",
            {"login_provider": login_provider, "provider_key": provider_key},
            cancellation,
        )

    # =============================================================================
    # TOKENS
    # =============================================================================

    async def set_token(
        self,
        user: UserType,
        login_provider: str,
        name: str,
        value: Optional[str],
        cancellation: Optional[CancellationToken] = None,
    ) -> None:
        """Create or overwrite the token stored under (login_provider, name)."""
        require(user, "user")

        token_node = node_pattern(describe(IdentityUserToken), 'c', ['login_provider', 'name'])
        await self.executor.run(
            f"MATCH {node_pattern(self.descriptor, 'n', {'id': 'user_id'})} "
            f"MERGE (n){relationship_pattern(Has)}{token_node} "
            f"ON CREATE SET c.{IdentityUserToken.graph_identifier} = id(c) "
            f"SET c.value = $value",
            {"user_id": user.id, "login_provider": login_provider, "name": name, "value": value},
            cancellation,
        )

    async def remove_token(
        self,
        user: UserType,
        login_provider: str,
        name: str,
        cancellation: Optional[CancellationToken] = None,
    ) -> None:
        require(user, "user")

        await self.executor.run(
            f"MATCH {node_pattern(self.descriptor, 'n', {'id': 'user_id'})}"
            f"{relationship_pattern(Has)}"
            f"{node_pattern(describe(IdentityUserToken), 'c', ['login_provider', 'name'])} "
            f"DETACH DELETE c",
            {"user_id": user.id, "login_provider": login_provider, "name": name},
            cancellation,
        )

    async def get_token(
        self,
        user: UserType,
        login_provider: str,
        name: str,
        cancellation: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        require(user, "user")

        token = await self.executor.query_optional(
            IdentityUserToken,
            f"MATCH {node_pattern(self.descriptor, 'p', {'id': 'user_id'})}"
            f"{relationship_pattern(Has)}"
            f"{node_pattern(describe(IdentityUserToken), 'c', ['login_provider', 'name'])} "
            f"RETURN c",
            {"user_id": user.id, "login_provider": login_provider, "name": name},
            cancellation,
        )
        return token.value if token is not None else None
