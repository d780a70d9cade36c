"""
Neo4jIdentity RoleStore

Persists IdentityRole nodes and the claims attached to them through ``HAS``.
"""

from __future__ import annotations

from typing import List, Optional, Type, TypeVar

from neo4jidentity.identity.base import GraphStoreBase, require
from neo4jidentity.identity.models import Claim, IdentityRole
from neo4jidentity.identity.results import IdentityResult
from neo4jidentity.orm.session import CancellationToken, QueryExecutor


RoleType = TypeVar('RoleType', bound=IdentityRole)


class RoleStore(GraphStoreBase[RoleType]):
    """Store for roles of type ``role_cls``."""

    def __init__(self, executor: QueryExecutor, role_cls: Type[RoleType] = IdentityRole):
        super().__init__(executor, role_cls)
        self.role_cls = role_cls

    async def create(
        self, role: RoleType, cancellation: Optional[CancellationToken] = None
    ) -> IdentityResult:
        require(role, "role")
        return await self._create_entity(role, cancellation)

    async def update(
        self, role: RoleType, cancellation: Optional[CancellationToken] = None
    ) -> IdentityResult:
        """Regenerate the role's concurrency stamp and overwrite its stored properties."""
        require(role, "role")
        return await self._update_entity(role, cancellation)

    async def delete(
        self, role: RoleType, cancellation: Optional[CancellationToken] = None
    ) -> IdentityResult:
        require(role, "role")
        return await self._delete_entity(role, cancellation)

    async def find_by_id(
        self, role_id: str, cancellation: Optional[CancellationToken] = None
    ) -> Optional[RoleType]:
        return await self._find_by('id', role_id, cancellation)

    async def find_by_name(
        self, normalized_name: str, cancellation: Optional[CancellationToken] = None
    ) -> Optional[RoleType]:
        return await self._find_by('normalized_name', normalized_name, cancellation)

    async def roles(self, cancellation: Optional[CancellationToken] = None) -> List[RoleType]:
        return await self._all(cancellation)

    async def get_claims(
        self, role: RoleType, cancellation: Optional[CancellationToken] = None
    ) -> List[Claim]:
        require(role, "role")
        return await self._get_claims(role, cancellation)

    async def add_claim(
        self, role: RoleType, claim: Claim, cancellation: Optional[CancellationToken] = None
    ) -> None:
        require(role, "role")
        require(claim, "claim")
        await self._add_claims(role, [claim], cancellation)

    async def remove_claim(
        self, role: RoleType, claim: Claim, cancellation: Optional[CancellationToken] = None
    ) -> None:
        require(role, "role")
        require(claim, "claim")
        await self._remove_claims(role, [claim], cancellation)
