"""
Behavior shared by the user and role stores.

Both stores keep their entity under a ``id`` application key and attach
claim nodes through ``HAS``; the statements for those operations are built
here once.
"""

from __future__ import annotations

from typing import Any, Generic, List, Optional, Type, TypeVar

from neo4jidentity.exceptions import PreconditionError
from neo4jidentity.identity.models import Claim, Has, IdentityClaim, new_stamp
from neo4jidentity.identity.results import IdentityResult
from neo4jidentity.orm.descriptors import TypeDescriptor, describe
from neo4jidentity.orm.entities import GraphEntity
from neo4jidentity.orm.patterns import node_pattern, relationship_pattern
from neo4jidentity.orm.projection import exclude, include
from neo4jidentity.orm.session import CancellationToken, QueryExecutor


EntityType = TypeVar('EntityType', bound=GraphEntity)


def require(value: Any, argument: str) -> Any:
    if value is None:
        raise PreconditionError(argument)
    return value


def require_name(value: Optional[str], argument: str) -> str:
    if value is None or not value.strip():
        raise PreconditionError(argument, "Value cannot be null or empty")
    return value


class GraphStoreBase(Generic[EntityType]):
    """
    CRUD and claim statements for one GraphEntity type keyed by ``id``.

    Subclasses expose these under the names their contract uses.
    """

    key_field = 'id'

    def __init__(self, executor: QueryExecutor, entity_cls: Type[EntityType]):
        self.executor = require(executor, "executor")
        self.entity_cls = entity_cls

    @property
    def descriptor(self) -> TypeDescriptor:
        return describe(self.entity_cls)

    @property
    def _identifier(self) -> str:
        return self.entity_cls.graph_identifier

    def _owner(self, variable: str) -> str:
        return node_pattern(self.descriptor, variable, {self.key_field: "owner_id"})

    # =============================================================================
    # ENTITY CRUD
    # =============================================================================

    async def _create_entity(
        self, entity: EntityType, cancellation: Optional[CancellationToken]
    ) -> IdentityResult:
        created = await self.executor.query_optional(
            self.entity_cls,
            f"CREATE {node_pattern(self.descriptor, 'p')} "
            f"SET p += $entity, p.{self._identifier} = id(p) "
            f"RETURN p",
            {"entity": exclude(entity)},
            cancellation,
        )
        if created is None:
            return IdentityResult.failed(f"{self.entity_cls.__name__} was not created")

        entity.entity_id = created.entity_id
        return IdentityResult.success()

    async def _update_entity(
        self, entity: EntityType, cancellation: Optional[CancellationToken]
    ) -> IdentityResult:
        if hasattr(entity, 'concurrency_stamp'):
            entity.concurrency_stamp = new_stamp()

        match = node_pattern(self.descriptor, 'p', {
            self.key_field: f"entity.{self.key_field}",
            self._identifier: self._identifier,
        })
        await self.executor.run(
            f"MATCH {match} SET p += $entity",
            {"entity": exclude(entity), self._identifier: entity.entity_id},
            cancellation,
        )
        return IdentityResult.success()

    async def _delete_entity(
        self, entity: EntityType, cancellation: Optional[CancellationToken]
    ) -> IdentityResult:
        match = node_pattern(self.descriptor, 'p', [self.key_field, self._identifier])
        await self.executor.run(
            f"MATCH {match} DETACH DELETE p",
            {
                self.key_field: getattr(entity, self.key_field),
                self._identifier: entity.entity_id,
            },
            cancellation,
        )
        return IdentityResult.success()

    async def _find_by(
        self, field_name: str, value: Any, cancellation: Optional[CancellationToken]
    ) -> Optional[EntityType]:
        return await self.executor.query_optional(
            self.entity_cls,
            f"MATCH {node_pattern(self.descriptor, 'p', [field_name])} RETURN p",
            {field_name: value},
            cancellation,
        )

    async def _all(self, cancellation: Optional[CancellationToken]) -> List[EntityType]:
        found = await self.executor.query_many(
            self.entity_cls,
            f"MATCH {node_pattern(self.descriptor, 'p')} RETURN p",
            {},
            cancellation,
        )
        return found.to_list()

    # =============================================================================
    # CLAIMS
    # =============================================================================

    async def _get_claims(
        self, owner: EntityType, cancellation: Optional[CancellationToken]
    ) -> List[Claim]:
        found = await self.executor.query_many(
            IdentityClaim,
            f"MATCH {self._owner('n')}{relationship_pattern(Has, 'rel')}"
            f"{node_pattern(describe(IdentityClaim), 'r')} "
            f"RETURN r",
            {"owner_id": getattr(owner, self.key_field)},
            cancellation,
        )
        return [claim.to_claim() for claim in found]

    async def _add_claims(
        self,
        owner: EntityType,
        claims: List[Claim],
        cancellation: Optional[CancellationToken],
    ) -> None:
        claims_list = [
            include(IdentityClaim.from_claim(claim), 'claim_type', 'claim_value')
            for claim in claims
        ]
        if not claims_list:
            return

        claim_descriptor = describe(IdentityClaim)
        await self.executor.run(
            f"MATCH {self._owner('n')} "
            f"UNWIND $claims_list AS row "
            f"CREATE (n){relationship_pattern(Has)}{node_pattern(claim_descriptor, 'c')} "
            f"SET c += row, c.{IdentityClaim.graph_identifier} = id(c)",
            {"owner_id": getattr(owner, self.key_field), "claims_list": claims_list},
            cancellation,
        )

    async def _remove_claims(
        self,
        owner: EntityType,
        claims: List[Claim],
        cancellation: Optional[CancellationToken],
    ) -> None:
        claims_list = [include(claim, 'type', 'value') for claim in claims]
        if not claims_list:
            return

        await self.executor.run(
            f"UNWIND $claims_list AS row "
            f"MATCH {self._owner('n')}{relationship_pattern(Has)}"
            f"{node_pattern(describe(IdentityClaim), 'c')} "
            f"WHERE c.claim_value = row.value AND c.claim_type = row.type "
            f"DETACH DELETE c",
            {"owner_id": getattr(owner, self.key_field), "claims_list": claims_list},
            cancellation,
        )
