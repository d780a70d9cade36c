#!/usr/bin/env python3
r"""
Neo4jIdentity Store Example

Walks through the user and role stores against a running Neo4j server:
creating a role and a user, linking them, attaching claims, an external
login and a token, then cleaning everything up again.

Configure the server with NEO4J_URI, NEO4J_USER and NEO4J_PASSWORD.
"""

import asyncio
import os
from typing import Optional

from pydantic import Field

from neo4jidentity import (
    CancellationToken,
    Claim,
    IdentityDriverProvider,
    IdentityRole,
    IdentityStoreOptions,
    IdentityUser,
    OperationCancelledError,
    UserLoginInfo,
    describe,
    graph_entity,
)


# =============================================================================
# DEFINE ENTITIES
# =============================================================================

@graph_entity(label="Employee")
class Employee(IdentityUser):
    """An identity user carrying a couple of HR fields."""

    department: Optional[str] = Field(None, max_length=100)
    badge_number: int = Field(default=0, ge=0)


# =============================================================================
# DEMO
# =============================================================================

async def main():
    options = IdentityStoreOptions(
        uri=os.environ.get("NEO4J_URI", "bolt://localhost:7687"),
        auth=(os.environ.get("NEO4J_USER", "neo4j"), os.environ.get("NEO4J_PASSWORD", "password")),
    )

    print("🚀 Neo4jIdentity Store Demo")
    print("=" * 60)

    descriptor = describe(Employee)
    print(f"\n📐 Employee labels: {descriptor.labels}")
    print(f"   Fields: {', '.join(descriptor.field_names)}")

    async with IdentityDriverProvider(options) as provider:
        users = provider.user_store(user_cls=Employee)
        roles = provider.role_store()

        admin = IdentityRole(name="Admin", normalized_name="ADMIN")
        alice = Employee(
            user_name="alice",
            normalized_user_name="ALICE",
            email="alice@example.com",
            normalized_email="ALICE@EXAMPLE.COM",
            department="Platform",
            badge_number=1042,
        )

        try:
            await roles.create(admin)
            result = await users.create(alice)
            print(f"\n👤 Created {alice.user_name}: {result.succeeded} (entity_id={alice.entity_id})")

            await users.add_to_role(alice, "ADMIN")
            print(f"   Roles: {await users.get_roles(alice)}")

            await users.add_claims(alice, [
                Claim(type="permission", value="deploy"),
                Claim(type="permission", value="audit.read"),
            ])
            for claim in await users.get_claims(alice):
                print(f"   Claim: {claim.type} = {claim.value}")

            await users.add_login(alice, UserLoginInfo(login_provider="github", provider_key="alice-gh"))
            found = await users.find_by_login("github", "alice-gh")
            print(f"   Found by GitHub login: {found.user_name} ({found.department})")

            await users.set_token(alice, "github", "access_token", "gho_example")
            print(f"   Token: {await users.get_token(alice, 'github', 'access_token')}")

            token = CancellationToken()
            token.cancel()
            try:
                await users.users(token)
            except OperationCancelledError as e:
                print(f"\n🛑 Cancelled before dispatch: {e}")

        finally:
            await users.remove_login(alice, "github", "alice-gh")
            await users.remove_token(alice, "github", "access_token")
            await users.remove_claims(alice, await users.get_claims(alice))
            await users.delete(alice)
            await roles.delete(admin)
            print("\n🧹 Cleaned up demo nodes")


if __name__ == "__main__":
    asyncio.run(main())
