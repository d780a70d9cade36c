"""
Identity models stored as Neo4j nodes, plus the value types the stores
accept and return.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
import uuid

from pydantic import BaseModel, ConfigDict, Field

from neo4jidentity.orm.entities import GraphEntity
from neo4jidentity.orm.relationships import GraphRelationship, graph_relationship


def new_stamp() -> str:
    return str(uuid.uuid4())


# =============================================================================
# VALUE TYPES
# =============================================================================

class Claim(BaseModel):
    """A (type, value) statement about a user or role."""

    model_config = ConfigDict(frozen=True)

    type: str
    value: str


class UserLoginInfo(BaseModel):
    """An external login: provider name plus the user's key at that provider."""

    login_provider: str
    provider_key: str
    provider_display_name: Optional[str] = None


# =============================================================================
# NODES
# =============================================================================

class IdentityUser(GraphEntity):
    """
    A user account.

    ``id`` is the application key; ``entity_id`` is the node id Neo4j assigns
    on creation.
    """

    id: str = Field(default_factory=new_stamp, description="Application-level user key")
    user_name: Optional[str] = None
    normalized_user_name: Optional[str] = None
    email: Optional[str] = None
    normalized_email: Optional[str] = None
    email_confirmed: bool = False
    password_hash: Optional[str] = None
    security_stamp: Optional[str] = None
    concurrency_stamp: str = Field(
        default_factory=new_stamp,
        description="Regenerated on every update, never checked on write"
    )
    phone_number: Optional[str] = None
    phone_number_confirmed: bool = False
    two_factor_enabled: bool = False
    lockout_end: Optional[datetime] = None
    lockout_enabled: bool = False
    access_failed_count: int = Field(default=0, ge=0)


class IdentityRole(GraphEntity):
    """A named role users can be placed in."""

    id: str = Field(default_factory=new_stamp, description="Application-level role key")
    name: Optional[str] = None
    normalized_name: Optional[str] = None
    concurrency_stamp: str = Field(default_factory=new_stamp)


class IdentityClaim(GraphEntity):
    """Claim node attached to a user or role through ``HAS``."""

    claim_type: Optional[str] = None
    claim_value: Optional[str] = None

    def to_claim(self) -> Claim:
        return Claim(type=self.claim_type, value=self.claim_value)

    @classmethod
    def from_claim(cls, claim: Claim) -> IdentityClaim:
        return cls(claim_type=claim.type, claim_value=claim.value)


class IdentityUserLogin(GraphEntity):
    """External login node attached to a user through ``HAS``."""

    login_provider: Optional[str] = None
    provider_key: Optional[str] = None
    provider_display_name: Optional[str] = None

    def to_login_info(self) -> UserLoginInfo:
        return UserLoginInfo(
            login_provider=self.login_provider,
            provider_key=self.provider_key,
            provider_display_name=self.provider_display_name,
        )


class IdentityUserToken(GraphEntity):
    """Authentication token node attached to a user through ``HAS``."""

    login_provider: Optional[str] = None
    name: Optional[str] = None
    value: Optional[str] = None


# =============================================================================
# RELATIONSHIPS
# =============================================================================

@graph_relationship(relationship_type="HAS")
class Has(GraphRelationship):
    """Owner -> claim, login or token."""


@graph_relationship(relationship_type="IS_IN")
class IsIn(GraphRelationship):
    """User -> role membership."""
