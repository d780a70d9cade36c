"""
Neo4jIdentity Identity Module

User and role stores built on the ORM mapping layer.
"""

from neo4jidentity.identity.models import (
    Claim,
    UserLoginInfo,
    IdentityUser,
    IdentityRole,
    IdentityClaim,
    IdentityUserLogin,
    IdentityUserToken,
    Has,
    IsIn,
)
from neo4jidentity.identity.results import IdentityResult
from neo4jidentity.identity.options import IdentityStoreOptions
from neo4jidentity.identity.user_store import UserStore
from neo4jidentity.identity.role_store import RoleStore
from neo4jidentity.identity.provider import IdentityDriverProvider

__all__ = [
    "Claim",
    "UserLoginInfo",
    "IdentityUser",
    "IdentityRole",
    "IdentityClaim",
    "IdentityUserLogin",
    "IdentityUserToken",
    "Has",
    "IsIn",
    "IdentityResult",
    "IdentityStoreOptions",
    "UserStore",
    "RoleStore",
    "IdentityDriverProvider",
]
