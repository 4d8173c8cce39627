"""
Identity Core - credential resolution for learners.
"""

from learnpulse.kernel.identity.jwt import JWTManager, AccessTokenPayload
from learnpulse.kernel.identity.identity_service import (
    Identity,
    IdentityResolver,
    JWTIdentityResolver,
    LearnerRef,
    UserRole,
    resolve_learner,
)

__all__ = [
    "JWTManager",
    "AccessTokenPayload",
    "Identity",
    "IdentityResolver",
    "JWTIdentityResolver",
    "LearnerRef",
    "UserRole",
    "resolve_learner",
]
