"""
Identity collaborator: resolves a bearer credential to a subject and role.

The engines never see raw credentials or loosely typed user objects; they
receive a LearnerRef, which can only be built from a resolved student identity.
"""

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from pydantic import BaseModel

from learnpulse.kernel.errors import AuthError
from learnpulse.kernel.identity.jwt import JWTManager
from learnpulse.logging_config import get_logger

logger = get_logger(__name__)


class UserRole(str, Enum):
    """Roles issued by the auth subsystem."""
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class Identity(BaseModel):
    """A resolved credential."""

    subject_id: uuid.UUID
    role: str

    @property
    def is_learner(self) -> bool:
        return self.role.lower() == UserRole.STUDENT.value


class IdentityResolver(Protocol):
    """Contract of the Identity collaborator."""

    async def resolve(self, credential: str) -> Optional[Identity]:
        """Return the identity behind credential, or None if it does not resolve."""
        ...


class JWTIdentityResolver:
    """Resolve HS256 access tokens issued by the auth subsystem."""

    def __init__(self, jwt_manager: Optional[JWTManager] = None):
        self.jwt_manager = jwt_manager or JWTManager()

    async def resolve(self, credential: str) -> Optional[Identity]:
        if not credential:
            return None
        payload = self.jwt_manager.verify_access_token(credential)
        if payload is None:
            return None
        try:
            subject_id = uuid.UUID(payload.sub)
        except ValueError:
            logger.debug("Token subject is not a UUID", extra={"sub": payload.sub})
            return None
        return Identity(subject_id=subject_id, role=payload.role)


@dataclass(frozen=True)
class LearnerRef:
    """Typed reference to a learner, validated at the API boundary."""

    id: uuid.UUID

    @classmethod
    def from_identity(cls, identity: Optional[Identity]) -> "LearnerRef":
        """Build a reference from a resolved identity; raise AuthError unless it is a student."""
        if identity is None:
            raise AuthError("Unauthorized")
        if not identity.is_learner:
            raise AuthError(f"Role '{identity.role}' is not a learner")
        return cls(id=identity.subject_id)


async def resolve_learner(resolver: IdentityResolver, credential: Optional[str]) -> LearnerRef:
    """Resolve a raw credential straight to a LearnerRef."""
    if not credential:
        raise AuthError("Missing credential")
    identity = await resolver.resolve(credential)
    return LearnerRef.from_identity(identity)
