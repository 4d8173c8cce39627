"""
JWT token handling for the Identity collaborator.

Tokens are issued by the external auth subsystem; this module verifies them
and can mint access tokens with the same shape (used by tests and tooling).
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel, ConfigDict

from learnpulse.config import get_settings


class AccessTokenPayload(BaseModel):
    """JWT access token payload."""

    model_config = ConfigDict(from_attributes=True)

    sub: str  # Learner / user ID
    role: str
    exp: datetime
    iat: datetime
    jti: str
    email: Optional[str] = None


class JWTManager:
    """
    Access token creation and verification.
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        access_token_expire_minutes: Optional[int] = None,
    ):
        settings = get_settings()
        self.secret_key = secret_key or settings.secret_key
        self.algorithm = algorithm or settings.algorithm
        self.access_token_expire_minutes = access_token_expire_minutes or settings.access_token_expire_minutes

    def create_access_token(
        self,
        user_id: uuid.UUID,
        role: str,
        email: Optional[str] = None,
        expires_delta: Optional[timedelta] = None,
    ) -> tuple[str, datetime, str]:
        """
        Create a new access token.

        Args:
            user_id: Subject identifier
            role: Role claim (student, teacher, admin)
            email: Optional email claim
            expires_delta: Optional custom expiration time

        Returns:
            Tuple of (token, expiration_datetime, token_id)
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.access_token_expire_minutes))
        jti = str(uuid.uuid4())

        payload = {
            "sub": str(user_id),
            "role": role,
            "exp": expire,
            "iat": now,
            "jti": jti,
            "type": "access",
        }
        if email:
            payload["email"] = email

        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        return token, expire, jti

    def verify_access_token(self, token: str) -> Optional[AccessTokenPayload]:
        """
        Verify and decode an access token.

        Returns:
            AccessTokenPayload if valid, None otherwise
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
            )
        except JWTError:
            return None

        if payload.get("type") != "access":
            return None
        if not payload.get("sub") or not payload.get("role"):
            return None

        return AccessTokenPayload(
            sub=payload["sub"],
            role=payload["role"],
            email=payload.get("email"),
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            jti=payload.get("jti", ""),
        )
