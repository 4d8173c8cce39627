"""
FastAPI dependencies for credentials, learner resolution, collaborators and
database sessions.
"""

import json
from typing import Annotated, Any, Dict, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from learnpulse.database import get_db
from learnpulse.kernel.content import ContentDirectory, InMemoryContentDirectory
from learnpulse.kernel.identity import IdentityResolver, JWTIdentityResolver, LearnerRef
from learnpulse.logging_config import get_logger, learner_id_var

logger = get_logger(__name__)

# Security scheme
security = HTTPBearer(auto_error=False)


DbSession = Annotated[AsyncSession, Depends(get_db)]


def get_identity_resolver(request: Request) -> IdentityResolver:
    """Identity collaborator installed at startup (JWT verification by default)."""
    resolver = getattr(request.app.state, "identity_resolver", None)
    if resolver is None:
        resolver = JWTIdentityResolver()
        request.app.state.identity_resolver = resolver
    return resolver


def get_content_directory(request: Request) -> ContentDirectory:
    """Content Directory collaborator installed at startup."""
    directory = getattr(request.app.state, "content_directory", None)
    if directory is None:
        directory = InMemoryContentDirectory()
        request.app.state.content_directory = directory
    return directory


Resolver = Annotated[IdentityResolver, Depends(get_identity_resolver)]
Directory = Annotated[ContentDirectory, Depends(get_content_directory)]


def _unauthorized(detail: str = "Unauthorized") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def read_json_body(request: Request) -> Dict[str, Any]:
    """
    Parse the body as a JSON object regardless of content type.

    Beacons are often sent as text/plain; anything that is not a JSON object
    yields an empty dict.
    """
    raw = await request.body()
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except (ValueError, UnicodeDecodeError):
        logger.debug("Ignoring non-JSON request body", extra={"path": request.url.path})
        return {}
    return data if isinstance(data, dict) else {}


def extract_credential(request: Request, body: Optional[Dict[str, Any]] = None) -> Optional[str]:
    """Bearer header first, then a `token` field in the body, then the `token` query parameter."""
    header = request.headers.get("Authorization") or ""
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    token = (body or {}).get("token")
    if isinstance(token, str) and token.strip():
        return token.strip()
    query_token = request.query_params.get("token")
    if query_token and query_token.strip():
        return query_token.strip()
    return None


async def get_current_learner(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    resolver: Resolver,
) -> LearnerRef:
    """Resolve the bearer credential to a learner or raise 401/403."""
    if not credentials:
        raise _unauthorized("Not authenticated")

    identity = await resolver.resolve(credentials.credentials)
    if identity is None:
        raise _unauthorized("Invalid or expired token")

    if not identity.is_learner:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Learner access required",
        )

    learner = LearnerRef.from_identity(identity)
    learner_id_var.set(str(learner.id))
    return learner


CurrentLearner = Annotated[LearnerRef, Depends(get_current_learner)]
