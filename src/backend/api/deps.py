"""
Shared dependencies for API endpoints.

Includes:
- Caller identity from a JWT bearer token
- Access to the process-wide governance engine
"""

from typing import Annotated

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.security import decode_token
from services.governance_engine import GovernanceEngine, get_governance_engine

logger = structlog.get_logger(__name__)

# auto_error=False so missing credentials produce our 401 instead of a 403
security = HTTPBearer(auto_error=False)


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str:
    """
    Extract the caller's principal id from the bearer token.

    Raises:
        HTTPException: If the token is missing, invalid or has no subject.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_token(credentials.credentials)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    principal = payload.get("sub")
    if not principal:
        logger.warning("token_without_subject", jti=payload.get("jti"))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal


def get_engine() -> GovernanceEngine:
    """Dependency for the governance engine."""
    return get_governance_engine()


CurrentPrincipal = Annotated[str, Depends(get_current_principal)]
Engine = Annotated[GovernanceEngine, Depends(get_engine)]
