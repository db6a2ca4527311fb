"""
Tests for API dependencies (deps.py).
"""

from datetime import timedelta

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from api.deps import get_current_principal, get_engine
from core.security import create_access_token
from services.governance_engine import set_governance_engine


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


@pytest.mark.unit
class TestGetCurrentPrincipal:
    """Test bearer token resolution."""

    async def test_valid_token(self) -> None:
        principal = await get_current_principal(_credentials(create_access_token("alice")))
        assert principal == "alice"

    async def test_missing_credentials(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_principal(None)
        assert exc_info.value.status_code == 401

    async def test_garbage_token(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_principal(_credentials("not-a-jwt"))
        assert exc_info.value.status_code == 401

    async def test_expired_token(self) -> None:
        token = create_access_token("alice", expires_delta=timedelta(seconds=-5))
        with pytest.raises(HTTPException) as exc_info:
            await get_current_principal(_credentials(token))
        assert exc_info.value.status_code == 401

    async def test_empty_subject(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_principal(_credentials(create_access_token("")))
        assert exc_info.value.detail == "Invalid token payload"


@pytest.mark.unit
class TestGetEngine:
    def test_returns_process_engine(self, engine) -> None:
        set_governance_engine(engine)
        try:
            assert get_engine() is engine
        finally:
            set_governance_engine(None)
