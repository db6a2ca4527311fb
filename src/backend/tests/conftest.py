"""
Pytest fixtures for CivicVision backend tests.
"""

import os
from collections.abc import AsyncGenerator
from typing import Any, Awaitable, Callable

import pytest
from httpx import ASGITransport, AsyncClient

# Set test environment variables before importing app
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("GOVERNANCE_OWNER", "governance-owner")

OWNER = "governance-owner"
VOTING_PERIOD = 1008
START_TICK = 100

VALID_DESCRIPTION = "Convert the old rail yard into a community park"


@pytest.fixture
def clock():
    """Manually driven logical clock starting at tick 100."""
    from core.clock import ManualClock

    return ManualClock(start=START_TICK)


@pytest.fixture
def store():
    """Fresh in-memory store."""
    from repositories.memory import InMemoryStore

    return InMemoryStore()


@pytest.fixture
def engine(store, clock):
    """Governance engine over the in-memory store and manual clock."""
    from services.governance_engine import GovernanceEngine

    return GovernanceEngine(store.unit_of_work, clock, owner=OWNER)


@pytest.fixture
def register(engine) -> Callable[..., Awaitable[Any]]:
    """Register several identities with one call."""

    async def _register(*identities: str, role: str = "resident") -> None:
        for identity in identities:
            await engine.register_stakeholder(identity, role)

    return _register


@pytest.fixture
async def draft_vision(engine, register) -> int:
    """A draft vision created by alice."""
    await register("alice")
    vision = await engine.create_vision("alice", "Rail Yard Park", VALID_DESCRIPTION, "parks", 3, 5000)
    return vision.id


@pytest.fixture
async def voting_vision(engine, draft_vision) -> int:
    """alice's vision, open for voting from START_TICK to START_TICK + 1008."""
    await engine.start_voting("alice", draft_vision)
    return draft_vision


@pytest.fixture
async def approved_vision(engine, register, clock, voting_vision) -> int:
    """alice's vision approved by bob and carol (3 stakeholders, 2 participants)."""
    await register("bob", "carol")
    await engine.cast_vote("bob", voting_vision, "for")
    await engine.cast_vote("carol", voting_vision, "for")
    clock.advance(VOTING_PERIOD)
    outcome = await engine.finalize_voting("bob", voting_vision)
    assert outcome.status.value == "approved"
    return voting_vision


@pytest.fixture
async def app(engine) -> AsyncGenerator[Any, None]:
    """FastAPI application wired to the test engine."""
    from main import app as fastapi_app
    from services.governance_engine import set_governance_engine

    set_governance_engine(engine)
    yield fastapi_app
    set_governance_engine(None)


@pytest.fixture
async def client(app: Any) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def auth_headers() -> Callable[[str], dict[str, str]]:
    """Build bearer headers for a principal."""
    from core.security import create_access_token

    def _headers(principal: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(principal)}"}

    return _headers
