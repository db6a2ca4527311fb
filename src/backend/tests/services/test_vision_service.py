"""
Tests for vision creation and the draft -> voting transition.
"""

import pytest

from core.exceptions import (
    InvalidInput,
    InvalidState,
    InvalidVision,
    NotAuthorized,
    NotRegistered,
    VisionNotFound,
)
from schemas.governance import VisionStatus

OWNER = "governance-owner"
DESCRIPTION = "Convert the old rail yard into a community park"


@pytest.mark.unit
class TestCreateVision:
    """Tests for create_vision."""

    async def test_creates_draft_with_progress_record(self, engine, register, clock) -> None:
        await register("alice")

        vision = await engine.create_vision("alice", "Rail Yard Park", DESCRIPTION, "parks", 3, 5000)

        assert vision.id == 1
        assert vision.status == VisionStatus.DRAFT
        assert vision.creator == "alice"
        assert vision.created_at == clock.now()
        assert vision.estimated_completion == clock.now() + 5000
        assert vision.votes_for == vision.votes_against == vision.total_participants == 0
        assert vision.voting_start is None and vision.voting_end is None

        progress = await engine.get_vision_progress(vision.id)
        assert progress.total_milestones == 0
        assert progress.overall_progress == 0
        assert progress.last_updated == clock.now()
        assert progress.next_review_date == clock.now() + 2016

    async def test_ids_are_sequential(self, engine, register) -> None:
        await register("alice")

        first = await engine.create_vision("alice", "One", DESCRIPTION, "parks", 1, 0)
        second = await engine.create_vision("alice", "Two", DESCRIPTION, "parks", 1, 0)

        assert (first.id, second.id) == (1, 2)
        stats = await engine.get_system_stats()
        assert stats.total_visions == 2

    async def test_creation_rewards_creator(self, engine, register) -> None:
        await register("alice")
        await engine.create_vision("alice", "Rail Yard Park", DESCRIPTION, "parks", 3, 5000)

        alice = await engine.get_stakeholder("alice")
        assert alice.reputation == 110
        assert alice.participation_count == 1

    async def test_unregistered_creator(self, engine) -> None:
        with pytest.raises(NotRegistered):
            await engine.create_vision("mallory", "Rail Yard Park", DESCRIPTION, "parks", 3, 5000)

    async def test_validation_precedes_registration(self, engine) -> None:
        with pytest.raises(InvalidVision):
            await engine.create_vision("mallory", "", DESCRIPTION, "parks", 3, 5000)

    @pytest.mark.parametrize(
        "title,description,category,priority",
        [
            ("", DESCRIPTION, "parks", 3),
            ("x" * 101, DESCRIPTION, "parks", 3),
            ("Park", "too short", "parks", 3),
            ("Park", "exactly 10", "parks", 3),
            ("Park", "d" * 501, "parks", 3),
            ("Park", DESCRIPTION, "c" * 51, 3),
            ("Park", DESCRIPTION, "parks", 0),
            ("Park", DESCRIPTION, "parks", 6),
        ],
    )
    async def test_invalid_fields(self, engine, register, title, description, category, priority) -> None:
        await register("alice")

        with pytest.raises(InvalidVision) as exc_info:
            await engine.create_vision("alice", title, description, category, priority, 0)
        assert isinstance(exc_info.value, InvalidInput)

        stats = await engine.get_system_stats()
        assert stats.total_visions == 0

    async def test_boundary_lengths_are_accepted(self, engine, register) -> None:
        await register("alice")

        vision = await engine.create_vision("alice", "t" * 100, "d" * 11, "c" * 50, 5, 0)

        assert vision.priority == 5

    async def test_negative_offset(self, engine, register) -> None:
        await register("alice")
        with pytest.raises(InvalidVision):
            await engine.create_vision("alice", "Park", DESCRIPTION, "parks", 3, -1)


@pytest.mark.unit
class TestStartVoting:
    """Tests for start_voting."""

    async def test_opens_one_week_window(self, engine, clock, draft_vision) -> None:
        vision = await engine.start_voting("alice", draft_vision)

        assert vision.status == VisionStatus.VOTING
        assert vision.voting_start == clock.now()
        assert vision.voting_end == clock.now() + 1008

    async def test_owner_may_start(self, engine, draft_vision) -> None:
        vision = await engine.start_voting(OWNER, draft_vision)
        assert vision.status == VisionStatus.VOTING

    async def test_other_stakeholder_may_not_start(self, engine, register, draft_vision) -> None:
        await register("bob")
        with pytest.raises(NotAuthorized):
            await engine.start_voting("bob", draft_vision)

        vision = await engine.get_vision(draft_vision)
        assert vision.status == VisionStatus.DRAFT

    async def test_start_twice(self, engine, voting_vision) -> None:
        with pytest.raises(InvalidState):
            await engine.start_voting("alice", voting_vision)

    async def test_unknown_vision(self, engine) -> None:
        with pytest.raises(VisionNotFound):
            await engine.start_voting(OWNER, 5)

    async def test_start_does_not_touch_reputation(self, engine, draft_vision) -> None:
        before = await engine.get_stakeholder("alice")
        await engine.start_voting("alice", draft_vision)

        assert await engine.get_stakeholder("alice") == before
