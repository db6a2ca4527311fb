"""
Tests for the weighted voting engine.

Covers:
- Vote weight formula (reputation, participation cap, official multiplier)
- Quorum and approval arithmetic
- Ballot uniqueness and frozen weights
- Voting window guards and one-shot finalization
"""

import asyncio

import pytest

from core.exceptions import (
    AlreadyVoted,
    InvalidInput,
    InvalidState,
    NotRegistered,
    VisionNotFound,
    VotingClosed,
    VotingNotEnded,
)
from schemas.governance import (
    RejectionReason,
    Stakeholder,
    StakeholderRole,
    VisionStatus,
    VoteDirection,
)
from services.voting_engine import (
    approval_rate,
    compute_vote_weight,
    evaluate_outcome,
    participation_rate,
)
START_TICK = 100
VOTING_PERIOD = 1008


def _stakeholder(reputation: int = 100, participation: int = 0, role: str = "resident") -> Stakeholder:
    return Stakeholder(
        identity="voter",
        registered_at=0,
        reputation=reputation,
        participation_count=participation,
        last_active=0,
        role=StakeholderRole(role),
    )


@pytest.mark.unit
class TestVoteWeight:
    """Tests for compute_vote_weight."""

    def test_fresh_resident(self) -> None:
        assert compute_vote_weight(_stakeholder()) == 110

    def test_reputation_bonus_truncates(self) -> None:
        # 159 // 10 == 15
        assert compute_vote_weight(_stakeholder(reputation=159)) == 115

    def test_participation_bonus_is_capped(self) -> None:
        assert compute_vote_weight(_stakeholder(participation=50)) == 160
        assert compute_vote_weight(_stakeholder(participation=500)) == 160

    def test_official_multiplier(self) -> None:
        # (100 + 10 + 0) * 150 // 100
        assert compute_vote_weight(_stakeholder(role="official")) == 165

    def test_official_multiplier_truncates(self) -> None:
        # (100 + 0 + 1) * 150 // 100 == 151 (151.5 truncated)
        assert compute_vote_weight(_stakeholder(reputation=1, participation=1, role="official")) == 151

    @pytest.mark.parametrize("role", ["resident", "business", "organization"])
    def test_non_official_roles_use_default_multiplier(self, role: str) -> None:
        assert compute_vote_weight(_stakeholder(role=role)) == 110


@pytest.mark.unit
class TestOutcomeArithmetic:
    """Tests for the quorum/approval evaluation."""

    def test_exactly_at_quorum_is_approved(self) -> None:
        participation = participation_rate(3, 10)
        approval = approval_rate(600, 200)

        assert participation == 3000
        assert approval == 7500
        assert evaluate_outcome(participation, approval) == (VisionStatus.APPROVED, None)

    def test_below_quorum_is_rejected_regardless_of_approval(self) -> None:
        participation = participation_rate(2, 10)

        assert participation == 2000
        status, reason = evaluate_outcome(participation, 10000)
        assert status == VisionStatus.REJECTED
        assert reason == RejectionReason.INSUFFICIENT_PARTICIPATION

    def test_below_approval_is_rejected(self) -> None:
        status, reason = evaluate_outcome(10000, approval_rate(599, 401))
        assert status == VisionStatus.REJECTED
        assert reason == RejectionReason.INSUFFICIENT_APPROVAL

    def test_exactly_at_approval_threshold_is_approved(self) -> None:
        assert approval_rate(600, 400) == 6000
        assert evaluate_outcome(5000, 6000)[0] == VisionStatus.APPROVED

    def test_rates_are_zero_without_denominators(self) -> None:
        assert participation_rate(0, 0) == 0
        assert approval_rate(0, 0) == 0

    def test_rates_truncate(self) -> None:
        assert participation_rate(1, 3) == 3333
        assert approval_rate(2, 1) == 6666


@pytest.mark.unit
class TestCastVote:
    """Tests for casting ballots through the engine."""

    async def test_vote_records_weighted_ballot(self, engine, register, voting_vision) -> None:
        await register("bob")

        ballot = await engine.cast_vote("bob", voting_vision, "for")

        assert ballot.weight == 110
        assert ballot.direction == VoteDirection.FOR
        assert ballot.cast_at == START_TICK

        vision = await engine.get_vision(voting_vision)
        assert vision.votes_for == 110
        assert vision.votes_against == 0
        assert vision.total_participants == 1

    async def test_vote_against_accumulates_separately(self, engine, register, voting_vision) -> None:
        await register("bob")
        await register("olga", role="official")

        await engine.cast_vote("bob", voting_vision, VoteDirection.AGAINST)
        await engine.cast_vote("olga", voting_vision, True)

        vision = await engine.get_vision(voting_vision)
        assert vision.votes_against == 110
        assert vision.votes_for == 165
        assert vision.total_participants == 2

    async def test_vote_rewards_voter_activity(self, engine, register, voting_vision) -> None:
        await register("bob")
        await engine.cast_vote("bob", voting_vision, "for")

        bob = await engine.get_stakeholder("bob")
        assert bob.reputation == 105
        assert bob.participation_count == 1

    async def test_second_vote_is_rejected(self, engine, register, voting_vision) -> None:
        await register("bob")
        await engine.cast_vote("bob", voting_vision, "for")

        with pytest.raises(AlreadyVoted):
            await engine.cast_vote("bob", voting_vision, "against")

        vision = await engine.get_vision(voting_vision)
        assert vision.total_participants == 1
        assert vision.votes_against == 0

    async def test_weight_is_frozen_at_cast_time(self, engine, register, voting_vision) -> None:
        await register("bob")
        await engine.cast_vote("bob", voting_vision, "for")

        # Comments raise bob's reputation and participation afterwards
        for _ in range(20):
            await engine.add_comment("bob", voting_vision, "Still in favour")

        ballot = await engine.get_vote(voting_vision, "bob")
        vision = await engine.get_vision(voting_vision)
        assert ballot.weight == 110
        assert vision.votes_for == 110

    async def test_unknown_vision(self, engine, register) -> None:
        await register("bob")
        with pytest.raises(VisionNotFound):
            await engine.cast_vote("bob", 42, "for")

    async def test_unregistered_voter_precedes_closed_check(self, engine, draft_vision) -> None:
        # Vision is still a draft, but the missing registration is reported first
        with pytest.raises(NotRegistered):
            await engine.cast_vote("mallory", draft_vision, "for")

    async def test_draft_vision_is_closed(self, engine, register, draft_vision) -> None:
        await register("bob")
        with pytest.raises(VotingClosed):
            await engine.cast_vote("bob", draft_vision, "for")

    async def test_vote_allowed_on_last_tick(self, engine, register, clock, voting_vision) -> None:
        await register("bob")
        clock.advance(VOTING_PERIOD)

        ballot = await engine.cast_vote("bob", voting_vision, "for")
        assert ballot.cast_at == START_TICK + VOTING_PERIOD

    async def test_vote_after_deadline_is_closed(self, engine, register, clock, voting_vision) -> None:
        await register("bob")
        clock.advance(VOTING_PERIOD + 1)

        with pytest.raises(VotingClosed):
            await engine.cast_vote("bob", voting_vision, "for")

    async def test_unknown_direction(self, engine, register, voting_vision) -> None:
        await register("bob")
        with pytest.raises(InvalidInput):
            await engine.cast_vote("bob", voting_vision, "abstain")

    async def test_concurrent_votes_are_serialized(self, engine, register, voting_vision) -> None:
        voters = [f"voter-{i}" for i in range(10)]
        await register(*voters)

        await asyncio.gather(*(engine.cast_vote(v, voting_vision, "for") for v in voters))

        vision = await engine.get_vision(voting_vision)
        assert vision.total_participants == 10
        assert vision.votes_for == 110 * 10

    async def test_concurrent_duplicate_vote_counts_once(self, engine, register, voting_vision) -> None:
        await register("bob")

        results = await asyncio.gather(
            engine.cast_vote("bob", voting_vision, "for"),
            engine.cast_vote("bob", voting_vision, "for"),
            return_exceptions=True,
        )

        assert sum(isinstance(r, AlreadyVoted) for r in results) == 1
        vision = await engine.get_vision(voting_vision)
        assert vision.total_participants == 1


@pytest.mark.unit
class TestFinalizeVoting:
    """Tests for finalization."""

    async def test_finalize_before_deadline(self, engine, clock, voting_vision) -> None:
        clock.advance(VOTING_PERIOD - 1)

        with pytest.raises(VotingNotEnded) as exc_info:
            await engine.finalize_voting("alice", voting_vision)
        assert isinstance(exc_info.value, VotingClosed)

    async def test_finalize_draft_is_invalid_state(self, engine, draft_vision) -> None:
        with pytest.raises(InvalidState):
            await engine.finalize_voting("alice", draft_vision)

    async def test_finalize_unknown_vision(self, engine) -> None:
        with pytest.raises(VisionNotFound):
            await engine.finalize_voting("alice", 7)

    async def test_approved_outcome(self, engine, register, clock, voting_vision) -> None:
        # 10 stakeholders in total, 3 participants -> exactly 30.00% participation
        others = [f"s{i}" for i in range(9)]
        await register(*others)
        for voter in others[:3]:
            await engine.cast_vote(voter, voting_vision, "for")
        clock.advance(VOTING_PERIOD)

        outcome = await engine.finalize_voting("s8", voting_vision)

        assert outcome.status == VisionStatus.APPROVED
        assert outcome.participation_rate == 3000
        assert outcome.approval_rate == 10000
        assert outcome.rejection_reason is None

        vision = await engine.get_vision(voting_vision)
        assert vision.status == VisionStatus.APPROVED
        assert vision.implementation_start == START_TICK + VOTING_PERIOD

        alice = await engine.get_stakeholder("alice")
        # 100 + 10 (create) + 20 (approved)
        assert alice.reputation == 130
        assert alice.participation_count == 2

    async def test_rejected_for_low_participation(self, engine, register, clock, voting_vision) -> None:
        others = [f"s{i}" for i in range(9)]
        await register(*others)
        for voter in others[:2]:
            await engine.cast_vote(voter, voting_vision, "for")
        clock.advance(VOTING_PERIOD)

        outcome = await engine.finalize_voting("s8", voting_vision)

        assert outcome.status == VisionStatus.REJECTED
        assert outcome.participation_rate == 2000
        assert outcome.rejection_reason == RejectionReason.INSUFFICIENT_PARTICIPATION

        vision = await engine.get_vision(voting_vision)
        assert vision.status == VisionStatus.REJECTED
        assert vision.implementation_start is None

        alice = await engine.get_stakeholder("alice")
        # 100 + 10 (create) - 5 (rejected)
        assert alice.reputation == 105

    async def test_rejected_for_low_approval(self, engine, register, clock, voting_vision) -> None:
        await register("bob", "carol")
        await engine.cast_vote("bob", voting_vision, "for")
        await engine.cast_vote("carol", voting_vision, "against")
        clock.advance(VOTING_PERIOD)

        outcome = await engine.finalize_voting("bob", voting_vision)

        assert outcome.status == VisionStatus.REJECTED
        assert outcome.approval_rate == 5000
        assert outcome.rejection_reason == RejectionReason.INSUFFICIENT_APPROVAL

    async def test_no_votes_is_rejected(self, engine, clock, voting_vision) -> None:
        clock.advance(VOTING_PERIOD)

        outcome = await engine.finalize_voting("alice", voting_vision)

        assert outcome.status == VisionStatus.REJECTED
        assert outcome.participation_rate == 0
        assert outcome.approval_rate == 0

    async def test_finalize_is_one_shot(self, engine, register, clock, voting_vision) -> None:
        await register("bob")
        await engine.cast_vote("bob", voting_vision, "for")
        clock.advance(VOTING_PERIOD)

        await engine.finalize_voting("bob", voting_vision)
        with pytest.raises(InvalidState):
            await engine.finalize_voting("bob", voting_vision)

        alice = await engine.get_stakeholder("alice")
        assert alice.participation_count == 2

    async def test_tallies_frozen_after_finalize(self, engine, register, clock, voting_vision) -> None:
        await register("bob", "carol")
        await engine.cast_vote("bob", voting_vision, "for")
        clock.advance(VOTING_PERIOD)
        await engine.finalize_voting("bob", voting_vision)

        with pytest.raises(VotingClosed):
            await engine.cast_vote("carol", voting_vision, "for")

        results = await engine.get_voting_results(voting_vision)
        assert results.votes_for == 110
        assert results.total_participants == 1
