"""
Stakeholder registry.

Tracks registered participants and applies the reputation/activity rule that
every caller-facing action triggers.
"""

import structlog

from core.config import Settings, settings
from core.exceptions import AlreadyRegistered, InvalidInput, NotRegistered
from repositories.provider import STAKEHOLDER_COUNTER, UnitOfWork
from schemas.governance import Stakeholder, StakeholderRole

logger = structlog.get_logger(__name__)


def parse_role(role: StakeholderRole | str) -> StakeholderRole:
    """Coerce a role tag, rejecting anything outside the known roles."""
    try:
        return StakeholderRole(role)
    except ValueError:
        raise InvalidInput(f"Unknown stakeholder role: {role!r}") from None


def apply_reputation_delta(reputation: int, delta: int, floor: int = 1) -> int:
    """
    Apply a signed delta to a reputation score.

    Gains are added as-is; losses are subtracted but never take the score
    below ``floor``.
    """
    if delta >= 0:
        return reputation + delta
    return max(floor, reputation + delta)


class StakeholderRegistry:
    """Service for stakeholder registration and activity bookkeeping."""

    def __init__(self, uow: UnitOfWork, config: Settings = settings):
        self.uow = uow
        self.config = config

    async def get(self, identity: str) -> Stakeholder | None:
        return await self.uow.stakeholders.get(identity)

    async def require(self, identity: str) -> Stakeholder:
        """Return the stakeholder or raise NotRegistered."""
        stakeholder = await self.uow.stakeholders.get(identity)
        if stakeholder is None:
            raise NotRegistered(f"{identity!r} is not a registered stakeholder")
        return stakeholder

    async def register(self, identity: str, role: StakeholderRole | str, now: int) -> Stakeholder:
        """
        Register a new stakeholder.

        Raises:
            InvalidInput: identity is empty or the role is unknown.
            AlreadyRegistered: the identity already has a stakeholder record.
        """
        if not identity:
            raise InvalidInput("Identity is required")
        parsed_role = parse_role(role)

        if await self.uow.stakeholders.exists(identity):
            raise AlreadyRegistered(f"{identity!r} is already registered")

        stakeholder = Stakeholder(
            identity=identity,
            registered_at=now,
            reputation=self.config.INITIAL_REPUTATION,
            participation_count=0,
            last_active=now,
            role=parsed_role,
        )
        await self.uow.stakeholders.add(stakeholder)
        total = await self.uow.sequences.increment(STAKEHOLDER_COUNTER)

        logger.info(
            "stakeholder_registered",
            identity=identity,
            role=parsed_role.value,
            total_stakeholders=total,
        )
        return stakeholder

    async def adjust_activity(self, identity: str, delta: int, now: int) -> Stakeholder:
        """
        Record an action by ``identity`` and move its reputation by ``delta``.

        Participation is counted for every call, including penalties.
        """
        stakeholder = await self.require(identity)

        stakeholder.reputation = apply_reputation_delta(
            stakeholder.reputation, delta, floor=self.config.MIN_REPUTATION
        )
        stakeholder.participation_count += 1
        stakeholder.last_active = now
        await self.uow.stakeholders.save(stakeholder)

        logger.debug(
            "stakeholder_activity",
            identity=identity,
            delta=delta,
            reputation=stakeholder.reputation,
            participation_count=stakeholder.participation_count,
        )
        return stakeholder

    async def total(self) -> int:
        return await self.uow.sequences.current(STAKEHOLDER_COUNTER)
