"""
Governance error kinds.

Every public engine operation either returns a value or raises one of these.
The HTTP layer maps them onto status codes; library callers can catch the
broad kinds (NotAuthorized, InvalidInput, NotFound, ...) or the specific ones.
"""


class GovernanceError(Exception):
    """Base class for all governance failures."""

    code = "governance_error"

    def __init__(self, message: str | None = None):
        self.message = message or self.code.replace("_", " ")
        super().__init__(self.message)


class NotAuthorized(GovernanceError):
    code = "not_authorized"


class NotRegistered(NotAuthorized):
    """Caller has no stakeholder record."""

    code = "not_registered"


class AlreadyRegistered(NotAuthorized):
    code = "already_registered"


class InvalidInput(GovernanceError):
    code = "invalid_input"


class InvalidVision(InvalidInput):
    code = "invalid_vision"


class InvalidMilestone(InvalidInput):
    code = "invalid_milestone"


class InvalidStatus(InvalidInput):
    code = "invalid_status"


class NotFound(GovernanceError):
    code = "not_found"


class VisionNotFound(NotFound):
    code = "vision_not_found"


class MilestoneNotFound(NotFound):
    code = "milestone_not_found"


class AlreadyVoted(GovernanceError):
    code = "already_voted"


class DuplicateMilestone(GovernanceError):
    code = "duplicate_milestone"


class VotingClosed(GovernanceError):
    """Voting window is not open for the requested action."""

    code = "voting_closed"


class VotingNotEnded(VotingClosed):
    """Finalization attempted before the voting window has ended."""

    code = "voting_not_ended"


class InvalidState(GovernanceError):
    """Requested transition is not allowed from the current lifecycle state."""

    code = "invalid_state"
