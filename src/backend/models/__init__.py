"""Database models module."""

from models.ballot import BallotRow
from models.comment import CommentRow
from models.milestone import MilestoneRow
from models.sequence import SequenceRow
from models.stakeholder import StakeholderRow
from models.vision import VisionProgressRow, VisionRow

__all__ = [
    "BallotRow",
    "CommentRow",
    "MilestoneRow",
    "SequenceRow",
    "StakeholderRow",
    "VisionProgressRow",
    "VisionRow",
]
