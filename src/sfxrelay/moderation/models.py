from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..constants import UNKNOWN_NAME


class SubmissionStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DENIED = "denied"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        return self is not SubmissionStatus.PENDING


class DecisionAction(str, Enum):
    """Which review button was pressed."""

    ACCEPT = "accept"
    DENY = "deny"


class OutcomeKind(str, Enum):
    ACCEPTED = "accepted"
    DENIED = "denied"
    TIMED_OUT = "timed_out"


@dataclass
class Submission:
    """A sound effect waiting for (or past) moderation."""

    id: str
    submitter_id: Optional[int]
    display_name: str
    asset_ref: Optional[str]
    channel_id: int = 0
    message_id: int = 0
    status: SubmissionStatus = SubmissionStatus.PENDING
    created_at: float = field(default_factory=time.monotonic)
    # Decider currently holding the decision, if any
    claimed_by: Optional[int] = None

    @classmethod
    def unknown(cls, submission_id: str, channel_id: int = 0, message_id: int = 0) -> "Submission":
        return cls(
            id=submission_id,
            submitter_id=None,
            display_name=UNKNOWN_NAME,
            asset_ref=None,
            channel_id=channel_id,
            message_id=message_id,
        )

    @property
    def has_known_name(self) -> bool:
        return bool(self.display_name) and self.display_name != UNKNOWN_NAME


@dataclass(frozen=True)
class Decider:
    id: int
    name: str
    avatar_url: Optional[str] = None


@dataclass(frozen=True)
class ControlPress:
    """A press of one of the review buttons, normalized from the interaction."""

    action: DecisionAction
    submission_id: str
    presser: Decider
    presser_role_ids: frozenset[int]
    channel_id: int
    message_id: int


@dataclass(frozen=True)
class PendingDecision:
    submission: Submission
    decider: Decider
    action: DecisionAction
    timeout_seconds: float


@dataclass(frozen=True)
class Outcome:
    kind: OutcomeKind
    payload: Optional[str]
    decider: Decider

    @property
    def status(self) -> SubmissionStatus:
        if self.kind is OutcomeKind.ACCEPTED:
            return SubmissionStatus.ACCEPTED
        if self.kind is OutcomeKind.DENIED:
            return SubmissionStatus.DENIED
        return SubmissionStatus.PENDING


@dataclass(frozen=True)
class PostedMessage:
    channel_id: int
    message_id: int
    asset_ref: Optional[str]


@dataclass(frozen=True)
class RecoveredPost:
    """What could be read back from a moderation post."""

    submitter_id: Optional[int]
    display_name: Optional[str]
    asset_ref: Optional[str]
    has_controls: bool


@dataclass(frozen=True)
class AuditRecord:
    kind: OutcomeKind
    submitter_id: Optional[int]
    sfx_name: str
    asset_ref: Optional[str]
    decider: Decider
    reason: Optional[str] = None
