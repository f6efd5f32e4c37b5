from __future__ import annotations

import logging
import secrets
import time
from collections import OrderedDict
from typing import Callable, Optional

from ..constants import DECIDED_MEMORY_SIZE
from ..errors import AlreadyDecided, DecisionInProgress
from .models import Submission, SubmissionStatus

log = logging.getLogger("sfxrelay.registry")


def new_submission_id() -> str:
    return secrets.token_hex(8)


class SubmissionRegistry:
    """In-memory submissions keyed by the id carried in their review buttons.

    Claims are check-and-set with no await in between, so on the single event
    loop the first claim on a submission is the only one that succeeds.
    """

    def __init__(
        self,
        ttl_seconds: float,
        *,
        decided_memory: int = DECIDED_MEMORY_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = max(1.0, float(ttl_seconds))
        self._clock = clock
        self._pending: dict[str, Submission] = {}
        self._decided: OrderedDict[str, SubmissionStatus] = OrderedDict()
        self._decided_memory = max(1, int(decided_memory))

    def __len__(self) -> int:
        return len(self._pending)

    def add(self, submission: Submission) -> Submission:
        self.prune()
        submission.created_at = self._clock()
        self._pending[submission.id] = submission
        return submission

    def get(self, submission_id: str) -> Optional[Submission]:
        return self._pending.get(submission_id)

    def decided_status(self, submission_id: str) -> Optional[SubmissionStatus]:
        return self._decided.get(submission_id)

    def adopt(self, submission: Submission) -> Submission:
        """Register a submission recovered from its post unless one is already tracked."""
        existing = self._pending.get(submission.id)
        if existing is not None:
            return existing
        return self.add(submission)

    def claim(self, submission_id: str, decider_id: int) -> Submission:
        if submission_id in self._decided:
            raise AlreadyDecided()
        submission = self._pending.get(submission_id)
        if submission is None or submission.status.is_terminal:
            raise AlreadyDecided()
        if submission.claimed_by is not None:
            raise DecisionInProgress()
        submission.claimed_by = decider_id
        log.info("Submission %s claimed by %s", submission_id, decider_id)
        return submission

    def release(self, submission_id: str, decider_id: int) -> None:
        submission = self._pending.get(submission_id)
        if submission is None or submission.claimed_by != decider_id:
            return
        submission.claimed_by = None
        log.info("Submission %s released by %s", submission_id, decider_id)

    def complete(self, submission_id: str, status: SubmissionStatus) -> Submission:
        if not status.is_terminal:
            raise ValueError(f"{status!r} is not a terminal status")
        submission = self._pending.pop(submission_id, None)
        if submission is None:
            raise AlreadyDecided()
        submission.status = status
        submission.claimed_by = None
        self._remember(submission_id, status)
        return submission

    def prune(self) -> list[Submission]:
        """Expire unclaimed submissions older than the TTL."""
        cutoff = self._clock() - self._ttl
        stale = [
            s for s in self._pending.values()
            if s.claimed_by is None and s.created_at < cutoff
        ]
        for submission in stale:
            self._pending.pop(submission.id, None)
            submission.status = SubmissionStatus.EXPIRED
        if stale:
            log.info("Expired %d pending submission(s)", len(stale))
        return stale

    def _remember(self, submission_id: str, status: SubmissionStatus) -> None:
        self._decided[submission_id] = status
        self._decided.move_to_end(submission_id)
        while len(self._decided) > self._decided_memory:
            self._decided.popitem(last=False)
