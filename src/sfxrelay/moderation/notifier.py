from __future__ import annotations

import logging

from ..constants import UNKNOWN_NAME
from ..errors import NotificationFailed
from ..services.messenger import Messenger
from ..ui.embeds import direct_message_text
from .models import AuditRecord, Outcome, OutcomeKind, Submission

log = logging.getLogger("sfxrelay.notifier")


def build_audit_record(outcome: Outcome, submission: Submission) -> AuditRecord:
    if submission.has_known_name:
        sfx_name = submission.display_name
    elif outcome.kind is OutcomeKind.ACCEPTED and outcome.payload:
        sfx_name = outcome.payload
    else:
        sfx_name = UNKNOWN_NAME
    return AuditRecord(
        kind=outcome.kind,
        submitter_id=submission.submitter_id,
        sfx_name=sfx_name,
        asset_ref=submission.asset_ref,
        decider=outcome.decider,
        reason=outcome.payload if outcome.kind is OutcomeKind.DENIED else None,
    )


class OutcomeNotifier:
    """Records a finished decision. Every step is best-effort and logged."""

    def __init__(self, messenger: Messenger) -> None:
        self.messenger = messenger

    async def finalize(self, outcome: Outcome, submission: Submission) -> None:
        if outcome.kind is OutcomeKind.TIMED_OUT:
            log.debug("Nothing to finalize for timed out decision on %s", submission.id)
            return

        try:
            await self.messenger.mark_decided(submission, outcome)
        except Exception:
            log.exception("Failed to update submission post for %s", submission.id)

        try:
            await self.messenger.post_audit(build_audit_record(outcome, submission))
        except Exception:
            log.exception("Failed to post audit record for %s", submission.id)

        await self._notify_submitter(outcome, submission)

    async def _notify_submitter(self, outcome: Outcome, submission: Submission) -> None:
        if submission.submitter_id is None:
            log.warning("Submitter of %s is unknown; skipping direct message", submission.id)
            return
        try:
            await self.messenger.send_direct(submission.submitter_id, direct_message_text(outcome))
        except NotificationFailed:
            log.warning("Could not DM submitter %s about %s", submission.submitter_id, submission.id, exc_info=True)
        except Exception:
            log.exception("Unexpected error notifying submitter %s", submission.submitter_id)
