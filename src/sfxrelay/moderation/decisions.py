from __future__ import annotations

import logging

from ..constants import ERROR_MESSAGES, PROMPTS, SUCCESS_MESSAGES, UNKNOWN_NAME
from ..errors import AlreadyDecided, DeliveryFailed, InputTimeout, PermissionDenied
from ..services.messenger import Messenger, Responder
from .models import (
    ControlPress,
    DecisionAction,
    Outcome,
    OutcomeKind,
    PendingDecision,
    Submission,
)
from .notifier import OutcomeNotifier
from .pending_inputs import PendingInput, PendingInputs
from .registry import SubmissionRegistry

log = logging.getLogger("sfxrelay.decisions")


class DecisionCollector:
    """Turns a review button press into an Outcome.

    Pressed -> authorized -> claimed -> prompted -> collected | timed out.
    Rejections are raised as ``RelayError`` subclasses for the caller to show
    to the presser. On timeout or platform failure after the claim, the claim
    is released and the buttons are put back so the decision can be retried.
    """

    def __init__(
        self,
        *,
        messenger: Messenger,
        registry: SubmissionRegistry,
        pending_inputs: PendingInputs,
        notifier: OutcomeNotifier,
        decider_role_id: int,
        timeout_seconds: float = 60.0,
    ) -> None:
        self.messenger = messenger
        self.registry = registry
        self.pending_inputs = pending_inputs
        self.notifier = notifier
        self.decider_role_id = decider_role_id
        self.timeout_seconds = timeout_seconds

    def authorize(self, press: ControlPress) -> None:
        if self.decider_role_id not in press.presser_role_ids:
            log.info("User %s lacks the decider role for %s", press.presser.id, press.submission_id)
            raise PermissionDenied()

    async def recover(self, press: ControlPress) -> Submission:
        submission = self.registry.get(press.submission_id)
        if submission is not None:
            return submission
        if self.registry.decided_status(press.submission_id) is not None:
            raise AlreadyDecided()

        post = await self.messenger.fetch_post(press.channel_id, press.message_id)
        if post is None:
            log.warning("Submission %s could not be recovered from its post", press.submission_id)
            submission = Submission.unknown(press.submission_id, press.channel_id, press.message_id)
        elif not post.has_controls:
            raise AlreadyDecided()
        else:
            submission = Submission(
                id=press.submission_id,
                submitter_id=post.submitter_id,
                display_name=post.display_name or UNKNOWN_NAME,
                asset_ref=post.asset_ref,
                channel_id=press.channel_id,
                message_id=press.message_id,
            )
        return self.registry.adopt(submission)

    async def handle_press(self, press: ControlPress, responder: Responder) -> Outcome:
        self.authorize(press)
        if not await self.messenger.audit_available():
            raise DeliveryFailed(ERROR_MESSAGES["moderation_channel_missing"])

        submission = await self.recover(press)
        slot = self.pending_inputs.expect(press.channel_id, press.presser.id)
        try:
            self.registry.claim(submission.id, press.presser.id)
            decision = PendingDecision(
                submission=submission,
                decider=press.presser,
                action=press.action,
                timeout_seconds=self.timeout_seconds,
            )
            try:
                payload = await self._collect(decision, slot, responder)
            except Exception:
                try:
                    await self.messenger.restore_controls(submission)
                finally:
                    self.registry.release(submission.id, press.presser.id)
                raise
        finally:
            self.pending_inputs.discard(slot)

        kind = OutcomeKind.ACCEPTED if press.action is DecisionAction.ACCEPT else OutcomeKind.DENIED
        outcome = Outcome(kind=kind, payload=payload, decider=press.presser)
        self.registry.complete(submission.id, outcome.status)
        log.info("Submission %s %s by %s", submission.id, kind.value, press.presser.id)

        await self.notifier.finalize(outcome, submission)
        await responder.try_reply(SUCCESS_MESSAGES[kind.value])
        return outcome

    async def _collect(self, decision: PendingDecision, slot: PendingInput, responder: Responder) -> str:
        if not await self.messenger.lock_post(decision.submission, decision.decider):
            log.warning("Could not mark submission %s as in progress", decision.submission.id)
        await responder.reply(PROMPTS[decision.action.value])
        try:
            return await self.pending_inputs.receive(slot, decision.timeout_seconds)
        except InputTimeout as e:
            key = "no_name" if decision.action is DecisionAction.ACCEPT else "no_reason"
            raise InputTimeout(ERROR_MESSAGES[key]) from e
