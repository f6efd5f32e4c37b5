from __future__ import annotations

from sfxrelay.constants import UNKNOWN_NAME
from sfxrelay.moderation.models import Decider, Outcome, OutcomeKind, Submission
from sfxrelay.moderation.notifier import build_audit_record
from sfxrelay.testing.fakes import FakeAttachment

from conftest import SUBMITTER_ID

MOD = Decider(id=100, name="Mod")


async def test_closed_dms_do_not_undo_audit(intake, notifier, messenger):
    submission = await intake.submit(FakeAttachment(), "Boing", SUBMITTER_ID)
    messenger.dms_closed.add(SUBMITTER_ID)

    await notifier.finalize(Outcome(OutcomeKind.DENIED, "Too loud", MOD), submission)

    assert len(messenger.audits) == 1
    assert messenger.direct_messages == []
    assert messenger.post_for(submission).label == "denied"


async def test_audit_failure_still_notifies_submitter(intake, notifier, messenger):
    submission = await intake.submit(FakeAttachment(), "Boing", SUBMITTER_ID)
    messenger.fail_audit = True

    await notifier.finalize(Outcome(OutcomeKind.ACCEPTED, "Boing", MOD), submission)

    assert messenger.audits == []
    assert len(messenger.direct_messages) == 1


async def test_timed_out_outcome_is_a_no_op(intake, notifier, messenger):
    submission = await intake.submit(FakeAttachment(), "Boing", SUBMITTER_ID)

    await notifier.finalize(Outcome(OutcomeKind.TIMED_OUT, None, MOD), submission)

    assert messenger.audits == []
    assert messenger.direct_messages == []
    assert messenger.post_for(submission).has_controls


def test_audit_record_prefers_submitted_name():
    submission = Submission(id="a1", submitter_id=7, display_name="Boing", asset_ref="https://x.invalid/a.mp3")
    record = build_audit_record(Outcome(OutcomeKind.ACCEPTED, "Renamed", MOD), submission)
    assert record.sfx_name == "Boing"
    assert record.reason is None


def test_denied_unknown_submission_keeps_unknown_name():
    record = build_audit_record(Outcome(OutcomeKind.DENIED, "Bad audio", MOD), Submission.unknown("a1"))
    assert record.sfx_name == UNKNOWN_NAME
    assert record.reason == "Bad audio"
