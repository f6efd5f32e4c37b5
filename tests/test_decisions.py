from __future__ import annotations

import asyncio

import pytest

from sfxrelay.constants import ERROR_MESSAGES, PROMPTS, SUCCESS_MESSAGES
from sfxrelay.errors import (
    AlreadyDecided,
    DecisionInProgress,
    DeliveryFailed,
    InputAlreadyPending,
    InputTimeout,
    PermissionDenied,
    TransientPlatformError,
)
from sfxrelay.moderation.models import DecisionAction, OutcomeKind, SubmissionStatus
from sfxrelay.moderation.registry import SubmissionRegistry
from sfxrelay.testing.fakes import FakeAttachment, FakeResponder
from sfxrelay.ui.embeds import audit_embed

from conftest import REVIEW_CHANNEL_ID, SUBMITTER_ID


async def _press_and_reply(collector, pending_inputs, press, text, responder=None):
    responder = responder or FakeResponder()
    task = asyncio.create_task(collector.handle_press(press, responder))
    await asyncio.wait_for(responder.prompted.wait(), timeout=1)
    assert pending_inputs.feed(REVIEW_CHANNEL_ID, press.presser.id, text)
    return await task, responder


async def test_accept_scenario_records_one_green_audit_and_dm(intake, collector, messenger, pending_inputs, registry, make_press):
    submission = await intake.submit(FakeAttachment(content_type="audio/mpeg", size=2 * 1024 * 1024), "Boing", SUBMITTER_ID)

    outcome, responder = await _press_and_reply(collector, pending_inputs, make_press(submission), "Boing")

    assert outcome.kind is OutcomeKind.ACCEPTED
    assert outcome.payload == "Boing"
    assert responder.replies == [PROMPTS["accept"], SUCCESS_MESSAGES["accepted"]]

    assert len(messenger.audits) == 1
    record = messenger.audits[0]
    assert record.sfx_name == "Boing"
    assert record.decider.id == 100
    assert audit_embed(record).color.value == 0x00FF00

    assert messenger.direct_messages == [
        (SUBMITTER_ID, "Your SFX request has been accepted! Thank you for your submission.")
    ]
    post = messenger.post_for(submission)
    assert not post.has_controls
    assert post.label == "accepted"
    assert registry.get(submission.id) is None
    assert registry.decided_status(submission.id) is SubmissionStatus.ACCEPTED
    assert len(pending_inputs) == 0


async def test_deny_records_reason(intake, collector, messenger, pending_inputs, make_press):
    submission = await intake.submit(FakeAttachment(), "Boing", SUBMITTER_ID)

    outcome, responder = await _press_and_reply(
        collector, pending_inputs, make_press(submission, DecisionAction.DENY), "Too loud"
    )

    assert outcome.kind is OutcomeKind.DENIED
    assert responder.replies[0] == PROMPTS["deny"]
    assert responder.replies[-1] == SUCCESS_MESSAGES["denied"]
    record = messenger.audits[0]
    assert record.reason == "Too loud"
    assert record.sfx_name == "Boing"
    assert messenger.direct_messages == [
        (SUBMITTER_ID, "Your SFX request has been denied for the following reason: Too loud")
    ]


async def test_unauthorized_press_changes_nothing(intake, collector, messenger, registry, pending_inputs, make_press):
    submission = await intake.submit(FakeAttachment(), "Boing", SUBMITTER_ID)

    with pytest.raises(PermissionDenied) as exc:
        await collector.handle_press(make_press(submission, roles=frozenset({1, 2})), FakeResponder())

    assert exc.value.user_message == ERROR_MESSAGES["missing_permissions"]
    post = messenger.post_for(submission)
    assert post.has_controls
    assert post.edits == []
    assert registry.get(submission.id).claimed_by is None
    assert len(pending_inputs) == 0


async def test_silence_times_out_and_restores_controls(intake, collector, messenger, registry, pending_inputs, make_press):
    submission = await intake.submit(FakeAttachment(), "Boing", SUBMITTER_ID)
    responder = FakeResponder()

    with pytest.raises(InputTimeout) as exc:
        await collector.handle_press(make_press(submission), responder)

    assert exc.value.user_message == ERROR_MESSAGES["no_name"]
    assert responder.replies == [PROMPTS["accept"]]
    assert messenger.audits == []
    assert messenger.direct_messages == []
    post = messenger.post_for(submission)
    assert post.has_controls
    assert [e["action"] for e in post.edits] == ["lock", "restore"]
    assert registry.get(submission.id).claimed_by is None
    assert len(pending_inputs) == 0


async def test_deny_timeout_asks_for_reason(intake, collector, make_press):
    submission = await intake.submit(FakeAttachment(), "Boing", SUBMITTER_ID)

    with pytest.raises(InputTimeout) as exc:
        await collector.handle_press(make_press(submission, DecisionAction.DENY), FakeResponder())

    assert exc.value.user_message == ERROR_MESSAGES["no_reason"]


async def test_retry_after_timeout_succeeds(intake, collector, messenger, pending_inputs, make_press):
    submission = await intake.submit(FakeAttachment(), "Boing", SUBMITTER_ID)
    with pytest.raises(InputTimeout):
        await collector.handle_press(make_press(submission), FakeResponder())

    outcome, _ = await _press_and_reply(collector, pending_inputs, make_press(submission), "Boing")

    assert outcome.kind is OutcomeKind.ACCEPTED
    assert len(messenger.audits) == 1


async def test_other_authors_do_not_consume_the_window(intake, collector, messenger, pending_inputs, make_press):
    submission = await intake.submit(FakeAttachment(), "Boing", SUBMITTER_ID)
    responder = FakeResponder()
    task = asyncio.create_task(collector.handle_press(make_press(submission), responder))
    await asyncio.wait_for(responder.prompted.wait(), timeout=1)

    assert not pending_inputs.feed(REVIEW_CHANNEL_ID, 555, "Wrong")
    assert not pending_inputs.feed(REVIEW_CHANNEL_ID + 1, 100, "Wrong channel")
    assert pending_inputs.feed(REVIEW_CHANNEL_ID, 100, "Right")

    outcome = await task
    assert outcome.payload == "Right"
    assert len(messenger.audits) == 1


async def test_concurrent_accept_and_deny_finalize_once(intake, collector, messenger, pending_inputs, make_press):
    submission = await intake.submit(FakeAttachment(), "Boing", SUBMITTER_ID)
    accept_responder = FakeResponder()
    deny_responder = FakeResponder()

    accept = asyncio.create_task(collector.handle_press(make_press(submission, user_id=100), accept_responder))
    deny = asyncio.create_task(
        collector.handle_press(make_press(submission, DecisionAction.DENY, user_id=200), deny_responder)
    )

    with pytest.raises(DecisionInProgress):
        await deny
    await asyncio.wait_for(accept_responder.prompted.wait(), timeout=1)
    assert pending_inputs.feed(REVIEW_CHANNEL_ID, 100, "Boing")
    await accept

    assert len(messenger.audits) == 1
    assert messenger.audits[0].kind is OutcomeKind.ACCEPTED
    assert len(messenger.direct_messages) == 1
    assert deny_responder.replies == []


async def test_press_after_decision_is_already_decided(intake, collector, pending_inputs, messenger, make_press):
    submission = await intake.submit(FakeAttachment(), "Boing", SUBMITTER_ID)
    await _press_and_reply(collector, pending_inputs, make_press(submission), "Boing")

    with pytest.raises(AlreadyDecided):
        await collector.handle_press(make_press(submission, DecisionAction.DENY, user_id=200), FakeResponder())
    assert len(messenger.audits) == 1


async def test_same_moderator_cannot_open_two_prompts_in_one_channel(intake, collector, registry, pending_inputs, make_press):
    first = await intake.submit(FakeAttachment(), "One", SUBMITTER_ID)
    second = await intake.submit(FakeAttachment(), "Two", SUBMITTER_ID)
    responder = FakeResponder()
    task = asyncio.create_task(collector.handle_press(make_press(first), responder))
    await asyncio.wait_for(responder.prompted.wait(), timeout=1)

    with pytest.raises(InputAlreadyPending):
        await collector.handle_press(make_press(second), FakeResponder())
    assert registry.get(second.id).claimed_by is None

    assert pending_inputs.feed(REVIEW_CHANNEL_ID, 100, "One")
    await task


async def test_missing_audit_channel_rejects_before_claiming(intake, collector, messenger, registry, make_press):
    submission = await intake.submit(FakeAttachment(), "Boing", SUBMITTER_ID)
    messenger.audit_channel_available = False

    with pytest.raises(DeliveryFailed) as exc:
        await collector.handle_press(make_press(submission), FakeResponder())

    assert exc.value.user_message == ERROR_MESSAGES["moderation_channel_missing"]
    assert registry.get(submission.id).claimed_by is None
    assert messenger.post_for(submission).edits == []


async def test_platform_failure_releases_claim(intake, collector, messenger, registry, pending_inputs, make_press):
    submission = await intake.submit(FakeAttachment(), "Boing", SUBMITTER_ID)
    messenger.fail_lock = True

    with pytest.raises(TransientPlatformError):
        await collector.handle_press(make_press(submission), FakeResponder())

    assert registry.get(submission.id).claimed_by is None
    assert messenger.post_for(submission).has_controls
    assert len(pending_inputs) == 0


async def test_failed_prompt_releases_claim(intake, collector, messenger, registry, make_press):
    submission = await intake.submit(FakeAttachment(), "Boing", SUBMITTER_ID)

    with pytest.raises(TransientPlatformError):
        await collector.handle_press(make_press(submission), FakeResponder(fail=True))

    assert registry.get(submission.id).claimed_by is None
    assert messenger.post_for(submission).has_controls


async def test_recovers_submission_from_post_after_restart(intake, messenger, pending_inputs, notifier, make_press):
    from sfxrelay.moderation.decisions import DecisionCollector

    submission = await intake.submit(FakeAttachment(), "Boing", SUBMITTER_ID)
    fresh = DecisionCollector(
        messenger=messenger,
        registry=SubmissionRegistry(ttl_seconds=3600),
        pending_inputs=pending_inputs,
        notifier=notifier,
        decider_role_id=42,
        timeout_seconds=0.2,
    )

    outcome, _ = await _press_and_reply(fresh, pending_inputs, make_press(submission, DecisionAction.DENY), "Nope")

    assert outcome.kind is OutcomeKind.DENIED
    record = messenger.audits[0]
    assert record.sfx_name == "Boing"
    assert record.submitter_id == SUBMITTER_ID
    assert record.asset_ref == "https://cdn.example.invalid/posted/recovered"


async def test_unreadable_post_degrades_to_unknown(intake, messenger, pending_inputs, notifier, make_press):
    from sfxrelay.moderation.decisions import DecisionCollector

    submission = await intake.submit(FakeAttachment(), "Boing", SUBMITTER_ID)
    messenger.unreadable_posts = True
    fresh = DecisionCollector(
        messenger=messenger,
        registry=SubmissionRegistry(ttl_seconds=3600),
        pending_inputs=pending_inputs,
        notifier=notifier,
        decider_role_id=42,
        timeout_seconds=0.2,
    )

    outcome, _ = await _press_and_reply(fresh, pending_inputs, make_press(submission), "Boing v2")

    assert outcome.kind is OutcomeKind.ACCEPTED
    record = messenger.audits[0]
    assert record.sfx_name == "Boing v2"
    assert record.asset_ref is None
    assert record.submitter_id is None
    # Nobody to notify
    assert messenger.direct_messages == []


async def test_recovered_post_without_controls_is_already_decided(intake, messenger, pending_inputs, notifier, make_press):
    from sfxrelay.moderation.decisions import DecisionCollector

    submission = await intake.submit(FakeAttachment(), "Boing", SUBMITTER_ID)
    messenger.post_for(submission).has_controls = False
    fresh = DecisionCollector(
        messenger=messenger,
        registry=SubmissionRegistry(ttl_seconds=3600),
        pending_inputs=pending_inputs,
        notifier=notifier,
        decider_role_id=42,
    )

    with pytest.raises(AlreadyDecided):
        await fresh.handle_press(make_press(submission), FakeResponder())
    assert messenger.audits == []


async def test_claim_is_held_until_controls_are_restored(intake, collector, messenger, registry, make_press):
    submission = await intake.submit(FakeAttachment(), "Boing", SUBMITTER_ID)
    holders = []
    restore = messenger.restore_controls

    async def recording_restore(sub):
        holders.append(registry.get(sub.id).claimed_by)
        return await restore(sub)

    messenger.restore_controls = recording_restore

    with pytest.raises(InputTimeout):
        await collector.handle_press(make_press(submission), FakeResponder())

    assert holders == [100]
    assert registry.get(submission.id).claimed_by is None
