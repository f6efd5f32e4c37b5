from __future__ import annotations

import pytest

from sfxrelay.moderation.decisions import DecisionCollector
from sfxrelay.moderation.intake import SubmissionIntake
from sfxrelay.moderation.models import ControlPress, Decider, DecisionAction, Submission
from sfxrelay.moderation.notifier import OutcomeNotifier
from sfxrelay.moderation.pending_inputs import PendingInputs
from sfxrelay.moderation.registry import SubmissionRegistry
from sfxrelay.testing.fakes import FakeMessenger

DECIDER_ROLE_ID = 42
REVIEW_CHANNEL_ID = 5000
SUBMITTER_ID = 7


@pytest.fixture
def messenger() -> FakeMessenger:
    return FakeMessenger(channel_id=REVIEW_CHANNEL_ID)


@pytest.fixture
def registry() -> SubmissionRegistry:
    return SubmissionRegistry(ttl_seconds=3600)


@pytest.fixture
def pending_inputs() -> PendingInputs:
    return PendingInputs()


@pytest.fixture
def intake(messenger, registry) -> SubmissionIntake:
    return SubmissionIntake(messenger=messenger, registry=registry)


@pytest.fixture
def notifier(messenger) -> OutcomeNotifier:
    return OutcomeNotifier(messenger)


@pytest.fixture
def collector(messenger, registry, pending_inputs, notifier) -> DecisionCollector:
    return DecisionCollector(
        messenger=messenger,
        registry=registry,
        pending_inputs=pending_inputs,
        notifier=notifier,
        decider_role_id=DECIDER_ROLE_ID,
        timeout_seconds=0.2,
    )


@pytest.fixture
def make_press():
    def _make(
        submission: Submission,
        action: DecisionAction = DecisionAction.ACCEPT,
        *,
        user_id: int = 100,
        name: str = "Mod",
        roles: frozenset[int] = frozenset({DECIDER_ROLE_ID}),
    ) -> ControlPress:
        return ControlPress(
            action=action,
            submission_id=submission.id,
            presser=Decider(id=user_id, name=name, avatar_url="https://cdn.example.invalid/avatar.png"),
            presser_role_ids=roles,
            channel_id=submission.channel_id,
            message_id=submission.message_id,
        )

    return _make
