"""Errors raised by the submission workflow.

Every error carries the message shown to the human waiting on the step that
failed. Handlers at the edge of each interaction catch ``RelayError`` and reply
with ``user_message``; anything else is logged and answered with the generic
apology.
"""

from __future__ import annotations

from .constants import ERROR_MESSAGES


class RelayError(Exception):
    """Base class for workflow errors that have a user-facing message."""

    default_message = ERROR_MESSAGES["generic"]

    def __init__(self, user_message: str | None = None) -> None:
        self.user_message = user_message or self.default_message
        super().__init__(self.user_message)


class IntakeError(RelayError):
    pass


class InvalidFile(IntakeError):
    default_message = ERROR_MESSAGES["invalid_file"]


class DeliveryFailed(IntakeError):
    """A target channel is missing or could not be posted to."""

    default_message = ERROR_MESSAGES["target_channel_missing"]


class PermissionDenied(RelayError):
    default_message = ERROR_MESSAGES["missing_permissions"]


class AlreadyDecided(RelayError):
    default_message = ERROR_MESSAGES["already_decided"]


class DecisionInProgress(AlreadyDecided):
    default_message = ERROR_MESSAGES["decision_in_progress"]


class InputAlreadyPending(RelayError):
    default_message = ERROR_MESSAGES["input_pending"]


class InputTimeout(RelayError):
    default_message = ERROR_MESSAGES["no_name"]


class NotificationFailed(RelayError):
    """A best-effort direct message could not be delivered."""

    default_message = ERROR_MESSAGES["notification_failed"]


class TransientPlatformError(RelayError):
    """Discord returned an unexpected error while performing a step."""

    default_message = ERROR_MESSAGES["generic"]
