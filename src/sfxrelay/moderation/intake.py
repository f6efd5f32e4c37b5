from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from ..constants import ALLOWED_CONTENT_TYPES, ERROR_MESSAGES, MAX_DISPLAY_NAME, MAX_UPLOAD_BYTES
from ..errors import InvalidFile
from ..services.messenger import Messenger
from .models import Submission
from .registry import SubmissionRegistry, new_submission_id

log = logging.getLogger("sfxrelay.intake")


class UploadedFile(Protocol):
    """The parts of ``discord.Attachment`` the intake relies on."""

    filename: str
    url: str
    size: int
    content_type: Optional[str]

    async def to_file(self) -> Any: ...


def normalize_content_type(content_type: Optional[str]) -> str:
    return (content_type or "").split(";", 1)[0].strip().lower()


def validate_upload(attachment: UploadedFile) -> None:
    content_type = normalize_content_type(attachment.content_type)
    if content_type not in ALLOWED_CONTENT_TYPES or attachment.size > MAX_UPLOAD_BYTES:
        raise InvalidFile()


def normalize_display_name(name: Optional[str]) -> str:
    cleaned = " ".join((name or "").split())
    if not cleaned:
        raise InvalidFile(ERROR_MESSAGES["invalid_name"])
    return cleaned[:MAX_DISPLAY_NAME]


class SubmissionIntake:
    def __init__(self, *, messenger: Messenger, registry: SubmissionRegistry) -> None:
        self.messenger = messenger
        self.registry = registry

    async def submit(self, attachment: UploadedFile, display_name: str, submitter_id: int) -> Submission:
        """Validate an upload and post it for review.

        Raises ``InvalidFile`` before anything is sent, ``DeliveryFailed`` when
        the submission channel is unavailable. The submission is only
        registered once its post exists.
        """
        validate_upload(attachment)
        name = normalize_display_name(display_name)

        submission = Submission(
            id=new_submission_id(),
            submitter_id=submitter_id,
            display_name=name,
            asset_ref=attachment.url,
        )
        posted = await self.messenger.post_submission(submission, attachment)
        submission.channel_id = posted.channel_id
        submission.message_id = posted.message_id
        submission.asset_ref = posted.asset_ref or attachment.url
        self.registry.add(submission)

        log.info(
            "Submission %s (%r, %s bytes) from %s posted as message %s",
            submission.id,
            name,
            attachment.size,
            submitter_id,
            posted.message_id,
        )
        return submission
