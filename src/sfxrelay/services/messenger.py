"""Messaging capability handed to the workflow components.

The workflow never touches the discord client directly; it sends, edits and
fetches through a ``Messenger`` so that it can be driven by fakes in tests.
Discord errors are translated into ``sfxrelay.errors`` here.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import discord

from ..errors import DeliveryFailed, NotificationFailed, TransientPlatformError
from ..constants import ERROR_MESSAGES
from ..moderation.models import (
    AuditRecord,
    Decider,
    Outcome,
    PostedMessage,
    RecoveredPost,
    Submission,
)
from ..ui import embeds
from ..ui.review import build_review_view

log = logging.getLogger("sfxrelay.messenger")


class Messenger(Protocol):
    async def post_submission(self, submission: Submission, attachment: Any) -> PostedMessage: ...

    async def audit_available(self) -> bool: ...

    async def fetch_post(self, channel_id: int, message_id: int) -> Optional[RecoveredPost]: ...

    async def lock_post(self, submission: Submission, decider: Decider) -> bool: ...

    async def restore_controls(self, submission: Submission) -> bool: ...

    async def mark_decided(self, submission: Submission, outcome: Outcome) -> None: ...

    async def post_audit(self, record: AuditRecord) -> None: ...

    async def send_direct(self, user_id: int, content: str) -> None: ...


class Responder(Protocol):
    """Private reply channel to the human who triggered the current step."""

    async def reply(self, content: str) -> None: ...

    async def try_reply(self, content: str) -> bool: ...


_NO_MENTIONS = discord.AllowedMentions.none()


class DiscordMessenger:
    def __init__(self, client: discord.Client, *, submission_channel_id: int, moderation_channel_id: int) -> None:
        self.client = client
        self.submission_channel_id = submission_channel_id
        self.moderation_channel_id = moderation_channel_id

    async def _channel(self, channel_id: int) -> Optional[discord.abc.Messageable]:
        channel = self.client.get_channel(channel_id)
        if channel is None:
            try:
                channel = await self.client.fetch_channel(channel_id)
            except (discord.NotFound, discord.Forbidden):
                return None
            except discord.HTTPException as e:
                raise TransientPlatformError() from e
        if not isinstance(channel, discord.abc.Messageable):
            return None
        return channel

    def _partial_message(self, submission: Submission) -> Optional[discord.PartialMessage]:
        if not submission.channel_id or not submission.message_id:
            return None
        channel = self.client.get_partial_messageable(submission.channel_id)
        return channel.get_partial_message(submission.message_id)

    async def post_submission(self, submission: Submission, attachment: discord.Attachment) -> PostedMessage:
        channel = await self._channel(self.submission_channel_id)
        if channel is None:
            log.error("Submission channel %s not found", self.submission_channel_id)
            raise DeliveryFailed()
        try:
            file = await attachment.to_file()
            message = await channel.send(
                content=embeds.submission_post_content(submission.submitter_id, submission.display_name),
                file=file,
                view=build_review_view(submission.id),
                allowed_mentions=_NO_MENTIONS,
            )
        except discord.Forbidden as e:
            log.error("Missing permissions to post in submission channel %s", self.submission_channel_id)
            raise DeliveryFailed() from e
        except discord.HTTPException as e:
            raise TransientPlatformError() from e
        asset_ref = message.attachments[0].url if message.attachments else None
        return PostedMessage(channel_id=message.channel.id, message_id=message.id, asset_ref=asset_ref)

    async def audit_available(self) -> bool:
        return await self._channel(self.moderation_channel_id) is not None

    async def fetch_post(self, channel_id: int, message_id: int) -> Optional[RecoveredPost]:
        try:
            channel = await self._channel(channel_id)
            if channel is None:
                return None
            message = await channel.fetch_message(message_id)
        except (discord.HTTPException, TransientPlatformError):
            log.warning("Could not re-read submission post %s/%s", channel_id, message_id, exc_info=True)
            return None
        submitter_id, display_name = embeds.parse_submission_post(message.content)
        return RecoveredPost(
            submitter_id=submitter_id,
            display_name=display_name,
            asset_ref=message.attachments[0].url if message.attachments else None,
            has_controls=bool(message.components),
        )

    async def _edit(self, submission: Submission, **kwargs: Any) -> bool:
        message = self._partial_message(submission)
        if message is None:
            return False
        try:
            await message.edit(allowed_mentions=_NO_MENTIONS, **kwargs)
            return True
        except discord.NotFound:
            log.warning("Submission post %s no longer exists", submission.message_id)
            return False
        except discord.HTTPException as e:
            raise TransientPlatformError() from e

    async def lock_post(self, submission: Submission, decider: Decider) -> bool:
        if submission.submitter_id is None:
            return await self._edit(submission, view=None)
        return await self._edit(submission, content=embeds.in_progress_content(submission, decider), view=None)

    async def restore_controls(self, submission: Submission) -> bool:
        try:
            if submission.submitter_id is None:
                return await self._edit(submission, view=build_review_view(submission.id))
            return await self._edit(
                submission,
                content=embeds.submission_post_content(submission.submitter_id, submission.display_name),
                view=build_review_view(submission.id),
            )
        except TransientPlatformError:
            log.exception("Failed to restore review buttons on submission %s", submission.id)
            return False

    async def mark_decided(self, submission: Submission, outcome: Outcome) -> None:
        await self._edit(submission, content=embeds.decided_content(outcome), view=None)

    async def post_audit(self, record: AuditRecord) -> None:
        channel = await self._channel(self.moderation_channel_id)
        if channel is None:
            raise DeliveryFailed(ERROR_MESSAGES["moderation_channel_missing"])
        try:
            await channel.send(content=embeds.audit_content(record), embed=embeds.audit_embed(record))
        except discord.HTTPException as e:
            raise TransientPlatformError() from e

    async def send_direct(self, user_id: int, content: str) -> None:
        try:
            user = self.client.get_user(user_id) or await self.client.fetch_user(user_id)
            await user.send(content)
        except discord.HTTPException as e:
            raise NotificationFailed() from e
