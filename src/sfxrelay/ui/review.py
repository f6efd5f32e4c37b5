"""Accept/Deny buttons attached to submission posts.

The buttons are dynamic items: their custom_id carries the submission id, so
any post keeps working after a restart without registering a view per message.
"""

from __future__ import annotations

import logging
import re

import discord

from ..constants import ERROR_MESSAGES, REVIEW_CUSTOM_ID_PREFIX
from ..errors import RelayError, TransientPlatformError
from ..moderation.models import ControlPress, DecisionAction, Decider
from ..services.discord_safety import safe_defer, safe_send

log = logging.getLogger("sfxrelay.ui.review")

_LABELS = {
    DecisionAction.ACCEPT: ("Accept", discord.ButtonStyle.success),
    DecisionAction.DENY: ("Deny", discord.ButtonStyle.danger),
}


def review_custom_id(action: DecisionAction, submission_id: str) -> str:
    return f"{REVIEW_CUSTOM_ID_PREFIX}:{action.value}:{submission_id}"


class InteractionResponder:
    """Ephemeral replies to the user behind an interaction."""

    def __init__(self, interaction: discord.Interaction) -> None:
        self.interaction = interaction

    async def reply(self, content: str) -> None:
        try:
            if not self.interaction.response.is_done():
                await self.interaction.response.send_message(content, ephemeral=True)
            else:
                await self.interaction.followup.send(content, ephemeral=True)
        except discord.HTTPException as e:
            raise TransientPlatformError() from e

    async def try_reply(self, content: str) -> bool:
        try:
            await self.reply(content)
            return True
        except TransientPlatformError:
            log.warning("Could not reply to interaction %s", self.interaction.id)
            return False


async def presser_role_ids(interaction: discord.Interaction) -> frozenset[int]:
    member = interaction.user
    if not isinstance(member, discord.Member):
        if interaction.guild is None:
            return frozenset()
        try:
            member = await interaction.guild.fetch_member(interaction.user.id)
        except discord.NotFound:
            return frozenset()
        except discord.HTTPException as e:
            raise TransientPlatformError() from e
    return frozenset(role.id for role in member.roles)


async def build_press(interaction: discord.Interaction, action: DecisionAction, submission_id: str) -> ControlPress:
    user = interaction.user
    return ControlPress(
        action=action,
        submission_id=submission_id,
        presser=Decider(id=user.id, name=user.display_name, avatar_url=user.display_avatar.url),
        presser_role_ids=await presser_role_ids(interaction),
        channel_id=interaction.channel_id or 0,
        message_id=interaction.message.id if interaction.message else 0,
    )


class ReviewButton(
    discord.ui.DynamicItem[discord.ui.Button],
    template=REVIEW_CUSTOM_ID_PREFIX + r":(?P<action>accept|deny):(?P<sid>[0-9a-f]+)",
):
    def __init__(self, action: DecisionAction, submission_id: str) -> None:
        label, style = _LABELS[action]
        super().__init__(
            discord.ui.Button(label=label, style=style, custom_id=review_custom_id(action, submission_id))
        )
        self.action = action
        self.submission_id = submission_id

    @classmethod
    async def from_custom_id(
        cls,
        interaction: discord.Interaction,
        item: discord.ui.Button,
        match: re.Match[str],
    ) -> "ReviewButton":
        return cls(DecisionAction(match["action"]), match["sid"])

    async def callback(self, interaction: discord.Interaction) -> None:
        await safe_defer(interaction, ephemeral=True)
        responder = InteractionResponder(interaction)
        collector = interaction.client.decisions  # type: ignore[attr-defined]
        try:
            press = await build_press(interaction, self.action, self.submission_id)
            await collector.handle_press(press, responder)
        except RelayError as e:
            log.info(
                "Review %s on %s by %s ended: %s",
                self.action.value,
                self.submission_id,
                interaction.user.id,
                type(e).__name__,
            )
            if isinstance(e, TransientPlatformError):
                log.exception("Platform error while handling review press")
            await responder.try_reply(e.user_message)
        except Exception:
            log.exception("Unexpected error handling review press on %s", self.submission_id)
            await safe_send(interaction, ERROR_MESSAGES["generic"], ephemeral=True)


def build_review_view(submission_id: str) -> discord.ui.View:
    view = discord.ui.View(timeout=None)
    view.add_item(ReviewButton(DecisionAction.ACCEPT, submission_id))
    view.add_item(ReviewButton(DecisionAction.DENY, submission_id))
    return view
