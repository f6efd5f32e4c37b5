from __future__ import annotations

import logging

import discord
from discord import app_commands
from discord.ext import commands

from ..constants import ERROR_MESSAGES, SUCCESS_MESSAGES
from ..errors import RelayError, TransientPlatformError
from ..services.discord_safety import safe_defer, safe_send

log = logging.getLogger("sfxrelay.cogs.submissions")


class SubmissionsCog(commands.Cog):
    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot

    @app_commands.command(name="sfx", description="Upload a sound effect file")
    @app_commands.describe(
        file="The sound effect file (must be .ogg or .mp3 under 4MB)",
        name="The name of the sound effect",
    )
    async def sfx(self, interaction: discord.Interaction, file: discord.Attachment, name: str) -> None:
        await safe_defer(interaction, ephemeral=True)
        try:
            await self.bot.intake.submit(file, name, interaction.user.id)  # type: ignore[attr-defined]
        except RelayError as e:
            if isinstance(e, TransientPlatformError):
                log.exception("Platform error while posting submission from %s", interaction.user.id)
            else:
                log.info("Submission from %s rejected: %s", interaction.user.id, type(e).__name__)
            await safe_send(interaction, e.user_message, ephemeral=True)
            return
        except Exception:
            log.exception("Unexpected error handling /sfx from %s", interaction.user.id)
            await safe_send(interaction, ERROR_MESSAGES["generic"], ephemeral=True)
            return
        await safe_send(interaction, SUCCESS_MESSAGES["submitted"], ephemeral=True)
