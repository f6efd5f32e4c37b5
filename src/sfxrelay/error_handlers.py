from __future__ import annotations

import logging

import discord
from discord import app_commands
from discord.ext import commands

from .constants import ERROR_MESSAGES
from .errors import RelayError
from .services.discord_safety import safe_send

log = logging.getLogger("sfxrelay.error_handlers")


async def on_app_command_error(interaction: discord.Interaction, error: app_commands.AppCommandError) -> None:
    """Last line of defence for slash commands: never show a traceback to the user."""
    original = getattr(error, "original", error)

    if isinstance(original, RelayError):
        await safe_send(interaction, original.user_message, ephemeral=True)
        return

    if isinstance(error, app_commands.CommandOnCooldown):
        await safe_send(interaction, f"This command is on cooldown. Try again in {error.retry_after:.1f}s", ephemeral=True)
        return

    if isinstance(error, app_commands.BotMissingPermissions):
        await safe_send(interaction, "The bot lacks required permissions to run this command.", ephemeral=True)
        return

    command = interaction.command.name if interaction.command else "unknown"
    log.error("Unexpected error in app command %s", command, exc_info=original)
    await safe_send(interaction, ERROR_MESSAGES["generic"], ephemeral=True)


def setup_error_handlers(bot: commands.Bot) -> None:
    bot.tree.error(on_app_command_error)
