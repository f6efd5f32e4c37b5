from __future__ import annotations

import logging

import discord


log = logging.getLogger("sfxrelay.discord_safety")


async def safe_defer(interaction: discord.Interaction, *, ephemeral: bool = True, thinking: bool = True) -> bool:
    try:
        if interaction.response.is_done():
            return True
        await interaction.response.defer(ephemeral=ephemeral, thinking=thinking)
        return True
    except discord.HTTPException:
        log.warning("Could not defer interaction %s", interaction.id)
        return interaction.response.is_done()


async def safe_send(
    interaction: discord.Interaction,
    content: str | None = None,
    *,
    embed: discord.Embed | None = None,
    ephemeral: bool = True,
) -> bool:
    """Reply to an interaction whether or not it was already answered."""
    try:
        if not interaction.response.is_done():
            await interaction.response.send_message(content=content, embed=embed, ephemeral=ephemeral)
            return True
        await interaction.followup.send(content=content, embed=embed, ephemeral=ephemeral)
        return True
    except discord.HTTPException:
        log.warning("Could not send reply to interaction %s", interaction.id)
        return False


async def safe_edit_original(interaction: discord.Interaction, content: str) -> bool:
    try:
        await interaction.edit_original_response(content=content)
        return True
    except discord.HTTPException:
        log.warning("Could not edit original response of interaction %s", interaction.id)
        return False
