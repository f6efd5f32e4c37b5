from __future__ import annotations

import discord
from discord import app_commands
from discord.ext import commands

from ..services.discord_safety import safe_defer, safe_edit_original


def format_latency(round_trip_ms: int, api_ms: int) -> str:
    return f"Pong! Latency is {round_trip_ms}ms. API Latency is {api_ms}ms."


class UtilitiesCog(commands.Cog):
    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot

    @app_commands.command(name="ping", description="Replies with Pong and shows latency!")
    async def ping(self, interaction: discord.Interaction) -> None:
        await safe_defer(interaction, ephemeral=False)
        await safe_edit_original(interaction, "Pong!")
        sent = await interaction.original_response()
        round_trip = int((sent.created_at - interaction.created_at).total_seconds() * 1000)
        await safe_edit_original(interaction, format_latency(round_trip, round(self.bot.latency * 1000)))
