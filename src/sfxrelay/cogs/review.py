from __future__ import annotations

import logging

import discord
from discord.ext import commands

log = logging.getLogger("sfxrelay.cogs.review")


class ReviewRepliesCog(commands.Cog):
    """Hands moderators' follow-up messages to whichever prompt is waiting for them."""

    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        if message.author.bot:
            return
        consumed = self.bot.pending_inputs.feed(  # type: ignore[attr-defined]
            message.channel.id, message.author.id, message.content
        )
        if consumed:
            log.debug("Reply from %s in %s collected", message.author.id, message.channel.id)
