"""
PingCog: /ping and /length.
"""

from __future__ import annotations

import discord
from discord import app_commands
from discord.ext import commands

from pantrybot.config.logging import get_logger

logger = get_logger(__name__)


class PingCog(commands.Cog):
    """Liveness check and a tiny text utility."""

    def __init__(self, bot) -> None:
        self.bot = bot

    @app_commands.command(name="ping", description="Ping pong command!")
    async def ping(self, interaction: discord.Interaction) -> None:
        await interaction.response.send_message("Pong!")

    @app_commands.command(name="length", description="Get length of text")
    @app_commands.describe(text="Text to measure")
    async def length(self, interaction: discord.Interaction, text: str) -> None:
        """/length text:<string>: replies with the number of characters."""
        await interaction.response.send_message(f"Length of your text {len(text)}")
