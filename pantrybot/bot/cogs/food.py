"""
FoodCog: /food option:<Category|Food|Random a food>.

Category and Food open the catalog management wizard for this server;
Random a food opens the random picker.
"""

from __future__ import annotations

import discord
from discord import app_commands
from discord.ext import commands

from pantrybot.bot.catalog import CatalogWizard, CategoryAdapter, FoodAdapter
from pantrybot.bot.random_picker import RandomFoodPicker
from pantrybot.config.logging import get_logger

logger = get_logger(__name__)


class FoodCog(commands.Cog):
    """Guild food catalog: category/food wizards and the random picker."""

    def __init__(self, bot) -> None:
        self.bot = bot

    @app_commands.command(name="food", description="Food command!")
    @app_commands.describe(option="Option to choose")
    @app_commands.choices(option=[
        app_commands.Choice(name="Category", value="category"),
        app_commands.Choice(name="Food", value="food"),
        app_commands.Choice(name="Random a food", value="random"),
    ])
    @app_commands.guild_only()
    async def food(self, interaction: discord.Interaction, option: app_commands.Choice[str]) -> None:
        guild_id = str(interaction.guild_id)
        logger.debug(f"/food {option.value} by {interaction.user.id} in guild {guild_id}")

        if option.value == "random":
            picker = await RandomFoodPicker.create(self.bot, interaction.user.id, guild_id)
            if not picker.categories:
                await interaction.response.send_message("❌ No foods found in any category!", ephemeral=True)
                return
            await picker.start(interaction, ephemeral=True)
            return

        adapter_cls = CategoryAdapter if option.value == "category" else FoodAdapter
        wizard = CatalogWizard(self.bot, adapter_cls(self.bot), interaction.user.id, guild_id)
        await wizard.start(interaction)
