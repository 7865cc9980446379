"""
Random food picker (``/food option:Random a food``).

The user narrows the pool to some categories (or "All Categories"), gets a
food announced publicly, and can then draw again with the same filter,
change the filter, or close the picker. The filter lives in the wizard
state, never in component ids.
"""

from __future__ import annotations

from typing import Any

import discord

from pantrybot.bot.catalog import image_file, with_image
from pantrybot.bot.wizard import (
    SELECT_OPTION_LIMIT,
    WizardStatus,
    WizardView,
    best_effort,
    make_button,
    make_select,
    paginate,
    respond,
    truncate,
)
from pantrybot.config.logging import get_logger
from pantrybot.db.models import Food, FoodCategory
from pantrybot.errors import NotFoundError

logger = get_logger(__name__)

ALL_CATEGORIES = "all"
# With this many categories to choose from the select allows several at once
MULTI_SELECT_THRESHOLD = 5
# One select slot is taken by "All Categories"
CATEGORIES_PER_PAGE = SELECT_OPTION_LIMIT - 1


def random_food_embed(food: Food) -> discord.Embed:
    embed = discord.Embed(title=f"🎲 Random Food: {food.name}", color=discord.Color.blue())
    embed.add_field(name="Category", value=food.category.name if food.category else "None", inline=True)
    if food.description:
        embed.add_field(name="Description", value=food.description, inline=False)
    return embed


class RandomFoodPicker(WizardView):
    """
    Category filter + draw loop for picking a random food.

    Args:
        bot: The running ``PantryBot``
        owner_id: Invoking user
        guild_id: Guild whose foods are drawn from
        categories: Categories that currently hold at least one food
    """

    def __init__(self, bot, owner_id: int, guild_id: str, categories: list[FoodCategory], rng=None):
        super().__init__(
            owner_id=owner_id,
            sessions=bot.wizards,
            timeout=bot.settings.wizard.step_timeout,
            guild_id=guild_id,
        )
        self.bot = bot
        self.foods = bot.catalog.foods
        self.uploads = bot.uploads
        self.categories = categories
        self.rng = rng
        self.state.step = "select"

    @classmethod
    async def create(cls, bot, owner_id: int, guild_id: str, rng=None) -> "RandomFoodPicker":
        categories = await bot.catalog.categories.list(guild_id)
        active = [c for c in categories if c.foods]
        return cls(bot, owner_id, guild_id, active, rng=rng)

    def render(self) -> dict[str, Any]:
        self.clear_items()
        if self.state.step == "controls":
            self.add_item(make_button(
                "Get Another", self._on_again, emoji="🎲", style=discord.ButtonStyle.primary
            ))
            self.add_item(make_button("Change Categories", self._on_change, emoji="📁"))
            self.add_item(make_button("Close", self._on_close, emoji="✖️", style=discord.ButtonStyle.danger))
            return {"content": "Use these controls to get another random food or change categories:"}

        page = paginate(self.categories, self.state.page, CATEGORIES_PER_PAGE)
        self.state.page = page.number
        options = [
            discord.SelectOption(
                label="All Categories",
                description="Get a random food from all categories",
                value=ALL_CATEGORIES,
                emoji="🎲",
            )
        ]
        for category in page.items:
            options.append(discord.SelectOption(
                label=truncate(category.name, 100),
                description=f"{len(category.foods)} foods available",
                value=category.id,
            ))
        multi = len(self.categories) >= MULTI_SELECT_THRESHOLD
        self.add_item(make_select(
            options,
            self._on_select,
            placeholder="Select categories" if multi else "Select a category",
            max_values=len(options) if multi else 1,
            row=0,
        ))
        if page.total_pages > 1:
            self.add_item(make_button(
                "Previous", self._on_previous, emoji="⬅️", disabled=not page.has_previous, row=1
            ))
            self.add_item(make_button(
                f"Page {page.number}/{page.total_pages}", disabled=True, row=1
            ))
            self.add_item(make_button("Next", self._on_next, emoji="➡️", disabled=not page.has_next, row=1))
        return {"content": "Choose where to pick a random food from:"}

    async def _on_select(self, interaction: discord.Interaction, values: list[str]) -> None:
        if ALL_CATEGORIES in values:
            self.state.filters = []
        else:
            self.state.filters = list(values)
        await self._draw(interaction)

    async def _on_previous(self, interaction: discord.Interaction) -> None:
        self.state.page -= 1
        await self.refresh(interaction)

    async def _on_next(self, interaction: discord.Interaction) -> None:
        self.state.page += 1
        await self.refresh(interaction)

    async def _on_again(self, interaction: discord.Interaction) -> None:
        await self._draw(interaction)

    async def _on_change(self, interaction: discord.Interaction) -> None:
        self.state.step = "select"
        await self.refresh(interaction)

    async def _on_close(self, interaction: discord.Interaction) -> None:
        await self.finish(interaction, "Random food picker closed.", WizardStatus.CANCELLED)

    async def _draw(self, interaction: discord.Interaction) -> None:
        try:
            food = await self.foods.random(self.guild_key, self.state.filters or None, rng=self.rng)
        except NotFoundError as e:
            await respond(interaction, f"❌ {e}")
            return

        self.state.selected_id = food.id
        self.state.step = "controls"
        await self.refresh(interaction)

        logger.info(f"User {interaction.user.id} drew {food.name!r} in guild {self.guild_key}")
        if interaction.channel is not None:
            payload = with_image(random_food_embed(food), await image_file(self.uploads, food))
            await best_effort(
                interaction.channel.send(content=f"{interaction.user.mention} got a random food:", **payload),
                "Random food announcement",
            )

    @property
    def guild_key(self) -> str:
        return str(self.state.guild_id)
