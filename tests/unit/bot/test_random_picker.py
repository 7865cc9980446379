"""
Tests for RandomFoodPicker and the /food command entry point.
"""

from __future__ import annotations

import random
from unittest.mock import MagicMock

import pytest

from pantrybot.bot.cogs.food import FoodCog
from pantrybot.bot.random_picker import ALL_CATEGORIES, RandomFoodPicker
from pantrybot.bot.wizard import WizardStatus

GUILD = "1"


async def _seed(catalog):
    soups = await catalog.add_category(GUILD, "Soups", None)
    rice = await catalog.add_category(GUILD, "Rice", None)
    await catalog.add_category(GUILD, "Empty", None)
    await catalog.add_food(GUILD, soups.id, "Pho", None, "42")
    await catalog.add_food(GUILD, soups.id, "Bun bo", None, "42")
    await catalog.add_food(GUILD, rice.id, "Com tam", "Broken rice", "42")
    return soups, rice


class TestRandomFoodPicker:
    @pytest.mark.asyncio
    async def test_only_categories_with_foods_are_offered(self, bot, catalog):
        await _seed(catalog)

        picker = await RandomFoodPicker.create(bot, 42, GUILD)
        picker.render()

        options = picker.children[0].options
        assert [o.label for o in options] == ["All Categories", "Rice", "Soups"]
        assert [o.description for o in options[1:]] == ["1 foods available", "2 foods available"]
        assert picker.children[0].max_values == 1

    @pytest.mark.asyncio
    async def test_multi_select_with_many_categories(self, bot, catalog):
        for i in range(5):
            category = await catalog.add_category(GUILD, f"C{i}", None)
            await catalog.add_food(GUILD, category.id, f"F{i}", None, "42")

        picker = await RandomFoodPicker.create(bot, 42, GUILD)
        picker.render()

        assert picker.children[0].max_values == 6

    @pytest.mark.asyncio
    async def test_categories_page_past_select_limit(self, bot, catalog, make_interaction):
        for i in range(30):
            category = await catalog.add_category(GUILD, f"Cat {i:02d}", None)
            await catalog.add_food(GUILD, category.id, f"F{i}", None, "42")
        picker = await RandomFoodPicker.create(bot, 42, GUILD)
        await picker.start(make_interaction(), ephemeral=True)

        assert len(picker.children[0].options) == 25

        await picker._on_next(make_interaction())

        labels = [o.label for o in picker.children[0].options]
        assert labels == ["All Categories"] + [f"Cat {i}" for i in range(24, 30)]
        assert "Page 2/2" in [getattr(c, "label", None) for c in picker.children]

    @pytest.mark.asyncio
    async def test_draw_from_selected_category(self, bot, catalog, make_interaction):
        soups, _ = await _seed(catalog)
        picker = await RandomFoodPicker.create(bot, 42, GUILD, rng=random.Random(0))
        await picker.start(make_interaction(), ephemeral=True)
        click = make_interaction()

        await picker._on_select(click, [soups.id])

        assert picker.state.filters == [soups.id]
        assert picker.state.step == "controls"
        labels = [c.label for c in picker.children]
        assert labels == ["Get Another", "Change Categories", "Close"]
        kwargs = click.channel.send.call_args.kwargs
        assert kwargs["content"] == "<@42> got a random food:"
        assert kwargs["embed"].title in {"🎲 Random Food: Pho", "🎲 Random Food: Bun bo"}

    @pytest.mark.asyncio
    async def test_all_categories_clears_filter(self, bot, catalog, make_interaction):
        soups, _ = await _seed(catalog)
        picker = await RandomFoodPicker.create(bot, 42, GUILD)
        picker.state.filters = [soups.id]

        await picker._on_select(make_interaction(), [ALL_CATEGORIES, soups.id])

        assert picker.state.filters == []

    @pytest.mark.asyncio
    async def test_get_another_reuses_filter(self, bot, catalog, make_interaction):
        _, rice = await _seed(catalog)
        picker = await RandomFoodPicker.create(bot, 42, GUILD)
        await picker._on_select(make_interaction(), [rice.id])
        again = make_interaction()

        await picker._on_again(again)

        assert again.channel.send.call_args.kwargs["embed"].title == "🎲 Random Food: Com tam"

    @pytest.mark.asyncio
    async def test_emptied_category_reports_error(self, bot, catalog, make_interaction):
        _, rice = await _seed(catalog)
        picker = await RandomFoodPicker.create(bot, 42, GUILD)
        await catalog.delete_category(GUILD, rice.id)
        click = make_interaction()

        await picker._on_select(click, [rice.id])

        click.response.send_message.assert_awaited_once_with(
            "❌ No foods found in selected categories!", ephemeral=True
        )
        click.channel.send.assert_not_called()

    @pytest.mark.asyncio
    async def test_change_and_close(self, bot, catalog, make_interaction):
        await _seed(catalog)
        picker = await RandomFoodPicker.create(bot, 42, GUILD)
        await picker.start(make_interaction(), ephemeral=True)
        await picker._on_select(make_interaction(), [ALL_CATEGORIES])

        await picker._on_change(make_interaction())
        assert picker.state.step == "select"

        await picker._on_close(make_interaction())
        assert picker.state.status is WizardStatus.CANCELLED


class TestFoodCommand:
    @pytest.mark.asyncio
    async def test_random_without_foods(self, bot, make_interaction):
        cog = FoodCog(bot)
        interaction = make_interaction()

        await cog.food.callback(cog, interaction, MagicMock(value="random"))

        interaction.response.send_message.assert_awaited_once_with(
            "❌ No foods found in any category!", ephemeral=True
        )

    @pytest.mark.asyncio
    async def test_random_opens_ephemeral_picker(self, bot, catalog, make_interaction):
        await _seed(catalog)
        cog = FoodCog(bot)
        interaction = make_interaction()

        await cog.food.callback(cog, interaction, MagicMock(value="random"))

        assert interaction.response.send_message.call_args.kwargs["ephemeral"] is True
        assert len(bot.wizards) == 1

    @pytest.mark.asyncio
    async def test_category_opens_public_wizard(self, bot, make_interaction):
        cog = FoodCog(bot)
        interaction = make_interaction()

        await cog.food.callback(cog, interaction, MagicMock(value="category"))

        kwargs = interaction.response.send_message.call_args.kwargs
        assert kwargs["ephemeral"] is False
        assert kwargs["content"] == "Please select a category option:"
