"""
Shared fixtures: an in-memory database, temp-dir storage, and factories for
mocked Discord interactions and a bot carrying real services.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest
import pytest_asyncio

from pantrybot.bot.wizard import WizardSessions
from pantrybot.config.settings import WizardSettings
from pantrybot.db import BankAccountRepository, CategoryRepository, Database, FoodRepository
from pantrybot.services import CatalogService
from pantrybot.storage import KissImageStore, UploadService

MAX_SIZES = {"foods": 1, "kiss": 1}
ALLOWED = {
    "foods": ["image/jpeg", "image/png", "image/webp"],
    "kiss": ["image/jpeg", "image/png", "image/webp", "image/gif"],
}


@pytest_asyncio.fixture
async def db():
    async with Database("sqlite+aiosqlite://") as database:
        yield database


@pytest_asyncio.fixture
async def uploads(tmp_path):
    async with UploadService(tmp_path / "uploads", MAX_SIZES, ALLOWED) as service:
        yield service


@pytest.fixture
def categories(db) -> CategoryRepository:
    return CategoryRepository(db)


@pytest.fixture
def foods(db) -> FoodRepository:
    return FoodRepository(db)


@pytest.fixture
def catalog(categories, foods, uploads) -> CatalogService:
    return CatalogService(categories, foods, uploads)


@pytest.fixture
def bot(db, catalog, uploads):
    """A stand-in for PantryBot exposing the attributes cogs and wizards use."""
    bot = MagicMock()
    bot.settings.wizard = WizardSettings()
    bot.wizards = WizardSessions()
    bot.catalog = catalog
    bot.uploads = uploads
    bot.kiss_images = KissImageStore(uploads)
    bot.bank_accounts = BankAccountRepository(db)
    return bot


@pytest.fixture
def make_interaction():
    """Factory for a mocked interaction from a guild member."""

    def _make(user_id: int = 42, admin: bool = True, guild_id: int = 1, channel_id: int = 100):
        interaction = MagicMock(spec=discord.Interaction)
        interaction.user = MagicMock(spec=discord.Member)
        interaction.user.id = user_id
        interaction.user.mention = f"<@{user_id}>"
        interaction.user.display_name = f"User{user_id}"
        interaction.user.guild_permissions.administrator = admin
        interaction.guild = MagicMock(spec=discord.Guild)
        interaction.guild_id = guild_id
        interaction.channel_id = channel_id
        interaction.channel = MagicMock()
        interaction.channel.id = channel_id
        interaction.channel.send = AsyncMock()
        interaction.response = MagicMock()
        interaction.response.is_done.return_value = False
        interaction.response.send_message = AsyncMock()
        interaction.response.edit_message = AsyncMock()
        interaction.response.send_modal = AsyncMock()
        interaction.response.defer = AsyncMock()
        interaction.followup = MagicMock()
        interaction.followup.send = AsyncMock()
        interaction.edit_original_response = AsyncMock()

        message = MagicMock(spec=discord.Message)
        message.id = 9000 + user_id
        message.edit = AsyncMock()
        interaction.original_response = AsyncMock(return_value=message)
        return interaction

    return _make
