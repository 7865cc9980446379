"""
PantryBot: discord.py bot client.

Manages the full bot lifecycle:
- Initializes shared services (database, uploads, bank directory) once at startup
- Loads command cogs (PingCog, FoodCog, KissCog, BankCog)
- Syncs slash commands (guild-local for dev, global for production)
- Cleans up all resources on shutdown via AsyncExitStack
"""

from __future__ import annotations

from contextlib import AsyncExitStack

import discord
from discord.ext import commands

from pantrybot.bot.wizard import WizardSessions
from pantrybot.config.logging import get_logger
from pantrybot.config.settings import Settings
from pantrybot.db import BankAccountRepository, CategoryRepository, Database, FoodRepository
from pantrybot.services import BankDirectory, CatalogService
from pantrybot.storage import KissImageStore, UploadService

logger = get_logger(__name__)


class PantryBot(commands.Bot):
    """
    Community utility bot: food catalog, kiss images, bank QR payments.

    Holds shared application state (repositories, services, active wizards)
    and exposes it to cogs. All async resources are managed via AsyncExitStack
    so they're properly cleaned up when the bot shuts down.

    Args:
        settings: Full application settings (bot token, database, storage, etc.)
    """

    def __init__(self, settings: Settings) -> None:
        intents = discord.Intents.default()
        intents.message_content = True  # Required to receive image attachments in the add/edit food flows
        super().__init__(
            command_prefix=settings.bot.command_prefix,
            intents=intents,
        )
        self.settings = settings
        self.wizards = WizardSessions()
        self.db: Database | None = None
        self.uploads: UploadService | None = None
        self.kiss_images: KissImageStore | None = None
        self.banks: BankDirectory | None = None
        self.catalog: CatalogService | None = None
        self.bank_accounts: BankAccountRepository | None = None
        self._exit_stack = AsyncExitStack()

    async def setup_hook(self) -> None:
        """
        Called after login, before connecting to the Gateway.

        Initializes all services, loads cogs, and syncs slash commands.
        """
        # --- 1. Database ---
        self.db = await self._exit_stack.enter_async_context(
            Database(self.settings.database.url, echo=self.settings.database.echo)
        )
        logger.info("Database ready")

        # --- 2. File storage ---
        storage = self.settings.storage
        self.uploads = await self._exit_stack.enter_async_context(
            UploadService(storage.upload_dir, storage.max_file_size_mb, storage.allowed_types)
        )
        self.kiss_images = KissImageStore(self.uploads)

        # --- 3. Bank directory (refreshed by BankCog's loop) ---
        banks = self.settings.banks
        self.banks = await self._exit_stack.enter_async_context(
            BankDirectory(
                banks.api_url,
                self.settings.banks_cache_file,
                qr_image_base=banks.qr_image_base,
                qr_template=banks.qr_template,
            )
        )

        # --- 4. Repositories and services ---
        self.catalog = CatalogService(CategoryRepository(self.db), FoodRepository(self.db), self.uploads)
        self.bank_accounts = BankAccountRepository(self.db)

        # --- 5. Load cogs ---
        from pantrybot.bot.cogs.bank import BankCog
        from pantrybot.bot.cogs.food import FoodCog
        from pantrybot.bot.cogs.kiss import KissCog
        from pantrybot.bot.cogs.ping import PingCog
        await self.add_cog(PingCog(self))
        await self.add_cog(FoodCog(self))
        await self.add_cog(KissCog(self))
        await self.add_cog(BankCog(self))
        logger.info("Cogs loaded")

        # --- 6. Sync slash commands ---
        try:
            if self.settings.bot.dev_guild_id:
                guild = discord.Object(id=self.settings.bot.dev_guild_id)
                self.tree.copy_global_to(guild=guild)
                await self.tree.sync(guild=guild)
                logger.info(f"Slash commands synced to dev guild {self.settings.bot.dev_guild_id} (instant)")
            else:
                await self.tree.sync()
                logger.info("Slash commands synced globally (may take up to 1 hour to propagate)")
        except discord.errors.Forbidden:
            logger.warning(
                "Could not sync slash commands (403 Forbidden). "
                "The bot is missing the 'applications.commands' OAuth2 scope. "
                "Re-invite the bot using an OAuth2 URL that includes both 'bot' "
                "and 'applications.commands' scopes."
            )
        except discord.HTTPException as e:
            logger.warning(f"Slash command sync failed: {e}. The bot will still start.")

    async def on_ready(self) -> None:
        """Called when the bot successfully connects to Discord."""
        logger.info(f"Logged in as {self.user} (id: {self.user.id})")
        logger.info(f"Connected to {len(self.guilds)} guild(s)")

    async def close(self) -> None:
        """Graceful shutdown: clean up all async resources before disconnecting."""
        logger.info("Shutting down PantryBot...")
        await self._exit_stack.aclose()
        await super().close()
