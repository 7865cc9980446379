"""
PantryBot CLI entry point.

Provides command-line interface for running the bot and utility commands.
"""

import argparse
import asyncio
import sys
from pathlib import Path

from pantrybot import __version__
from pantrybot.config.logging import get_logger, setup_logging
from pantrybot.config.settings import Settings, load_settings
from pantrybot.db import Database
from pantrybot.services import BankDirectory


def create_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser."""
    parser = argparse.ArgumentParser(
        prog="pantrybot",
        description="Discord community bot: food catalog, kiss images and bank QR payments",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"PantryBot {__version__}",
    )

    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to .env file (default: .env in current directory)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override logging level from config",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("run", help="Run the Discord bot")
    subparsers.add_parser("config", help="Show current configuration")
    subparsers.add_parser("init-db", help="Create database tables")
    subparsers.add_parser(
        "refresh-banks",
        help="Download the bank list and rewrite the local cache",
    )

    return parser


def cmd_config(settings: Settings) -> int:
    """Show current configuration."""
    logger = get_logger(__name__)

    logger.info("\n=== PantryBot Configuration ===\n")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Log Level: {settings.log_level}")
    logger.info(f"Log File: {settings.log_file or 'None (console only)'}")
    logger.info(f"\nBot Name: {settings.bot.name}")
    logger.info(f"Bot Token: {'Set' if settings.bot.token else 'Not set'}")
    logger.info(f"Dev Guild: {settings.bot.dev_guild_id or 'None (global sync)'}")
    logger.info(f"\nDatabase URL: {settings.database.url}")
    logger.info(f"\nUpload Dir: {settings.storage.upload_dir}")
    logger.info(f"Data Dir: {settings.storage.data_dir}")
    logger.info(f"Max Upload Size (MB): {settings.storage.max_file_size_mb}")
    logger.info(f"\nBank API: {settings.banks.api_url}")
    logger.info(f"Bank Refresh (hours): {settings.banks.refresh_hours}")
    logger.info(f"Bank Cache File: {settings.banks_cache_file}")

    return 0


def cmd_run(settings: Settings) -> int:
    """Start the Discord bot."""
    logger = get_logger(__name__)

    if not settings.bot.token:
        logger.error(
            "Discord bot token not set. Add BOT__TOKEN=<your-token> to your .env file."
        )
        return 1

    from pantrybot.bot import PantryBot

    bot = PantryBot(settings)
    logger.info(f"Starting {settings.bot.name}...")
    # log_handler=None: disable discord.py's default logging setup and use ours
    bot.run(settings.bot.token, log_handler=None)
    return 0


async def cmd_init_db(settings: Settings) -> int:
    """Create all tables (idempotent)."""
    logger = get_logger(__name__)
    try:
        async with Database(settings.database.url, echo=settings.database.echo):
            pass
    except RuntimeError as e:
        logger.error(str(e))
        return 1
    logger.info(f"Database ready at {settings.database.url}")
    return 0


async def cmd_refresh_banks(settings: Settings) -> int:
    """Fetch the bank list once and report the result."""
    logger = get_logger(__name__)
    async with BankDirectory(
        settings.banks.api_url,
        settings.banks_cache_file,
        qr_image_base=settings.banks.qr_image_base,
        qr_template=settings.banks.qr_template,
    ) as directory:
        if not await directory.refresh():
            logger.error("Bank list refresh failed; the previous cache was kept")
            return 1
        banks = await directory.load()
    logger.info(f"{len(banks)} banks cached in {settings.banks_cache_file}")
    return 0


def main() -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    # Load settings
    try:
        settings = load_settings(env_file=args.env_file)
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    # Override log level if specified
    if args.log_level:
        settings.log_level = args.log_level

    # Setup logging
    setup_logging(settings)

    # Execute command
    if args.command == "config":
        return cmd_config(settings)
    elif args.command == "run":
        return cmd_run(settings)
    elif args.command == "init-db":
        return asyncio.run(cmd_init_db(settings))
    elif args.command == "refresh-banks":
        return asyncio.run(cmd_refresh_banks(settings))
    else:
        # Default: show help
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
