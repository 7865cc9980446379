"""
Discord Bot Layer.

Slash command cogs, the interactive wizard views behind them, and the bot
client that wires them to the shared services.
"""

from pantrybot.bot.client import PantryBot

__all__ = ["PantryBot"]
