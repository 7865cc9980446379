"""Slash command cogs loaded by ``PantryBot.setup_hook``."""
