"""
PantryBot - Discord community-utility bot.

Provides a guild-scoped food/category catalog driven by interactive wizards,
a virtual kiss image exchange, a bank directory with QR payment links, and
a couple of small utility commands.
"""

__version__ = "0.1.0"
