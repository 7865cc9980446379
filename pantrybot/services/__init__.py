"""Domain services shared by the command cogs."""

from pantrybot.services.banks import BankDirectory
from pantrybot.services.catalog import CatalogResult, CatalogService, ImageSource

__all__ = ["BankDirectory", "CatalogResult", "CatalogService", "ImageSource"]
