"""
Persistence layer.

SQLAlchemy entities, the async database lifecycle, and guild-scoped
repositories used by the command cogs.
"""

from pantrybot.db.database import Database
from pantrybot.db.models import Bank, Base, Food, FoodCategory
from pantrybot.db.repositories import (
    KEEP_IMAGE,
    BankAccountRepository,
    CategoryRepository,
    FoodRepository,
)

__all__ = [
    "Base",
    "Bank",
    "BankAccountRepository",
    "CategoryRepository",
    "Database",
    "Food",
    "FoodCategory",
    "FoodRepository",
    "KEEP_IMAGE",
]
