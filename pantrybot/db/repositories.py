"""
Guild-scoped data access for the catalog and bank accounts.

Every public method opens its own session, so callers never hold a session
across a Discord round-trip. Unique-index violations are translated into
``DuplicateNameError``; the failed transaction is rolled back so the
existing row is left untouched.
"""

import random
from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pantrybot.config.logging import get_logger
from pantrybot.db.database import Database
from pantrybot.db.models import Bank, Food, FoodCategory
from pantrybot.errors import DuplicateNameError, NotFoundError

logger = get_logger(__name__)

# Passed as ``image`` to FoodRepository.update to leave the image untouched
KEEP_IMAGE = object()


async def _commit_unique(session: AsyncSession, entity: str, name: str, scope: str) -> None:
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        logger.info(f"Rejected duplicate {entity.lower()} name {name!r} ({scope})")
        raise DuplicateNameError(entity, name, scope) from e


class CategoryRepository:
    """CRUD for ``FoodCategory`` rows of one guild at a time."""

    def __init__(self, db: Database):
        self._db = db

    async def list(self, guild_id: str) -> list[FoodCategory]:
        """All categories of the guild ordered by name, foods preloaded."""
        async with self._db.session() as session:
            result = await session.scalars(
                select(FoodCategory)
                .where(FoodCategory.guild_id == guild_id)
                .order_by(FoodCategory.name)
            )
            return list(result.all())

    async def count(self, guild_id: str) -> int:
        async with self._db.session() as session:
            return await session.scalar(
                select(func.count()).select_from(FoodCategory).where(FoodCategory.guild_id == guild_id)
            )

    async def get(self, guild_id: str, category_id: str) -> FoodCategory:
        async with self._db.session() as session:
            return await self._get(session, guild_id, category_id)

    async def add(self, guild_id: str, name: str, description: str | None = None) -> FoodCategory:
        """
        Create a category.

        Raises:
            DuplicateNameError: If the guild already has a category with this name
        """
        async with self._db.session() as session:
            category = FoodCategory(
                guild_id=guild_id,
                name=name.strip(),
                description=(description or "").strip() or None,
                foods=[],
            )
            session.add(category)
            await _commit_unique(session, "Category", category.name, "this server")
            logger.info(f"Added category {category.name!r} to guild {guild_id}")
            return category

    async def update(
        self,
        guild_id: str,
        category_id: str,
        name: str,
        description: str | None = None,
    ) -> FoodCategory:
        """
        Rename/re-describe a category.

        Raises:
            NotFoundError: If the category no longer exists
            DuplicateNameError: If another category of the guild has the new name
        """
        async with self._db.session() as session:
            category = await self._get(session, guild_id, category_id)
            category.name = name.strip()
            category.description = (description or "").strip() or None
            await _commit_unique(session, "Category", category.name, "this server")
            logger.info(f"Updated category {category.id} in guild {guild_id}")
            return category

    async def delete(self, guild_id: str, category_id: str) -> FoodCategory:
        """
        Delete a category and, by cascade, its foods.

        Returns the deleted category with ``foods`` still populated so the
        caller can clean up their image files.
        """
        async with self._db.session() as session:
            category = await self._get(session, guild_id, category_id)
            await session.delete(category)
            await session.commit()
            logger.info(
                f"Deleted category {category.name!r} ({len(category.foods)} foods) "
                f"from guild {guild_id}"
            )
            return category

    @staticmethod
    async def _get(session: AsyncSession, guild_id: str, category_id: str) -> FoodCategory:
        category = await session.scalar(
            select(FoodCategory).where(
                FoodCategory.id == category_id,
                FoodCategory.guild_id == guild_id,
            )
        )
        if category is None:
            raise NotFoundError("Category", category_id)
        return category


class FoodRepository:
    """CRUD and random selection for ``Food`` rows of one guild at a time."""

    def __init__(self, db: Database):
        self._db = db

    async def list(self, guild_id: str) -> list[Food]:
        """All foods of the guild ordered by category name, then food name."""
        async with self._db.session() as session:
            result = await session.scalars(
                select(Food)
                .join(Food.category)
                .where(Food.guild_id == guild_id)
                .order_by(FoodCategory.name, Food.name)
            )
            return list(result.all())

    async def count(self, guild_id: str) -> int:
        async with self._db.session() as session:
            return await session.scalar(
                select(func.count()).select_from(Food).where(Food.guild_id == guild_id)
            )

    async def get(self, guild_id: str, food_id: str) -> Food:
        async with self._db.session() as session:
            return await self._get(session, guild_id, food_id)

    async def add(
        self,
        guild_id: str,
        category_id: str,
        name: str,
        description: str | None = None,
        image: str | None = None,
        user_id: str | None = None,
    ) -> Food:
        """
        Create a food inside a category.

        Raises:
            NotFoundError: If the category no longer exists
            DuplicateNameError: If the category already holds a food with this name
        """
        async with self._db.session() as session:
            category = await CategoryRepository._get(session, guild_id, category_id)
            food = Food(
                guild_id=guild_id,
                category=category,
                name=name.strip(),
                description=(description or "").strip() or None,
                image=image,
                user_id=user_id,
            )
            session.add(food)
            await _commit_unique(session, "Food", food.name, "this category")
            logger.info(f"Added food {food.name!r} to category {category.name!r} (guild {guild_id})")
            return food

    async def update(
        self,
        guild_id: str,
        food_id: str,
        name: str,
        description: str | None = None,
        image=KEEP_IMAGE,
    ) -> tuple[Food, str | None]:
        """
        Update a food's fields.

        Args:
            image: New relative image path, ``None`` to clear it, or
                ``KEEP_IMAGE`` to leave it as is

        Returns:
            ``(food, replaced_image)`` where ``replaced_image`` is the old image
            path once the new value is committed, for the caller to delete

        Raises:
            NotFoundError: If the food no longer exists
            DuplicateNameError: If a different food of the guild has the new name
        """
        name = name.strip()
        async with self._db.session() as session:
            food = await self._get(session, guild_id, food_id)

            if name != food.name:
                clash = await session.scalar(
                    select(Food.id)
                    .where(Food.guild_id == guild_id, Food.name == name, Food.id != food_id)
                    .limit(1)
                )
                if clash is not None:
                    raise DuplicateNameError("Food", name, "this server")

            replaced_image = None
            if image is not KEEP_IMAGE and image != food.image:
                replaced_image = food.image
                food.image = image

            food.name = name
            food.description = (description or "").strip() or None
            await _commit_unique(session, "Food", name, "this server")
            logger.info(f"Updated food {food.id} in guild {guild_id}")
            return food, replaced_image

    async def delete(self, guild_id: str, food_id: str) -> Food:
        """Delete a food; returns the removed row so its image can be cleaned up."""
        async with self._db.session() as session:
            food = await self._get(session, guild_id, food_id)
            await session.delete(food)
            await session.commit()
            logger.info(f"Deleted food {food.name!r} from guild {guild_id}")
            return food

    async def random(
        self,
        guild_id: str,
        category_ids: Sequence[str] | None = None,
        rng: random.Random | None = None,
    ) -> Food:
        """
        Pick one food uniformly among all matching rows.

        Selection is over rows, not categories, so a category with more foods
        is proportionally more likely to be picked.

        Args:
            category_ids: Restrict to these categories; ``None`` or empty means all

        Raises:
            NotFoundError: If no food matches
        """
        stmt = select(Food).where(Food.guild_id == guild_id)
        if category_ids:
            stmt = stmt.where(Food.category_id.in_(list(category_ids)))

        async with self._db.session() as session:
            foods = list((await session.scalars(stmt.order_by(Food.id))).all())

        if not foods:
            message = (
                "No foods found in selected categories!" if category_ids
                else "No foods found in any category!"
            )
            raise NotFoundError("Food", message=message)

        return (rng or random).choice(foods)

    @staticmethod
    async def _get(session: AsyncSession, guild_id: str, food_id: str) -> Food:
        food = await session.scalar(
            select(Food).where(Food.id == food_id, Food.guild_id == guild_id)
        )
        if food is None:
            raise NotFoundError("Food", food_id)
        return food


class BankAccountRepository:
    """Saved bank accounts per (guild, member)."""

    def __init__(self, db: Database):
        self._db = db

    async def add(
        self,
        guild_id: str,
        user_id: str,
        bank: dict,
        account_number: str,
        account_name: str | None = None,
    ) -> Bank:
        """
        Save an account for a member.

        Args:
            bank: Directory entry (``name``, ``shortName``, ``bin``)

        Raises:
            DuplicateNameError: If the member already saved this account
        """
        async with self._db.session() as session:
            name = bank.get("name") or bank.get("shortName") or ""
            account = Bank(
                guild_id=guild_id,
                user_id=user_id,
                name=name,
                short_name=bank.get("shortName") or bank.get("short_name") or name,
                bin=str(bank["bin"]) if bank.get("bin") else None,
                account_number=account_number.strip(),
                account_name=(account_name or "").strip().upper() or None,
            )
            session.add(account)
            label = f"{account.short_name or account.name} {account.account_number}"
            await _commit_unique(session, "Account", label, "your saved accounts")
            logger.info(f"Saved bank account {account.id} for user {user_id} in guild {guild_id}")
            return account

    async def list_for_user(self, guild_id: str, user_id: str) -> list[Bank]:
        async with self._db.session() as session:
            result = await session.scalars(
                select(Bank)
                .where(Bank.guild_id == guild_id, Bank.user_id == user_id)
                .order_by(Bank.created_at)
            )
            return list(result.all())

    async def get_for_user(self, guild_id: str, user_id: str, account_id: str) -> Bank:
        async with self._db.session() as session:
            account = await session.scalar(
                select(Bank).where(
                    Bank.id == account_id,
                    Bank.guild_id == guild_id,
                    Bank.user_id == user_id,
                )
            )
        if account is None:
            raise NotFoundError("Account", account_id)
        return account
