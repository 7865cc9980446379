"""
Tests for the guild-scoped repositories against in-memory SQLite.

Covers:
- Category/food name uniqueness and its scope
- Guild isolation
- Cascade delete of foods with their category
- Random selection (filtering, empty pools, row-proportional odds)
- Saved bank accounts
"""

from __future__ import annotations

import random

import pytest

from pantrybot.db import KEEP_IMAGE, BankAccountRepository
from pantrybot.errors import DuplicateNameError, NotFoundError

GUILD = "111"
OTHER_GUILD = "222"


class TestCategoryRepository:
    @pytest.mark.asyncio
    async def test_add_trims_and_lists_by_name(self, categories):
        await categories.add(GUILD, "  Soups ", "  warm  ")
        await categories.add(GUILD, "Desserts", None)

        listed = await categories.list(GUILD)

        assert [c.name for c in listed] == ["Desserts", "Soups"]
        assert listed[1].description == "warm"
        assert listed[0].description is None
        assert all(len(c.id) == 15 for c in listed)

    @pytest.mark.asyncio
    async def test_duplicate_name_in_same_guild_is_rejected(self, categories):
        await categories.add(GUILD, "Soups")

        with pytest.raises(DuplicateNameError) as exc_info:
            await categories.add(GUILD, "Soups")

        assert str(exc_info.value) == 'Category "Soups" already exists in this server!'
        assert await categories.count(GUILD) == 1

    @pytest.mark.asyncio
    async def test_same_name_allowed_in_other_guild(self, categories):
        await categories.add(GUILD, "Soups")
        await categories.add(OTHER_GUILD, "Soups")

        assert await categories.count(GUILD) == 1
        assert await categories.count(OTHER_GUILD) == 1

    @pytest.mark.asyncio
    async def test_other_guild_cannot_read_category(self, categories):
        category = await categories.add(GUILD, "Soups")

        with pytest.raises(NotFoundError):
            await categories.get(OTHER_GUILD, category.id)

    @pytest.mark.asyncio
    async def test_rename_to_existing_name_keeps_original(self, categories):
        await categories.add(GUILD, "Soups")
        salads = await categories.add(GUILD, "Salads")

        with pytest.raises(DuplicateNameError):
            await categories.update(GUILD, salads.id, "Soups", None)

        assert (await categories.get(GUILD, salads.id)).name == "Salads"

    @pytest.mark.asyncio
    async def test_delete_cascades_to_foods(self, categories, foods):
        soups = await categories.add(GUILD, "Soups")
        await foods.add(GUILD, soups.id, "Pho")
        await foods.add(GUILD, soups.id, "Ramen")

        deleted = await categories.delete(GUILD, soups.id)

        assert sorted(f.name for f in deleted.foods) == ["Pho", "Ramen"]
        assert await foods.count(GUILD) == 0
        assert await categories.count(GUILD) == 0


class TestFoodRepository:
    @pytest.mark.asyncio
    async def test_same_food_name_allowed_in_different_categories(self, categories, foods):
        soups = await categories.add(GUILD, "Soups")
        noodles = await categories.add(GUILD, "Noodles")

        await foods.add(GUILD, soups.id, "Pho")
        await foods.add(GUILD, noodles.id, "Pho")

        assert await foods.count(GUILD) == 2

    @pytest.mark.asyncio
    async def test_duplicate_food_in_category_is_rejected(self, categories, foods):
        soups = await categories.add(GUILD, "Soups")
        await foods.add(GUILD, soups.id, "Pho")

        with pytest.raises(DuplicateNameError) as exc_info:
            await foods.add(GUILD, soups.id, "Pho")

        assert "this category" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_add_to_missing_category(self, foods):
        with pytest.raises(NotFoundError):
            await foods.add(GUILD, "doesnotexist123", "Pho")

    @pytest.mark.asyncio
    async def test_list_orders_by_category_then_name(self, categories, foods):
        soups = await categories.add(GUILD, "Soups")
        cakes = await categories.add(GUILD, "Cakes")
        await foods.add(GUILD, soups.id, "Pho")
        await foods.add(GUILD, soups.id, "Bun bo")
        await foods.add(GUILD, cakes.id, "Tiramisu")

        listed = await foods.list(GUILD)

        assert [(f.category.name, f.name) for f in listed] == [
            ("Cakes", "Tiramisu"),
            ("Soups", "Bun bo"),
            ("Soups", "Pho"),
        ]

    @pytest.mark.asyncio
    async def test_rename_clashing_anywhere_in_guild_is_rejected(self, categories, foods):
        soups = await categories.add(GUILD, "Soups")
        noodles = await categories.add(GUILD, "Noodles")
        await foods.add(GUILD, soups.id, "Pho")
        ramen = await foods.add(GUILD, noodles.id, "Ramen")

        with pytest.raises(DuplicateNameError):
            await foods.update(GUILD, ramen.id, "Pho")

    @pytest.mark.asyncio
    async def test_update_keeps_image_unless_replaced(self, categories, foods):
        soups = await categories.add(GUILD, "Soups")
        pho = await foods.add(GUILD, soups.id, "Pho", image="foods/111/a.png")

        food, replaced = await foods.update(GUILD, pho.id, "Pho", "beef", image=KEEP_IMAGE)
        assert food.image == "foods/111/a.png"
        assert replaced is None

        food, replaced = await foods.update(GUILD, pho.id, "Pho", "beef", image="foods/111/b.png")
        assert food.image == "foods/111/b.png"
        assert replaced == "foods/111/a.png"

    @pytest.mark.asyncio
    async def test_random_from_empty_guild(self, foods):
        with pytest.raises(NotFoundError, match="No foods found in any category!"):
            await foods.random(GUILD)

    @pytest.mark.asyncio
    async def test_random_from_empty_selection(self, categories, foods):
        empty = await categories.add(GUILD, "Empty")

        with pytest.raises(NotFoundError, match="No foods found in selected categories!"):
            await foods.random(GUILD, [empty.id])

    @pytest.mark.asyncio
    async def test_random_respects_category_filter(self, categories, foods):
        soups = await categories.add(GUILD, "Soups")
        cakes = await categories.add(GUILD, "Cakes")
        await foods.add(GUILD, soups.id, "Pho")
        await foods.add(GUILD, cakes.id, "Tiramisu")

        rng = random.Random(7)
        picks = {(await foods.random(GUILD, [cakes.id], rng=rng)).name for _ in range(20)}

        assert picks == {"Tiramisu"}

    @pytest.mark.asyncio
    async def test_random_is_proportional_to_rows(self, categories, foods):
        """A category holding 3 of 4 foods wins about 75% of draws."""
        big = await categories.add(GUILD, "Big")
        small = await categories.add(GUILD, "Small")
        for name in ("A", "B", "C"):
            await foods.add(GUILD, big.id, name)
        await foods.add(GUILD, small.id, "D")

        rng = random.Random(1234)
        draws = 2000
        big_hits = 0
        for _ in range(draws):
            food = await foods.random(GUILD, rng=rng)
            big_hits += food.category_id == big.id

        assert 0.70 < big_hits / draws < 0.80


class TestBankAccountRepository:
    BANK = {"name": "Ngân hàng TMCP Ngoại Thương Việt Nam", "shortName": "Vietcombank", "bin": "970436"}

    @pytest.mark.asyncio
    async def test_add_and_list_for_user(self, db):
        repo = BankAccountRepository(db)

        account = await repo.add(GUILD, "42", self.BANK, " 0123456789 ", "nguyen van a")

        assert account.account_number == "0123456789"
        assert account.account_name == "NGUYEN VAN A"
        assert account.bin == "970436"
        assert [a.id for a in await repo.list_for_user(GUILD, "42")] == [account.id]
        assert await repo.list_for_user(GUILD, "43") == []

    @pytest.mark.asyncio
    async def test_duplicate_account_is_rejected(self, db):
        repo = BankAccountRepository(db)
        await repo.add(GUILD, "42", self.BANK, "0123456789")

        with pytest.raises(DuplicateNameError):
            await repo.add(GUILD, "42", self.BANK, "0123456789")

    @pytest.mark.asyncio
    async def test_duplicate_account_without_short_name_is_rejected(self, db):
        repo = BankAccountRepository(db)
        bank = {"name": "Ngân hàng Không Tên", "bin": "970499"}
        account = await repo.add(GUILD, "42", bank, "0123456789")

        assert account.short_name == "Ngân hàng Không Tên"
        with pytest.raises(DuplicateNameError):
            await repo.add(GUILD, "42", bank, "0123456789")
        assert len(await repo.list_for_user(GUILD, "42")) == 1

    @pytest.mark.asyncio
    async def test_get_for_other_user_is_not_found(self, db):
        repo = BankAccountRepository(db)
        account = await repo.add(GUILD, "42", self.BANK, "0123456789")

        with pytest.raises(NotFoundError):
            await repo.get_for_user(GUILD, "43", account.id)
