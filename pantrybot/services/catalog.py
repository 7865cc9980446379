"""
Catalog operations that span the database and the upload folder.

Keeps row changes and image files consistent: an uploaded image that ends
up unused is removed, an old image is deleted only after its replacement is
committed, and a failed upload degrades to "saved without image".
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

from pantrybot.config.logging import get_logger
from pantrybot.db.models import Food, FoodCategory
from pantrybot.db.repositories import KEEP_IMAGE, CategoryRepository, FoodRepository
from pantrybot.errors import UploadError
from pantrybot.storage.uploads import UploadService

logger = get_logger(__name__)

T = TypeVar("T")

FOOD_MODULE = "foods"


@dataclass
class ImageSource:
    """An attachment the user submitted for an entity."""

    url: str
    filename: str


@dataclass
class CatalogResult(Generic[T]):
    """Outcome of a write; ``warning`` is set when the image part was dropped."""

    entity: T
    warning: str | None = None


class CatalogService:
    """Category and food writes with their file side effects."""

    def __init__(
        self,
        categories: CategoryRepository,
        foods: FoodRepository,
        uploads: UploadService,
    ):
        self.categories = categories
        self.foods = foods
        self.uploads = uploads

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    async def add_category(self, guild_id: str, name: str, description: str | None) -> FoodCategory:
        return await self.categories.add(guild_id, name, description)

    async def edit_category(
        self, guild_id: str, category_id: str, name: str, description: str | None
    ) -> FoodCategory:
        return await self.categories.update(guild_id, category_id, name, description)

    async def delete_category(self, guild_id: str, category_id: str) -> FoodCategory:
        """Delete a category, its foods, and (best-effort) their image files."""
        category = await self.categories.delete(guild_id, category_id)
        for food in category.foods:
            if food.image:
                await self._remove_image(food.image, food.name)
        return category

    # ------------------------------------------------------------------
    # Foods
    # ------------------------------------------------------------------

    async def _upload(self, guild_id: str, image: ImageSource | None) -> tuple[str | None, str | None]:
        if image is None:
            return None, None
        try:
            path = await self.uploads.upload_from_url(
                image.url, guild_id, FOOD_MODULE, filename=image.filename
            )
        except UploadError as e:
            logger.warning(f"Image upload failed for guild {guild_id}: {e}")
            return None, f"{e} The image was not saved."
        return path, None

    async def add_food(
        self,
        guild_id: str,
        category_id: str,
        name: str,
        description: str | None,
        user_id: str | None,
        image: ImageSource | None = None,
    ) -> CatalogResult[Food]:
        """
        Upload the optional image, then create the food.

        A failed upload still creates the food (``warning`` explains why the
        image is missing). If the row cannot be created the uploaded file is
        removed again and the error propagates.
        """
        image_path, warning = await self._upload(guild_id, image)
        try:
            food = await self.foods.add(
                guild_id, category_id, name, description, image=image_path, user_id=user_id
            )
        except Exception:
            if image_path:
                await self.uploads.delete_file(image_path)
            raise
        return CatalogResult(food, warning)

    async def edit_food(
        self,
        guild_id: str,
        food_id: str,
        name: str,
        description: str | None,
        image: ImageSource | None = None,
    ) -> CatalogResult[Food]:
        """
        Update a food, optionally replacing its image.

        The previous image file is deleted only after the new path has been
        committed; on any failure the new file is discarded instead.
        """
        image_path, warning = await self._upload(guild_id, image)
        try:
            food, replaced = await self.foods.update(
                guild_id,
                food_id,
                name,
                description,
                image=image_path if image_path else KEEP_IMAGE,
            )
        except Exception:
            if image_path:
                await self.uploads.delete_file(image_path)
            raise

        if replaced:
            await self._remove_image(replaced, food.name)
        return CatalogResult(food, warning)

    async def delete_food(self, guild_id: str, food_id: str) -> Food:
        """Delete the row, then (best-effort) its image file."""
        food = await self.foods.delete(guild_id, food_id)
        if food.image:
            await self._remove_image(food.image, food.name)
        return food

    async def _remove_image(self, path: str, owner: str) -> None:
        if await self.uploads.delete_file(path):
            logger.info(f"Removed image {path} of {owner!r}")
        else:
            logger.warning(f"Could not delete image file for {owner!r}: {path}")
