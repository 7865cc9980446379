"""
Per-guild pool of images used by the /kiss command.

Images live in ``<upload_dir>/kiss-images/<guild>/kiss_<timestamp-random>.<ext>``.
There is no database row for them; the folder listing is the source of truth.
"""

import random
from pathlib import Path

import aiofiles
import aiofiles.os

from pantrybot.config.logging import get_logger
from pantrybot.storage.uploads import IMAGE_EXTENSIONS, MODULE_LAYOUT, UploadService

logger = get_logger(__name__)

MODULE_TYPE = "kiss"


class KissImageStore:
    """Add, list, pick and remove kiss images for a guild."""

    def __init__(self, uploads: UploadService):
        self._uploads = uploads
        self.root = uploads.root / MODULE_LAYOUT[MODULE_TYPE][0]

    def guild_dir(self, guild_id: str) -> Path:
        return self.root / str(guild_id)

    def _path(self, guild_id: str, filename: str) -> Path:
        # Only bare file names are accepted; anything with a separator is rejected
        if Path(filename).name != filename or filename in {"", ".", ".."}:
            raise ValueError(f"Invalid image name: {filename!r}")
        return self.guild_dir(guild_id) / filename

    async def add_from_url(self, guild_id: str, url: str, filename: str) -> str:
        """Download an attachment into the pool and return its file name."""
        relative = await self._uploads.upload_from_url(url, guild_id, MODULE_TYPE, filename=filename)
        return Path(relative).name

    async def save(self, guild_id: str, filename: str, data: bytes) -> str:
        """Store raw bytes in the pool and return the generated file name."""
        relative = await self._uploads.save_bytes(data, filename, guild_id, MODULE_TYPE)
        return Path(relative).name

    async def list(self, guild_id: str) -> list[str]:
        """Image file names of the guild, sorted."""
        folder = self.guild_dir(guild_id)
        try:
            names = await aiofiles.os.listdir(folder)
        except FileNotFoundError:
            return []
        return sorted(n for n in names if Path(n).suffix.lower() in IMAGE_EXTENSIONS)

    async def read(self, guild_id: str, filename: str) -> bytes | None:
        try:
            async with aiofiles.open(self._path(guild_id, filename), "rb") as f:
                return await f.read()
        except FileNotFoundError:
            return None

    async def remove(self, guild_id: str, filename: str) -> bool:
        """Delete one image; False if it was already gone or could not be removed."""
        try:
            await aiofiles.os.remove(self._path(guild_id, filename))
        except FileNotFoundError:
            return False
        except (OSError, ValueError) as e:
            logger.error(f"Error removing kiss image {filename}: {e}")
            return False
        logger.info(f"Removed kiss image {filename} from guild {guild_id}")
        return True

    async def remove_all(self, guild_id: str) -> int:
        """Delete every image of the guild; returns how many were removed."""
        removed = 0
        for name in await self.list(guild_id):
            if await self.remove(guild_id, name):
                removed += 1
        return removed

    async def random(self, guild_id: str, rng: random.Random | None = None) -> Path | None:
        """Path to a random image of the guild, or None if the pool is empty."""
        names = await self.list(guild_id)
        if not names:
            return None
        return self.guild_dir(guild_id) / (rng or random).choice(names)
