"""
Guild-scoped file uploads.

Downloads Discord attachment URLs to ``<upload_dir>/<module dir>/<guild>/``,
validating extension, MIME type and size per module type, and returns the
path relative to the upload root. That relative path is what gets stored in
the database.
"""

import secrets
import time
from pathlib import Path, PurePosixPath
from urllib.parse import urlparse

import aiofiles
import aiofiles.os
import aiohttp

from pantrybot.config.logging import get_logger
from pantrybot.errors import UploadError

logger = get_logger(__name__)

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif"}

MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".gif": "image/gif",
}

# module type -> (folder under the upload root, file name prefix)
MODULE_LAYOUT = {
    "foods": ("foods", ""),
    "kiss": ("kiss-images", "kiss_"),
}

_CHUNK_SIZE = 64 * 1024


def file_extension(url_or_name: str) -> str:
    """Lower-cased extension of a URL or file name, ignoring any query string."""
    path = urlparse(url_or_name).path or url_or_name
    return PurePosixPath(path).suffix.lower()


def generate_filename(extension: str, prefix: str = "") -> str:
    """``<prefix><millis>-<random><extension>``, unique enough per guild folder."""
    return f"{prefix}{int(time.time() * 1000)}-{secrets.token_hex(4)}{extension}"


class UploadService:
    """
    Stores uploaded images on local disk.

    Args:
        root: Upload root directory
        max_file_size_mb: Size limit per module type
        allowed_types: Allowed MIME types per module type
        http: Optional shared aiohttp session; one is created on demand otherwise
    """

    def __init__(
        self,
        root: Path | str,
        max_file_size_mb: dict[str, int],
        allowed_types: dict[str, list[str]],
        http: aiohttp.ClientSession | None = None,
    ):
        self.root = Path(root)
        self.max_file_size_mb = dict(max_file_size_mb)
        self.allowed_types = {k: list(v) for k, v in allowed_types.items()}
        self._http = http
        self._owns_http = http is None

    async def initialize(self) -> None:
        for folder, _ in MODULE_LAYOUT.values():
            (self.root / folder).mkdir(parents=True, exist_ok=True)
        logger.info(f"Uploads will be stored in {self.root.resolve()}")

    async def shutdown(self) -> None:
        if self._owns_http and self._http is not None:
            await self._http.close()
            self._http = None

    async def __aenter__(self) -> "UploadService":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.shutdown()
        return False

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _layout(self, module_type: str) -> tuple[str, str]:
        if module_type not in MODULE_LAYOUT or module_type not in self.allowed_types:
            raise UploadError(f"Invalid module type: {module_type}")
        return MODULE_LAYOUT[module_type]

    def max_bytes(self, module_type: str) -> int:
        return self.max_file_size_mb.get(module_type, 5) * 1024 * 1024

    def validate_name(self, filename: str, module_type: str) -> str:
        """
        Check a file name against the module's allowed types.

        Returns:
            The normalized extension (e.g. ``.png``)

        Raises:
            UploadError: If the extension or its MIME type is not allowed
        """
        self._layout(module_type)
        extension = file_extension(filename)
        if extension not in IMAGE_EXTENSIONS:
            raise UploadError(f"Invalid file type: {extension or 'unknown'}")
        mime_type = MIME_TYPES[extension]
        if mime_type not in self.allowed_types[module_type]:
            allowed = ", ".join(sorted(t.split("/")[-1] for t in self.allowed_types[module_type]))
            raise UploadError(f"Invalid file type: {extension}. Allowed: {allowed}")
        return extension

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def _target(self, guild_id: str, module_type: str, extension: str) -> tuple[Path, str]:
        folder, prefix = self._layout(module_type)
        filename = generate_filename(extension, prefix)
        relative = PurePosixPath(folder, str(guild_id), filename)
        return self.root / relative, relative.as_posix()

    async def save_bytes(
        self,
        data: bytes,
        filename: str,
        guild_id: str,
        module_type: str,
    ) -> str:
        """
        Validate and store already-downloaded bytes.

        Returns:
            Relative path of the stored file
        """
        extension = self.validate_name(filename, module_type)
        if len(data) > self.max_bytes(module_type):
            raise UploadError(
                f"File too large. Maximum size: {self.max_file_size_mb.get(module_type, 5)}MB"
            )
        target, relative = self._target(guild_id, module_type, extension)
        target.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(target, "wb") as f:
            await f.write(data)
        logger.info(f"Saved {module_type} upload {relative} ({len(data)} bytes)")
        return relative

    async def upload_from_url(
        self,
        url: str,
        guild_id: str,
        module_type: str,
        filename: str | None = None,
    ) -> str:
        """
        Download an attachment into the guild's folder for ``module_type``.

        Args:
            url: Attachment URL
            filename: Original file name, preferred over the URL for type checks

        Returns:
            Relative path of the stored file

        Raises:
            UploadError: On invalid type, oversized file or download failure
        """
        extension = self.validate_name(filename or url, module_type)
        max_bytes = self.max_bytes(module_type)
        target, relative = self._target(guild_id, module_type, extension)
        target.parent.mkdir(parents=True, exist_ok=True)

        if self._http is None:
            self._http = aiohttp.ClientSession()

        written = 0
        try:
            async with self._http.get(url) as response:
                if response.status != 200:
                    raise UploadError(f"Download failed (HTTP {response.status})")
                if response.content_length and response.content_length > max_bytes:
                    raise UploadError(
                        f"File too large. Maximum size: {self.max_file_size_mb.get(module_type, 5)}MB"
                    )

                async with aiofiles.open(target, "wb") as f:
                    async for chunk in response.content.iter_chunked(_CHUNK_SIZE):
                        written += len(chunk)
                        if written > max_bytes:
                            raise UploadError(
                                f"File too large. Maximum size: "
                                f"{self.max_file_size_mb.get(module_type, 5)}MB"
                            )
                        await f.write(chunk)
        except UploadError:
            await self._discard(target)
            raise
        except (aiohttp.ClientError, OSError) as e:
            await self._discard(target)
            logger.error(f"Error uploading file for module {module_type}: {e}")
            raise UploadError("Could not download the attachment. Please try again.") from e

        logger.info(f"Saved {module_type} upload {relative} ({written} bytes)")
        return relative

    async def _discard(self, path: Path) -> None:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove partial upload {path}: {e}")

    # ------------------------------------------------------------------
    # Read / delete
    # ------------------------------------------------------------------

    def full_path(self, relative_path: str) -> Path:
        """
        Absolute path for a stored relative path.

        Raises:
            ValueError: If the path escapes the upload root
        """
        root = self.root.resolve()
        path = (root / relative_path).resolve()
        if not path.is_relative_to(root):
            raise ValueError(f"Path escapes upload root: {relative_path!r}")
        return path

    async def read_bytes(self, relative_path: str) -> bytes | None:
        """File contents, or ``None`` if the file is missing."""
        try:
            async with aiofiles.open(self.full_path(relative_path), "rb") as f:
                return await f.read()
        except FileNotFoundError:
            return None

    async def delete_file(self, relative_path: str) -> bool:
        """
        Best-effort delete of a stored file.

        Returns:
            True if a file was removed, False if it was missing or could not be removed
        """
        try:
            await aiofiles.os.remove(self.full_path(relative_path))
        except FileNotFoundError:
            return False
        except (OSError, ValueError) as e:
            logger.error(f"Error deleting file {relative_path}: {e}")
            return False
        logger.debug(f"Deleted upload {relative_path}")
        return True
