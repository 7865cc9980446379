"""Local disk storage for uploaded images."""

from pantrybot.storage.kiss_images import KissImageStore
from pantrybot.storage.uploads import UploadService

__all__ = ["KissImageStore", "UploadService"]
