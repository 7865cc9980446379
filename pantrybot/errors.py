"""
Error taxonomy shared by repositories, storage and the wizard layer.

User-facing errors carry a message that is safe to show verbatim in an
ephemeral reply. Anything else reaching a wizard callback is treated as an
internal fault and reported generically.
"""


class PantryError(Exception):
    """Base class for all PantryBot errors."""


class ValidationError(PantryError):
    """User-correctable input problem. The message is shown to the user."""


class DuplicateNameError(ValidationError):
    """An entity with the same name already exists in the same scope."""

    def __init__(self, entity: str, name: str, scope: str = "this server"):
        self.entity = entity
        self.name = name
        super().__init__(f'{entity} "{name}" already exists in {scope}!')


class UploadError(ValidationError):
    """Attachment download, type or size validation failed."""


class NotFoundError(PantryError):
    """A referenced entity no longer exists (stale selection)."""

    def __init__(self, entity: str, entity_id: str | None = None, message: str | None = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(message or f"{entity} not found!")
