class StorageError(Exception):
    """Base class for storage failures"""


class ConstraintViolationError(StorageError):
    """A write broke a unique or foreign key constraint"""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field
