"""
Store exceptions.

File-system errors (OSError) are not wrapped: they propagate as-is so the
caller sees the real cause.
"""


class StoreError(Exception):
    """Base exception for memoized store errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class StoreClosedError(StoreError):
    """Raised when an operation is attempted on a store that is not open."""
    pass


class StoreCorruptedError(StoreError):
    """Raised when the persisted document cannot be parsed."""
    pass


class UnknownPropertyError(StoreError, ValueError):
    """Raised for a property name that CacheEntry does not define."""
    pass
