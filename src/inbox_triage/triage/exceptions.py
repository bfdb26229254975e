"""
Triage-level exceptions raised by the classifier and the link extractor.
"""


class TriageError(Exception):
    """Base exception for message triage errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class MessageContentError(TriageError):
    """Raised when no usable body can be found in a message."""
    pass


class LinkNotFoundError(TriageError):
    """Raised when the model finds no unsubscribe link, or names an unknown one."""
    pass
