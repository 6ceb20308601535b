"""
Error taxonomy for the URL shortener.

Each error knows the HTTP status and the public ``{error, message}`` body it
maps to. The service layer hands these back inside a ``Result`` instead of
raising them at the API; only the store raises (``StoreError`` family).
"""

from typing import Optional


class ShortUrlError(Exception):
    """Base class for every failure the service can report."""

    status_code: int = 500
    error: str = "Internal server error"
    message: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, error: Optional[str] = None):
        if message is not None:
            self.message = message
        if error is not None:
            self.error = error
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.error, "message": self.message}


class InvalidUrlError(ShortUrlError):
    status_code = 400
    error = "Invalid URL format"
    message = "Please provide a valid URL"


class InvalidValidityError(ShortUrlError):
    status_code = 400
    error = "Invalid validity period"
    message = "Validity must be a positive integer representing minutes"


class InvalidShortcodeError(ShortUrlError):
    status_code = 400
    error = "Invalid shortcode format"
    message = "Shortcode must be 3-20 alphanumeric characters"


class ShortcodeCollisionError(ShortUrlError):
    status_code = 409
    error = "Shortcode already exists"
    message = "Please choose a different shortcode"


class NotFoundError(ShortUrlError):
    status_code = 404
    error = "Shortcode not found"
    message = "The requested shortcode does not exist or has expired"


class StoreError(ShortUrlError):
    """Persistence failure. ``detail`` is for logs, the body stays generic."""

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail
        super().__init__()

    def __str__(self):
        return self.detail or self.message


class ConflictError(StoreError):
    """Unique constraint violated on insert."""


class ShortcodeExhaustedError(StoreError):
    """No free shortcode found within the retry budget."""
