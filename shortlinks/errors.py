class ShortenerError(Exception):
    """Base class for errors surfaced by the shortener."""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message


class ValidationError(ShortenerError):
    status_code = 400


class InvalidEncoding(ValidationError):
    """A short code contains symbols outside the base-62 alphabet."""


class NotFound(ShortenerError):
    status_code = 404


class StorageError(ShortenerError):
    """The database failed; the underlying cause is chained, never shown to clients."""
