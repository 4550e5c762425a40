"""Custom exception classes for the application."""

from typing import Any


class FolioError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# Content store errors
class ContentStoreError(FolioError):
    """The content store could not answer a lookup."""

    pass


class ContentStoreUnavailableError(ContentStoreError):
    """The content store failed transiently (connection, timeout, driver error)."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(
            f"Content store unavailable during {operation}: {message}",
            details={"operation": operation},
        )


class ContentNotFoundError(FolioError):
    """No published record exists for a collection/slug pair."""

    def __init__(self, collection: str, slug: str) -> None:
        super().__init__(
            f"Content not found: {collection}/{slug}",
            details={"collection": collection, "slug": slug},
        )
