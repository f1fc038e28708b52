"""
Common Notion Exceptions
"""


class NotionError(Exception):
    """Base exception for Notion errors."""
    pass


class NotionAuthError(NotionError):
    """Token rejected or missing permissions."""
    pass


class NotionNotConnectedError(NotionAuthError):
    """No Notion token is available for the user."""
    pass


class NotionRateLimitError(NotionError):
    """API rate limit exceeded."""
    pass


class NotionRequestError(NotionError):
    """Request failed after retries or was rejected by the API."""

    def __init__(self, message: str, status: int = None):
        super().__init__(message)
        self.status = status


class PropertyNotFoundError(NotionError):
    """A database has no property matching what an operation needs."""
    pass
