"""
Custom exceptions for the FeedHub application.

Feed errors are raised by the ingestion services and carry a plain message;
the HTTP errors are raised by routers and map straight onto responses.
"""

from fastapi import HTTPException, status


class FeedError(Exception):
    """Base class for feed ingestion errors."""


class SourceNotFoundError(FeedError):
    """Raised when a source id does not exist in the source store."""
    def __init__(self, source_id):
        self.source_id = source_id
        super().__init__(f"Source with ID {source_id} not found")


class FeedFetchError(FeedError):
    """Raised when a feed cannot be downloaded (network error or non-2xx)."""


class FeedParseError(FeedError):
    """Raised when a downloaded document is not a parsable RSS/Atom feed."""


class FeedValidationError(FeedError):
    """Raised when registration fails because the feed URL did not validate."""


class InvalidRefreshRateError(FeedError):
    """Raised when a refresh rate falls outside the allowed bounds."""


class UnsupportedSourceTypeError(FeedError):
    """Raised when a source kind other than RSS is asked to refresh."""


class SourceNotFoundHTTPError(HTTPException):
    """Raised when a source is not found."""
    def __init__(self, detail: str = "Source not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ContentNotFoundError(HTTPException):
    """Raised when a content item is not found."""
    def __init__(self, detail: str = "Content not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class UnauthorizedError(HTTPException):
    """Raised when user is not authorized to perform an action."""
    def __init__(self, detail: str = "Access denied"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class AuthenticationRequiredError(HTTPException):
    """Raised when the request carries no identity."""
    def __init__(self, detail: str = "Authentication required"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)
