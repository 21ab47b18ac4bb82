"""Custom exceptions for scm-providers."""

from scm_providers.utils import get_logger
from typing import Optional

logger = get_logger(__name__)


class ScmProviderError(Exception):
    """Base exception for scm-providers."""

    def __init__(self, message: str, details: str = None):
        super().__init__(message)
        self.message = message
        self.details = details

        # Log the exception when created
        logger.error(f"Exception raised: {message}")
        if details:
            logger.debug(f"Exception details: {details}")


class ConfigError(ScmProviderError):
    """Raised when a provider configuration is unknown or malformed."""
    pass


class FetchError(ScmProviderError):
    """Raised when an HTTP call returns a non-success status or fails in transit."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        url: Optional[str] = None,
        details: str = None
    ):
        super().__init__(message, details)
        self.status = status
        self.url = url


class ContentNotFoundError(ScmProviderError):
    """Raised when a file is absent remotely or its envelope has no content."""

    def __init__(self, path: str, url: Optional[str] = None, details: str = None):
        super().__init__(f"Content not found: {path}", details)
        self.path = path
        self.url = url


class PaginationProtocolError(ScmProviderError):
    """Raised when a page cursor is malformed or points back at a fetched page."""

    def __init__(self, message: str, url: Optional[str] = None, details: str = None):
        super().__init__(message, details)
        self.url = url
