"""Core functionality for scm-providers."""

from .models import (
    BranchInfo,
    TagInfo,
    Page,
)

from .exceptions import (
    ScmProviderError,
    ConfigError,
    FetchError,
    ContentNotFoundError,
    PaginationProtocolError,
)

__all__ = [
    # Models
    "BranchInfo",
    "TagInfo",
    "Page",
    # Exceptions
    "ScmProviderError",
    "ConfigError",
    "FetchError",
    "ContentNotFoundError",
    "PaginationProtocolError",
]
