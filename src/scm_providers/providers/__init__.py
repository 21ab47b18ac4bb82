"""Repository providers for source hosting services."""

from .base import (
    RepositoryProvider,
    ProviderConfig,
    PlatformType,
)
from .http import (
    HttpClient,
    PaginatedFetcher,
    PaginationStrategy,
    LinkHeaderPagination,
    PageNumberPagination,
    NextLinkPagination,
    ContinuationTokenPagination,
)
from .azure import AzureReposProvider
from .bitbucket import BitbucketProvider
from .gitea import GiteaProvider
from .github import GitHubProvider
from .gitlab import GitLabProvider
from .factory import ProviderFactory

__all__ = [
    "RepositoryProvider",
    "ProviderConfig",
    "PlatformType",
    "HttpClient",
    "PaginatedFetcher",
    "PaginationStrategy",
    "LinkHeaderPagination",
    "PageNumberPagination",
    "NextLinkPagination",
    "ContinuationTokenPagination",
    "AzureReposProvider",
    "BitbucketProvider",
    "GiteaProvider",
    "GitHubProvider",
    "GitLabProvider",
    "ProviderFactory",
]
