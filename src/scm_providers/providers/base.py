"""
Base provider interface for source hosting services.
"""
import base64
import binascii
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, TypeVar
from urllib.parse import quote, urlsplit

import requests

from scm_providers.cache import Memoizer, memoized
from scm_providers.config import get_settings
from scm_providers.core.models import BranchInfo, TagInfo
from scm_providers.core.exceptions import (
    ConfigError,
    ContentNotFoundError,
    FetchError,
    PaginationProtocolError,
)
from scm_providers.utils import get_logger
from .http import HttpClient, PaginatedFetcher, PaginationStrategy, RawRecord

logger = get_logger(__name__)

T = TypeVar("T")


class PlatformType(Enum):
    """Supported hosting platforms."""
    GITHUB = "github"
    GITLAB = "gitlab"
    BITBUCKET = "bitbucket"
    AZUREREPOS = "azurerepos"
    GITEA = "gitea"


# Default (server, endpoint) for each platform
DEFAULT_URLS = {
    PlatformType.GITHUB: ("https://github.com", "https://api.github.com"),
    PlatformType.GITLAB: ("https://gitlab.com", "https://gitlab.com"),
    PlatformType.BITBUCKET: ("https://bitbucket.org", "https://api.bitbucket.org"),
    PlatformType.AZUREREPOS: ("https://dev.azure.com", "https://dev.azure.com"),
    PlatformType.GITEA: ("https://gitea.com", "https://gitea.com/api/v1"),
}

# API root relative to the server for self-hosted instances
SELF_HOSTED_API_SUFFIX = {
    PlatformType.GITHUB: "/api/v3",
    PlatformType.GITEA: "/api/v1",
}


def parse_platform(value: Any) -> PlatformType:
    """
    Convert a platform identifier to ``PlatformType``.

    Raises:
        ConfigError: If the identifier is not a known platform
    """
    if isinstance(value, PlatformType):
        return value
    try:
        return PlatformType(str(value).strip().lower())
    except ValueError:
        known = ", ".join(p.value for p in PlatformType)
        raise ConfigError(f"Unknown platform: {value!r}. Known platforms: {known}")


def _normalize_url(value: str, field_name: str) -> str:
    value = value.strip().rstrip('/')
    parts = urlsplit(value)
    if parts.scheme not in ('http', 'https') or not parts.netloc:
        raise ConfigError(f"Malformed {field_name} URL: {value!r}")
    return value


@dataclass(frozen=True)
class ProviderConfig:
    """
    Immutable configuration of one hosting service.

    Attributes:
        platform: Platform identifier (a ``PlatformType`` or its string value)
        endpoint: REST API root
        server: Web server root, used for clone and repository URLs
        auth_token: Opaque token sent with every request, if any
        timeout: Request timeout in seconds
        verify_ssl: Whether to verify TLS certificates
        name: Name of the configuration entry this came from
    """
    platform: PlatformType
    endpoint: Optional[str] = None
    server: Optional[str] = None
    auth_token: Optional[str] = None
    timeout: int = 30
    verify_ssl: bool = True
    name: Optional[str] = None

    def __post_init__(self):
        platform = parse_platform(self.platform)
        default_server, default_endpoint = DEFAULT_URLS[platform]

        server = (self.server or default_server).strip().rstrip('/')
        endpoint = self.endpoint
        if not endpoint:
            if server == default_server:
                endpoint = default_endpoint
            else:
                endpoint = server + SELF_HOSTED_API_SUFFIX.get(platform, '')

        if self.timeout <= 0:
            raise ConfigError(f"Timeout must be positive, got {self.timeout}")

        # Frozen dataclass: normalized values are written through object.__setattr__
        object.__setattr__(self, 'platform', platform)
        object.__setattr__(self, 'server', _normalize_url(server, 'server'))
        object.__setattr__(self, 'endpoint', _normalize_url(endpoint, 'endpoint'))
        object.__setattr__(self, 'name', self.name or platform.value)

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any], **overrides) -> "ProviderConfig":
        """
        Build a configuration from a persisted provider entry.

        Args:
            name: Entry name; used as the platform when ``platform`` is absent
            data: Entry with ``platform``, ``server``, ``endpoint``, ``token``
            **overrides: Values taking precedence over the entry

        Raises:
            ConfigError: If the entry is malformed
        """
        if not isinstance(data, dict):
            raise ConfigError(f"Provider entry '{name}' must be a mapping")

        values = {
            'platform': data.get('platform', name),
            'endpoint': data.get('endpoint'),
            'server': data.get('server'),
            'auth_token': data.get('token'),
            'timeout': data.get('timeout', 30),
            'verify_ssl': data.get('verify_ssl', True),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            timeout = int(values.pop('timeout'))
        except (TypeError, ValueError):
            raise ConfigError(f"Provider entry '{name}' has a non-numeric timeout")

        return cls(name=name, timeout=timeout, **values)

    def __repr__(self) -> str:
        return (
            f"ProviderConfig(name={self.name!r}, platform={self.platform.value!r}, "
            f"endpoint={self.endpoint!r}, server={self.server!r}, "
            f"auth_token={'***' if self.auth_token else None})"
        )


class RepositoryProvider(ABC):
    """
    Base interface for a hosting service holding one project.

    Subclasses supply the vendor URL templates, how branch and tag records
    map to ``BranchInfo``/``TagInfo``, the pagination strategy and how file
    content is decoded. Callers only use the methods defined here.
    """

    platform: PlatformType

    def __init__(self, project: str, config: Optional[ProviderConfig] = None):
        """
        Initialize the provider.

        Args:
            project: Project identifier, e.g. "owner/repo"
            config: Provider configuration; platform defaults if not given

        Raises:
            ConfigError: If the project is empty or the config is for another platform
        """
        if not project or not project.strip('/'):
            raise ConfigError("Project identifier must not be empty")

        if config is None:
            http = get_settings().http
            config = ProviderConfig(self.platform, timeout=http.timeout, verify_ssl=http.verify_ssl)
        elif config.platform != self.platform:
            raise ConfigError(
                f"{self.__class__.__name__} requires a '{self.platform.value}' "
                f"configuration, got '{config.platform.value}'"
            )

        self.project = project.strip('/')
        self.config = config
        segments = self.project.split('/')
        self.user = segments[0]
        self.repo = segments[-1]

        self._memo = Memoizer()
        self.client = self._create_client()
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")
        self.logger.debug(f"Initialized {self!r}")

    # -- identity ---------------------------------------------------------

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable vendor label."""
        pass

    @property
    def has_credentials(self) -> bool:
        return bool(self.config.auth_token)

    # -- URLs -------------------------------------------------------------

    @abstractmethod
    def endpoint_url(self) -> str:
        """REST root of this project."""
        pass

    @abstractmethod
    def content_url(self, path: str) -> str:
        """
        URL returning the content of ``path`` on the default branch.

        Args:
            path: Path of a file in the repository; URL-encoded in the result
        """
        pass

    def clone_url(self) -> str:
        """URL usable for ``git clone``."""
        return f"{self.config.server}/{self.project}.git"

    def repository_url(self) -> str:
        """Web URL of the project."""
        return f"{self.config.server}/{self.project}"

    # -- listings ---------------------------------------------------------

    @memoized
    def branches(self) -> List[BranchInfo]:
        """
        List all branches.

        Fetched once per provider instance; later calls return the same list.

        Raises:
            FetchError: If any page of the listing fails
            PaginationProtocolError: If a page cursor or a record is malformed
        """
        self.logger.info(f"Fetching branches of {self.project} from {self.name}")
        branches = self._fetch_all(self._branches_url(), self._extract_branch)
        self.logger.info(f"Found {len(branches)} branches in {self.project}")
        return branches

    @memoized
    def tags(self) -> List[TagInfo]:
        """
        List all tags.

        Fetched once per provider instance; later calls return the same list.

        Raises:
            FetchError: If any page of the listing fails
            PaginationProtocolError: If a page cursor or a record is malformed
        """
        self.logger.info(f"Fetching tags of {self.project} from {self.name}")
        tags = self._fetch_all(self._tags_url(), self._extract_tag)
        self.logger.info(f"Found {len(tags)} tags in {self.project}")
        return tags

    @abstractmethod
    def _branches_url(self) -> str:
        pass

    @abstractmethod
    def _tags_url(self) -> str:
        pass

    @abstractmethod
    def _extract_branch(self, record: RawRecord) -> Optional[BranchInfo]:
        pass

    @abstractmethod
    def _extract_tag(self, record: RawRecord) -> Optional[TagInfo]:
        pass

    @abstractmethod
    def pagination(self) -> PaginationStrategy:
        """Pagination strategy used by this vendor's listing endpoints."""
        pass

    # -- content ----------------------------------------------------------

    def read_content(self, path: str) -> bytes:
        """
        Read a file from the default branch.

        Args:
            path: Path of the file in the repository

        Returns:
            File content as stored remotely

        Raises:
            ContentNotFoundError: If the file doesn't exist or the envelope has no content
            FetchError: For any other failed request
        """
        url = self.content_url(path)
        self.logger.debug(f"Reading {path} from {url}")
        try:
            response = self.client.get(url)
        except FetchError as e:
            if e.status == 404:
                raise ContentNotFoundError(path, url=url) from e
            raise
        return self._decode_content(response, path)

    def read_text(self, path: str, encoding: str = 'utf-8') -> str:
        """Read a file and decode it as text."""
        return self.read_content(path).decode(encoding)

    @abstractmethod
    def _decode_content(self, response: requests.Response, path: str) -> bytes:
        pass

    def _decode_envelope(self, response: requests.Response, path: str, encoding: str) -> bytes:
        """
        Decode a JSON content envelope.

        Args:
            response: Response whose body is a JSON object with a ``content`` field
            path: Requested path, for error reporting
            encoding: ``base64`` for Base64 content, ``text`` for a JSON string
                holding the file text

        Raises:
            ContentNotFoundError: If the envelope has no content field
            FetchError: If the body isn't JSON or the Base64 is corrupt
        """
        payload = self.client.decode_json(response)
        content = payload.get('content') if isinstance(payload, dict) else None
        if content is None:
            raise ContentNotFoundError(path, url=response.url, details="Envelope has no 'content' field")
        if not isinstance(content, str):
            content = json.dumps(content)

        if encoding == 'base64':
            try:
                # Vendors wrap Base64 lines; anything else outside the alphabet is corruption
                return base64.b64decode("".join(content.split()).encode('ascii'), validate=True)
            except (binascii.Error, UnicodeEncodeError) as e:
                raise FetchError(
                    f"Corrupt Base64 content for {path}",
                    status=response.status_code,
                    url=response.url,
                ) from e

        return content.encode('utf-8')

    # -- plumbing ---------------------------------------------------------

    def auth_headers(self) -> Dict[str, str]:
        """Headers carrying the auth token; vendors override the scheme."""
        if not self.config.auth_token:
            return {}
        return {'Authorization': f"Bearer {self.config.auth_token}"}

    def _create_client(self) -> HttpClient:
        headers = {
            'Accept': 'application/json',
            'User-Agent': get_settings().http.user_agent,
        }
        headers.update(self.auth_headers())
        return HttpClient(
            headers=headers,
            timeout=self.config.timeout,
            verify_ssl=self.config.verify_ssl,
        )

    def _fetch_all(self, url: str, extract: Callable[[RawRecord], Optional[T]]) -> List[T]:
        fetcher = PaginatedFetcher(self.client, self.pagination(), get_settings().http.max_pages)

        def checked(record: RawRecord) -> Optional[T]:
            if not isinstance(record, dict) or not isinstance(record.get('name'), str) or not record['name']:
                raise PaginationProtocolError(
                    f"Malformed record in listing from {url}: expected an object with a 'name', "
                    f"got {type(record).__name__}",
                    url=url,
                )
            return extract(record)

        return fetcher.fetch_all_pages(url, checked)

    def validate_repo(self) -> bool:
        """
        Check that the project is reachable.

        Raises:
            FetchError: If the project REST root can't be fetched
        """
        self.client.get(self.endpoint_url())
        self.logger.info(f"Project {self.project} is reachable on {self.name}")
        return True

    @staticmethod
    def encode_path(path: str, safe: str = '/') -> str:
        """Percent-encode a repository path, keeping ``safe`` characters."""
        return quote(path.lstrip('/'), safe=safe)

    @staticmethod
    def _dig(record: RawRecord, *keys: str) -> Optional[Any]:
        """Walk nested dictionaries, returning None if any step is missing."""
        value = record
        for key in keys:
            if not isinstance(value, dict):
                return None
            value = value.get(key)
        return value

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"project={self.project}, "
            f"platform={self.config.platform.value}, "
            f"endpoint={self.config.endpoint})"
        )
