"""
HTTP access and paginated listing for repository providers.

``HttpClient`` performs single GET requests and turns failures into
``FetchError``. ``PaginatedFetcher`` walks a listing page by page, following
whatever cursor the vendor uses (see the ``PaginationStrategy`` subclasses),
and returns the transformed records of all pages in fetch order.
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, TypeVar
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import requests

from scm_providers.core.models import Page
from scm_providers.core.exceptions import FetchError, PaginationProtocolError
from scm_providers.utils import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# Raw JSON record as returned by the vendor API
RawRecord = Any


def with_query(url: str, **params: Any) -> str:
    """
    Return ``url`` with the given query parameters added or replaced.

    Args:
        url: Base URL, possibly with a query string
        **params: Parameters to set; existing values are overwritten

    Returns:
        URL with updated query string
    """
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in params]
    query.extend((k, str(v)) for k, v in params.items())
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query, safe='/$'), parts.fragment))


class HttpClient:
    """Thin wrapper around a requests session that raises our own errors."""

    def __init__(
        self,
        headers: Optional[Dict[str, str]] = None,
        timeout: int = 30,
        verify_ssl: bool = True,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            headers: Headers sent with every request (auth, user agent)
            timeout: Request timeout in seconds
            verify_ssl: Whether to verify TLS certificates
            session: Session to use; a new one is created if not given
        """
        self.session = session or requests.Session()
        if headers:
            self.session.headers.update(headers)
        self.timeout = timeout
        self.verify_ssl = verify_ssl

    def get(self, url: str) -> requests.Response:
        """
        Issue a GET request.

        Args:
            url: URL to fetch

        Returns:
            The successful response

        Raises:
            FetchError: On transport failure or non-success status
        """
        logger.debug(f"GET {url}")
        try:
            response = self.session.get(url, timeout=self.timeout, verify=self.verify_ssl)
        except requests.RequestException as e:
            raise FetchError(f"Request to {url} failed: {e}", url=url) from e

        if not response.ok:
            raise FetchError(
                f"HTTP {response.status_code} from {url}",
                status=response.status_code,
                url=url,
                details=response.text[:500] if response.text else None,
            )

        return response

    def get_json(self, url: str) -> Any:
        """GET ``url`` and decode the body as JSON."""
        response = self.get(url)
        return self.decode_json(response)

    @staticmethod
    def decode_json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise FetchError(
                f"Invalid JSON in response from {response.url}",
                status=response.status_code,
                url=response.url,
            ) from e

    def close(self) -> None:
        self.session.close()


class PaginationStrategy(ABC):
    """Vendor-specific way of locating records and the next page."""

    @abstractmethod
    def items(self, response: requests.Response, payload: Any) -> List[RawRecord]:
        """Extract the list of raw records from a decoded page."""
        pass

    @abstractmethod
    def next_url(self, response: requests.Response, payload: Any, current_url: str) -> Optional[str]:
        """Return the URL of the next page, or None on the last page."""
        pass

    def parse(self, response: requests.Response, payload: Any, current_url: str) -> Page:
        return Page(
            items=self.items(response, payload),
            next_url=self.next_url(response, payload, current_url),
        )

    @staticmethod
    def _require_list(value: Any, url: str) -> List[RawRecord]:
        if not isinstance(value, list):
            raise PaginationProtocolError(
                f"Expected a list of records in page from {url}, got {type(value).__name__}",
                url=url,
            )
        return value


class LinkHeaderPagination(PaginationStrategy):
    """Records are the body itself; next page comes from ``Link: <...>; rel="next"``."""

    def items(self, response, payload):
        return self._require_list(payload, response.url)

    def next_url(self, response, payload, current_url):
        link = response.links.get('next')
        if link is None:
            return None
        url = link.get('url', '').strip()
        if not url:
            raise PaginationProtocolError(
                f"Malformed Link header from {current_url}: {response.headers.get('Link')!r}",
                url=current_url,
            )
        return url


class PageNumberPagination(PaginationStrategy):
    """Records are the body itself; next page number comes from ``X-Next-Page``."""

    header = 'X-Next-Page'

    def items(self, response, payload):
        return self._require_list(payload, response.url)

    def next_url(self, response, payload, current_url):
        value = (response.headers.get(self.header) or '').strip()
        if not value:
            return None
        try:
            page = int(value)
        except ValueError:
            raise PaginationProtocolError(
                f"Malformed {self.header} header from {current_url}: {value!r}",
                url=current_url,
            )
        if page < 1:
            raise PaginationProtocolError(
                f"Invalid page number {page} from {current_url}",
                url=current_url,
            )
        return with_query(current_url, page=page)


class NextLinkPagination(PaginationStrategy):
    """Body is ``{"values": [...], "next": "<url>"}``."""

    items_field = 'values'
    next_field = 'next'

    def items(self, response, payload):
        if not isinstance(payload, dict):
            raise PaginationProtocolError(f"Expected an object page from {response.url}", url=response.url)
        return self._require_list(payload.get(self.items_field), response.url)

    def next_url(self, response, payload, current_url):
        value = payload.get(self.next_field)
        if value is None:
            return None
        if not isinstance(value, str) or not value.strip():
            raise PaginationProtocolError(
                f"Malformed '{self.next_field}' link in page from {current_url}: {value!r}",
                url=current_url,
            )
        return value


class ContinuationTokenPagination(PaginationStrategy):
    """
    Body is ``{"value": [...]}``; the continuation token comes from the
    ``x-ms-continuationtoken`` header (or a ``continuationToken`` body field)
    and is passed back as the ``continuationToken`` query parameter.
    """

    items_field = 'value'
    header = 'x-ms-continuationtoken'
    body_field = 'continuationToken'
    query_param = 'continuationToken'

    def items(self, response, payload):
        if not isinstance(payload, dict):
            raise PaginationProtocolError(f"Expected an object page from {response.url}", url=response.url)
        return self._require_list(payload.get(self.items_field), response.url)

    def next_url(self, response, payload, current_url):
        token = response.headers.get(self.header)
        if token is None:
            token = payload.get(self.body_field)
        if token is None:
            return None
        if not isinstance(token, str) or not token.strip():
            raise PaginationProtocolError(
                f"Malformed continuation token from {current_url}: {token!r}",
                url=current_url,
            )
        return with_query(current_url, **{self.query_param: token.strip()})


class PaginatedFetcher:
    """Collects every record of a paginated listing."""

    def __init__(self, client: HttpClient, strategy: PaginationStrategy, max_pages: int = 1000):
        self.client = client
        self.strategy = strategy
        self.max_pages = max_pages

    def fetch_all_pages(self, start_url: str, extract: Callable[[RawRecord], Optional[T]]) -> List[T]:
        """
        Fetch ``start_url`` and all following pages.

        Args:
            start_url: URL of the first page
            extract: Maps one raw record to a result; returning None drops it

        Returns:
            Extracted results, in page order then in-page order

        Raises:
            FetchError: If any page fails; nothing partial is returned
            PaginationProtocolError: On a malformed cursor, a cursor pointing
                at an already fetched page, or more than ``max_pages`` pages
        """
        results: List[T] = []
        visited = set()
        url: Optional[str] = start_url

        while url is not None:
            if url in visited:
                raise PaginationProtocolError(f"Pagination loops back to {url}", url=url)
            if len(visited) >= self.max_pages:
                raise PaginationProtocolError(
                    f"Listing from {start_url} exceeds {self.max_pages} pages",
                    url=url,
                )
            visited.add(url)

            response = self.client.get(url)
            payload = self.client.decode_json(response)
            page = self.strategy.parse(response, payload, url)

            for record in page.items:
                value = extract(record)
                if value is not None:
                    results.append(value)

            logger.debug(f"Fetched page {len(visited)} from {url}: {len(page.items)} records")
            url = page.next_url

        logger.debug(f"Listing {start_url} complete: {len(results)} results in {len(visited)} page(s)")
        return results
