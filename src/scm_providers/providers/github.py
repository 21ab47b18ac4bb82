"""
GitHub provider.
"""
from typing import Dict, Optional

from scm_providers.core.exceptions import ContentNotFoundError
from scm_providers.core.models import BranchInfo, TagInfo
from .base import RepositoryProvider, PlatformType
from .http import LinkHeaderPagination, with_query

PAGE_SIZE = 100


class GitHubProvider(RepositoryProvider):
    """
    GitHub provider, for github.com and GitHub Enterprise Server.

    Listings are paged through the ``Link`` header; file content comes back
    Base64-encoded inside a JSON envelope.
    """

    platform = PlatformType.GITHUB

    @property
    def name(self) -> str:
        return "GitHub"

    def endpoint_url(self) -> str:
        return f"{self.config.endpoint}/repos/{self.project}"

    def content_url(self, path: str) -> str:
        return f"{self.endpoint_url()}/contents/{self.encode_path(path)}"

    def _branches_url(self) -> str:
        return with_query(f"{self.endpoint_url()}/branches", per_page=PAGE_SIZE)

    def _tags_url(self) -> str:
        return with_query(f"{self.endpoint_url()}/tags", per_page=PAGE_SIZE)

    def _extract_branch(self, record) -> Optional[BranchInfo]:
        return BranchInfo(record['name'], self._dig(record, 'commit', 'sha'))

    def _extract_tag(self, record) -> Optional[TagInfo]:
        return TagInfo(record['name'], self._dig(record, 'commit', 'sha'))

    def pagination(self) -> LinkHeaderPagination:
        return LinkHeaderPagination()

    def _decode_content(self, response, path: str) -> bytes:
        payload = self.client.decode_json(response)
        # Files over 1 MB come back without inline content
        if isinstance(payload, dict) and payload.get('encoding') == 'none':
            raise ContentNotFoundError(
                path,
                url=response.url,
                details=f"File too large for the contents API ({payload.get('size')} bytes)",
            )
        return self._decode_envelope(response, path, encoding='base64')

    def auth_headers(self) -> Dict[str, str]:
        if not self.config.auth_token:
            return {}
        return {'Authorization': f"token {self.config.auth_token}"}
