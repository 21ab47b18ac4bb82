"""
Bitbucket Cloud provider.
"""
from typing import Optional

from scm_providers.core.models import BranchInfo, TagInfo
from .base import RepositoryProvider, PlatformType
from .http import NextLinkPagination, with_query

PAGE_SIZE = 100


class BitbucketProvider(RepositoryProvider):
    """Bitbucket Cloud provider; file content is served raw."""

    platform = PlatformType.BITBUCKET

    @property
    def name(self) -> str:
        return "Bitbucket"

    def endpoint_url(self) -> str:
        return f"{self.config.endpoint}/2.0/repositories/{self.project}"

    def content_url(self, path: str) -> str:
        return f"{self.endpoint_url()}/src/HEAD/{self.encode_path(path)}"

    def _branches_url(self) -> str:
        return with_query(f"{self.endpoint_url()}/refs/branches", pagelen=PAGE_SIZE)

    def _tags_url(self) -> str:
        return with_query(f"{self.endpoint_url()}/refs/tags", pagelen=PAGE_SIZE)

    def _extract_branch(self, record) -> Optional[BranchInfo]:
        return BranchInfo(record['name'], self._dig(record, 'target', 'hash'))

    def _extract_tag(self, record) -> Optional[TagInfo]:
        return TagInfo(record['name'], self._dig(record, 'target', 'hash'))

    def pagination(self) -> NextLinkPagination:
        return NextLinkPagination()

    def _decode_content(self, response, path: str) -> bytes:
        return response.content
