"""
Gitea provider.
"""
from typing import Dict, Optional

from scm_providers.core.models import BranchInfo, TagInfo
from .base import RepositoryProvider, PlatformType
from .http import LinkHeaderPagination, with_query

PAGE_SIZE = 50


class GiteaProvider(RepositoryProvider):
    """Gitea (and Forgejo) provider; file content is served raw."""

    platform = PlatformType.GITEA

    @property
    def name(self) -> str:
        return "Gitea"

    def endpoint_url(self) -> str:
        return f"{self.config.endpoint}/repos/{self.project}"

    def content_url(self, path: str) -> str:
        return f"{self.endpoint_url()}/raw/{self.encode_path(path)}"

    def _branches_url(self) -> str:
        return with_query(f"{self.endpoint_url()}/branches", limit=PAGE_SIZE)

    def _tags_url(self) -> str:
        return with_query(f"{self.endpoint_url()}/tags", limit=PAGE_SIZE)

    def _extract_branch(self, record) -> Optional[BranchInfo]:
        return BranchInfo(record['name'], self._dig(record, 'commit', 'id'))

    def _extract_tag(self, record) -> Optional[TagInfo]:
        # Tags carry the commit under "sha", branches under "id"
        return TagInfo(record['name'], self._dig(record, 'commit', 'sha'))

    def pagination(self) -> LinkHeaderPagination:
        return LinkHeaderPagination()

    def _decode_content(self, response, path: str) -> bytes:
        return response.content

    def auth_headers(self) -> Dict[str, str]:
        if not self.config.auth_token:
            return {}
        return {'Authorization': f"token {self.config.auth_token}"}
