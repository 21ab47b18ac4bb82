"""
GitLab provider.
"""
from typing import Dict, Optional
from urllib.parse import quote

from scm_providers.core.models import BranchInfo, TagInfo
from .base import RepositoryProvider, PlatformType
from .http import PageNumberPagination, with_query

PAGE_SIZE = 100


class GitLabProvider(RepositoryProvider):
    """
    GitLab provider, for gitlab.com and self-managed instances.

    Projects are addressed by their URL-encoded full path, which may include
    nested groups (``group/subgroup/project``).
    """

    platform = PlatformType.GITLAB

    @property
    def name(self) -> str:
        return "GitLab"

    def endpoint_url(self) -> str:
        return f"{self.config.endpoint}/api/v4/projects/{quote(self.project, safe='')}"

    def content_url(self, path: str) -> str:
        # HEAD resolves to the default branch
        return f"{self.endpoint_url()}/repository/files/{self.encode_path(path, safe='')}?ref=HEAD"

    def _branches_url(self) -> str:
        return with_query(f"{self.endpoint_url()}/repository/branches", per_page=PAGE_SIZE)

    def _tags_url(self) -> str:
        return with_query(f"{self.endpoint_url()}/repository/tags", per_page=PAGE_SIZE)

    def _extract_branch(self, record) -> Optional[BranchInfo]:
        return BranchInfo(record['name'], self._dig(record, 'commit', 'id'))

    def _extract_tag(self, record) -> Optional[TagInfo]:
        return TagInfo(record['name'], self._dig(record, 'commit', 'id'))

    def pagination(self) -> PageNumberPagination:
        return PageNumberPagination()

    def _decode_content(self, response, path: str) -> bytes:
        return self._decode_envelope(response, path, encoding='base64')

    def auth_headers(self) -> Dict[str, str]:
        if not self.config.auth_token:
            return {}
        return {'PRIVATE-TOKEN': self.config.auth_token}
