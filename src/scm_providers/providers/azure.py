"""
Azure Repos provider.
"""
import base64
from typing import Dict, Optional

from scm_providers.core.models import BranchInfo, TagInfo
from .base import RepositoryProvider, PlatformType, ProviderConfig
from .http import ContinuationTokenPagination

API_VERSION = "6.0"

HEADS_PREFIX = "refs/heads/"
TAGS_PREFIX = "refs/tags/"


class AzureReposProvider(RepositoryProvider):
    """
    Azure DevOps (Azure Repos) provider.

    Project identifiers are ``organization/project`` when the repository is
    named after the project, or ``organization/project/repository``.
    Branches and tags both come from the ``refs`` endpoint, told apart by
    the ``filter`` query parameter and the ``refs/heads/``/``refs/tags/``
    name prefix.
    """

    platform = PlatformType.AZUREREPOS

    def __init__(self, project: str, config: Optional[ProviderConfig] = None):
        super().__init__(project, config)
        segments = self.project.split('/')
        # Path in front of _apis: organization/project
        self.project_path = '/'.join(segments[:-1]) if len(segments) > 2 else self.project

    @property
    def name(self) -> str:
        return "Azure Repos"

    def endpoint_url(self) -> str:
        return f"{self.config.endpoint}/{self.project_path}/_apis/git/repositories/{self.repo}"

    def content_url(self, path: str) -> str:
        return (
            f"{self.endpoint_url()}/items?download=false&includeContent=true"
            f"&includeContentMetadata=false&api-version={API_VERSION}"
            f"&$format=json&path={self.encode_path(path)}"
        )

    def clone_url(self) -> str:
        return f"{self.config.server}/{self.project_path}/_git/{self.repo}"

    def repository_url(self) -> str:
        if self.project_path == self.project:
            return super().repository_url()
        # The repository lives under _git when it is not named after the project
        return self.clone_url()

    def _branches_url(self) -> str:
        return f"{self.endpoint_url()}/refs?filter=heads/&api-version={API_VERSION}"

    def _tags_url(self) -> str:
        return f"{self.endpoint_url()}/refs?filter=tags/&api-version={API_VERSION}"

    def _extract_branch(self, record) -> Optional[BranchInfo]:
        name = self._strip_ref(record['name'], HEADS_PREFIX)
        if name is None:
            return None
        return BranchInfo(name, record.get('objectId') or self._dig(record, 'commit', 'sha'))

    def _extract_tag(self, record) -> Optional[TagInfo]:
        name = self._strip_ref(record['name'], TAGS_PREFIX)
        if name is None:
            return None
        # Annotated tags point at a tag object; the peeled id is the commit
        commit = record.get('peeledObjectId') or record.get('objectId') or self._dig(record, 'commit', 'sha')
        return TagInfo(name, commit)

    @staticmethod
    def _strip_ref(name: str, prefix: str) -> Optional[str]:
        if name.startswith(prefix):
            return name[len(prefix):]
        if name.startswith('refs/'):
            # A ref of another kind slipped through the filter
            return None
        return name

    def pagination(self) -> ContinuationTokenPagination:
        return ContinuationTokenPagination()

    def _decode_content(self, response, path: str) -> bytes:
        # The file text is carried as a JSON string
        return self._decode_envelope(response, path, encoding='text')

    def auth_headers(self) -> Dict[str, str]:
        if not self.config.auth_token:
            return {}
        # Personal access tokens go in basic auth with an empty user name
        credentials = base64.b64encode(f":{self.config.auth_token}".encode('utf-8')).decode('ascii')
        return {'Authorization': f"Basic {credentials}"}
