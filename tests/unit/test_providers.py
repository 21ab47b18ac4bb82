"""Tests for the GitHub, GitLab, Bitbucket and Gitea providers."""

import base64

import pytest

from scm_providers.core.exceptions import ContentNotFoundError, FetchError, PaginationProtocolError
from scm_providers.core.models import BranchInfo, TagInfo
from scm_providers.providers import (
    BitbucketProvider,
    GiteaProvider,
    GitHubProvider,
    GitLabProvider,
    ProviderConfig,
    ProviderFactory,
)
from tests.utils import branch_record


def b64(text: str) -> str:
    return base64.b64encode(text.encode('utf-8')).decode('ascii')


class TestGitHubProvider:
    """Test GitHub specifics."""

    @pytest.fixture
    def provider(self, github_config, fake_session):
        return GitHubProvider("nextflow-io/hello", github_config)

    def test_urls(self, provider):
        assert provider.name == "GitHub"
        assert provider.endpoint_url() == "https://api.github.com/repos/nextflow-io/hello"
        assert provider.content_url("conf/base config") == (
            "https://api.github.com/repos/nextflow-io/hello/contents/conf/base%20config"
        )
        assert provider.clone_url() == "https://github.com/nextflow-io/hello.git"
        assert provider.repository_url() == "https://github.com/nextflow-io/hello"

    def test_token_header(self, provider, fake_session):
        assert fake_session.headers['Authorization'] == "token gh_token"

    def test_branches_two_pages(self, provider, fake_session):
        first = provider._branches_url()
        second = "https://api.github.com/repositories/1/branches?per_page=100&page=2"
        fake_session.add(first, json_body=[branch_record("main", "abc")], headers={'Link': f'<{second}>; rel="next"'})
        fake_session.add(second, json_body=[branch_record("dev", "def")])

        assert provider.branches() == [BranchInfo("main", "abc"), BranchInfo("dev", "def")]

    def test_tags(self, provider, fake_session):
        fake_session.add(provider._tags_url(), json_body=[branch_record("v1.0", "111"), branch_record("v0.9", "000")])

        assert provider.tags() == [TagInfo("v1.0", "111"), TagInfo("v0.9", "000")]

    def test_read_content_base64(self, provider, fake_session):
        text = "println 'Hello world!'\n"
        # GitHub wraps Base64 at 60 characters
        encoded = b64(text)
        wrapped = "\n".join(encoded[i:i + 60] for i in range(0, len(encoded), 60))
        fake_session.add(provider.content_url("main.nf"), json_body={
            'name': 'main.nf',
            'encoding': 'base64',
            'content': wrapped,
        })

        assert provider.read_content("main.nf") == text.encode('utf-8')

    def test_read_binary_content(self, provider, fake_session):
        data = bytes(range(256))
        fake_session.add(provider.content_url("logo.png"), json_body={
            'content': base64.b64encode(data).decode('ascii'),
        })

        assert provider.read_content("logo.png") == data

    def test_read_corrupt_base64(self, provider, fake_session):
        good = b64("hello world!")
        fake_session.add(provider.content_url("main.nf"), json_body={
            'encoding': 'base64',
            'content': good[:4] + "!!!!" + good[4:],
        })

        with pytest.raises(FetchError, match="Corrupt Base64"):
            provider.read_content("main.nf")

    def test_read_large_file_without_inline_content(self, provider, fake_session):
        """Files over 1 MB are reported with encoding "none" and no content."""
        fake_session.add(provider.content_url("data.bin"), json_body={
            'name': 'data.bin',
            'size': 5242880,
            'encoding': 'none',
            'content': '',
        })

        with pytest.raises(ContentNotFoundError) as exc_info:
            provider.read_content("data.bin")
        assert exc_info.value.path == "data.bin"
        assert "5242880" in exc_info.value.details

    def test_read_empty_file(self, provider, fake_session):
        fake_session.add(provider.content_url("empty.txt"), json_body={'encoding': 'base64', 'content': ''})

        assert provider.read_content("empty.txt") == b""

    def test_enterprise_endpoint(self, fake_session):
        config = ProviderConfig(platform="github", server="https://github.acme.com")
        provider = GitHubProvider("team/tool", config)

        assert provider.endpoint_url() == "https://github.acme.com/api/v3/repos/team/tool"
        assert provider.clone_url() == "https://github.acme.com/team/tool.git"


class TestGitLabProvider:
    """Test GitLab specifics."""

    @pytest.fixture
    def provider(self, fake_session):
        config = ProviderConfig(platform="gitlab", auth_token="gl_token")
        return GitLabProvider("group/sub/project", config)

    def test_urls(self, provider):
        assert provider.name == "GitLab"
        assert provider.endpoint_url() == "https://gitlab.com/api/v4/projects/group%2Fsub%2Fproject"
        assert provider.content_url("src/main.nf") == (
            "https://gitlab.com/api/v4/projects/group%2Fsub%2Fproject/repository/files/src%2Fmain.nf?ref=HEAD"
        )
        assert provider.clone_url() == "https://gitlab.com/group/sub/project.git"

    def test_private_token_header(self, provider, fake_session):
        assert fake_session.headers['PRIVATE-TOKEN'] == "gl_token"
        assert 'Authorization' not in fake_session.headers

    def test_branches_page_numbers(self, provider, fake_session):
        first = provider._branches_url()
        fake_session.add(first, json_body=[{'name': 'main', 'commit': {'id': 'a1'}}], headers={'X-Next-Page': '2'})
        fake_session.add(first + "&page=2", json_body=[{'name': 'dev', 'commit': {'id': 'b2'}}], headers={'X-Next-Page': ''})

        assert provider.branches() == [BranchInfo("main", "a1"), BranchInfo("dev", "b2")]

    def test_malformed_page_header(self, provider, fake_session):
        fake_session.add(provider._tags_url(), json_body=[{'name': 'v1', 'commit': {'id': 'a1'}}], headers={'X-Next-Page': 'next'})

        with pytest.raises(PaginationProtocolError):
            provider.tags()

    def test_read_content(self, provider, fake_session):
        fake_session.add(provider.content_url("README.md"), json_body={
            'file_name': 'README.md',
            'encoding': 'base64',
            'content': b64("# Project\n"),
        })

        assert provider.read_text("README.md") == "# Project\n"


class TestBitbucketProvider:
    """Test Bitbucket specifics."""

    @pytest.fixture
    def provider(self, fake_session):
        return BitbucketProvider("team/pipeline", ProviderConfig(platform="bitbucket", auth_token="bb"))

    def test_urls(self, provider):
        assert provider.name == "Bitbucket"
        assert provider.endpoint_url() == "https://api.bitbucket.org/2.0/repositories/team/pipeline"
        assert provider.content_url("main.nf") == (
            "https://api.bitbucket.org/2.0/repositories/team/pipeline/src/HEAD/main.nf"
        )
        assert provider.clone_url() == "https://bitbucket.org/team/pipeline.git"

    def test_bearer_header(self, provider, fake_session):
        assert fake_session.headers['Authorization'] == "Bearer bb"

    def test_branches_next_link(self, provider, fake_session):
        first = provider._branches_url()
        second = "https://api.bitbucket.org/2.0/repositories/team/pipeline/refs/branches?page=2"
        fake_session.add(first, json_body={
            'values': [{'name': 'master', 'target': {'hash': 'h1'}}],
            'next': second,
        })
        fake_session.add(second, json_body={'values': [{'name': 'dev', 'target': {'hash': 'h2'}}]})

        assert provider.branches() == [BranchInfo("master", "h1"), BranchInfo("dev", "h2")]

    def test_read_raw_content(self, provider, fake_session):
        fake_session.add(provider.content_url("main.nf"), body="workflow { }\n")

        assert provider.read_content("main.nf") == b"workflow { }\n"

    def test_read_missing(self, provider, fake_session):
        with pytest.raises(ContentNotFoundError):
            provider.read_content("absent.nf")


class TestGiteaProvider:
    """Test Gitea specifics."""

    @pytest.fixture
    def provider(self, fake_session):
        return GiteaProvider("owner/repo", ProviderConfig(platform="gitea", auth_token="gt"))

    def test_urls(self, provider):
        assert provider.name == "Gitea"
        assert provider.endpoint_url() == "https://gitea.com/api/v1/repos/owner/repo"
        assert provider.content_url("main.nf") == "https://gitea.com/api/v1/repos/owner/repo/raw/main.nf"
        assert provider.clone_url() == "https://gitea.com/owner/repo.git"

    def test_token_header(self, provider, fake_session):
        assert fake_session.headers['Authorization'] == "token gt"

    def test_branch_and_tag_commit_fields(self, provider, fake_session):
        fake_session.add(provider._branches_url(), json_body=[{'name': 'main', 'commit': {'id': 'b1'}}])
        fake_session.add(provider._tags_url(), json_body=[{'name': 'v1', 'commit': {'sha': 't1'}}])

        assert provider.branches() == [BranchInfo("main", "b1")]
        assert provider.tags() == [TagInfo("v1", "t1")]

    def test_read_raw_content(self, provider, fake_session):
        fake_session.add(provider.content_url("main.nf"), body=b"\x00\x01binary")

        assert provider.read_content("main.nf") == b"\x00\x01binary"


LISTING_PAGES = [
    ("github", "owner/repo", lambda records: records),
    ("gitlab", "group/project", lambda records: records),
    ("bitbucket", "team/pipeline", lambda records: {'values': records}),
    ("azurerepos", "org/project", lambda records: {'value': records}),
    ("gitea", "owner/repo", lambda records: records),
]


class TestMalformedListingRecords:
    """Every vendor rejects listing records it can't read the same way."""

    @pytest.mark.parametrize("platform,project,page", LISTING_PAGES)
    def test_record_without_name(self, platform, project, page, fake_session):
        provider = ProviderFactory.create_provider(platform, project, token="x")
        fake_session.add(provider._branches_url(), json_body=page([{'commit': {'sha': 'abc'}}]))

        with pytest.raises(PaginationProtocolError) as exc_info:
            provider.branches()
        assert exc_info.value.url == provider._branches_url()

    @pytest.mark.parametrize("platform,project,page", LISTING_PAGES)
    def test_record_not_an_object(self, platform, project, page, fake_session):
        provider = ProviderFactory.create_provider(platform, project, token="x")
        fake_session.add(provider._tags_url(), json_body=page(["refs/tags/v1"]))

        with pytest.raises(PaginationProtocolError):
            provider.tags()

    @pytest.mark.parametrize("platform,project,page", LISTING_PAGES)
    def test_non_string_name(self, platform, project, page, fake_session):
        provider = ProviderFactory.create_provider(platform, project, token="x")
        fake_session.add(provider._branches_url(), json_body=page([{'name': 42}]))

        with pytest.raises(PaginationProtocolError):
            provider.branches()

    def test_malformed_record_not_cached(self, fake_session):
        provider = ProviderFactory.create_provider("github", "owner/repo", token="x")
        url = provider._branches_url()
        fake_session.add(url, json_body=[{'commit': {'sha': 'abc'}}])

        with pytest.raises(PaginationProtocolError):
            provider.branches()

        fake_session.add(url, json_body=[branch_record("main", "abc")])
        assert provider.branches() == [BranchInfo("main", "abc")]
