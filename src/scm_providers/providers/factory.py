"""
Factory for creating platform-specific providers.
"""
from typing import Dict, Optional, Type, Union

from scm_providers.utils import get_logger
from scm_providers.config import get_settings
from scm_providers.core.exceptions import ConfigError
from .base import RepositoryProvider, ProviderConfig, PlatformType, DEFAULT_URLS, parse_platform

logger = get_logger(__name__)


class ProviderFactory:
    """Factory for creating repository providers."""

    _providers: Dict[PlatformType, Type[RepositoryProvider]] = {}  # Registry of available providers

    @classmethod
    def register_provider(cls, platform: PlatformType, provider_class: type):
        """
        Register a provider class for a platform.

        Args:
            platform: Platform type
            provider_class: Provider class to register
        """
        cls._providers[platform] = provider_class
        logger.debug(f"Registered provider for {platform.value}: {provider_class.__name__}")

    @classmethod
    def get_provider_class(cls, platform: Union[PlatformType, str]) -> Type[RepositoryProvider]:
        """
        Look up the provider class registered for a platform.

        Raises:
            ConfigError: If the platform is unknown or has no provider
        """
        platform = parse_platform(platform)
        if platform not in cls._providers:
            available = ", ".join(cls.list_available_platforms())
            raise ConfigError(
                f"Unsupported platform: {platform.value}. "
                f"Available platforms: {available}"
            )
        return cls._providers[platform]

    @classmethod
    def create_config(
        cls,
        name: str,
        token: Optional[str] = None,
        endpoint: Optional[str] = None,
        server: Optional[str] = None,
    ) -> ProviderConfig:
        """
        Build a provider configuration.

        ``name`` is either a provider entry from the settings file or a
        platform identifier. Explicit arguments win over the settings entry;
        a platform token from the environment is the last fallback.

        Raises:
            ConfigError: If ``name`` is neither a configured entry nor a platform
        """
        settings = get_settings()
        entry = settings.providers.get(name)

        if entry is None:
            entry = {'platform': parse_platform(name).value}

        platform = parse_platform(entry.get('platform', name))
        token = token or entry.get('token') or settings.token_for(platform.value)

        return ProviderConfig.from_dict(
            name,
            entry,
            auth_token=token,
            endpoint=endpoint,
            server=server,
            timeout=entry.get('timeout', settings.http.timeout),
            verify_ssl=entry.get('verify_ssl', settings.http.verify_ssl),
        )

    @classmethod
    def create_provider(
        cls,
        name: Union[PlatformType, str],
        project: str,
        config: Optional[ProviderConfig] = None,
        token: Optional[str] = None,
        endpoint: Optional[str] = None,
        server: Optional[str] = None,
    ) -> RepositoryProvider:
        """
        Create a provider instance for a project.

        Args:
            name: Platform type, platform identifier, or configured provider name
            project: Project identifier, e.g. "owner/repo"
            config: Ready-made configuration; built from settings if not given
            token: Authentication token (overrides configuration)
            endpoint: REST API root (overrides configuration)
            server: Web server root (overrides configuration)

        Returns:
            Configured provider instance

        Raises:
            ConfigError: If the platform or configuration is unknown or malformed
        """
        if isinstance(name, PlatformType):
            name = name.value

        if config is None:
            config = cls.create_config(name, token=token, endpoint=endpoint, server=server)

        provider_class = cls.get_provider_class(config.platform)
        provider = provider_class(project, config)

        logger.info(f"Created {config.platform.value} provider for {project}")
        return provider

    @staticmethod
    def default_urls(platform: Union[PlatformType, str]) -> Dict[str, str]:
        """Get the default server and endpoint of a platform."""
        server, endpoint = DEFAULT_URLS[parse_platform(platform)]
        return {'server': server, 'endpoint': endpoint}

    @classmethod
    def list_available_platforms(cls) -> list[str]:
        """Get list of available platforms."""
        return [platform.value for platform in cls._providers.keys()]


def _auto_register_providers():
    """Register the built-in providers."""
    from .azure import AzureReposProvider
    from .bitbucket import BitbucketProvider
    from .gitea import GiteaProvider
    from .github import GitHubProvider
    from .gitlab import GitLabProvider

    for provider_class in (
        GitHubProvider,
        GitLabProvider,
        BitbucketProvider,
        AzureReposProvider,
        GiteaProvider,
    ):
        ProviderFactory.register_provider(provider_class.platform, provider_class)


# Register providers on module import
_auto_register_providers()
