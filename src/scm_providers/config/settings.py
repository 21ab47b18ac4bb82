"""
Configuration management for scm-providers.
"""
import os
from pathlib import Path
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
import yaml
from dotenv import load_dotenv


# Environment variables holding the auth token for each platform
TOKEN_ENV_VARS = {
    "github": "GITHUB_TOKEN",
    "gitlab": "GITLAB_TOKEN",
    "bitbucket": "BITBUCKET_TOKEN",
    "azurerepos": "AZURE_REPOS_TOKEN",
    "gitea": "GITEA_TOKEN",
}

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class AppConfig:
    """Application-level configuration."""
    name: str = "SCM Providers"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"


@dataclass
class HttpConfig:
    """HTTP client configuration shared by all providers."""
    timeout: int = 30
    verify_ssl: bool = True
    user_agent: str = "scm-providers/0.1.0"
    max_pages: int = 1000


@dataclass
class LoggingConfig:
    """Logging configuration."""
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str = "logs/scm_providers.log"
    max_size_mb: int = 10
    backup_count: int = 5


@dataclass
class Settings:
    """Main configuration class."""
    app: AppConfig = field(default_factory=AppConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    providers: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def load_from_file(cls, config_path: Optional[str] = None) -> "Settings":
        """Load settings from YAML file and environment variables."""
        # Load environment variables
        load_dotenv()

        # Determine config file path
        if config_path is None:
            config_path = os.getenv("SCM_PROVIDERS_CONFIG", "config/scm.yaml")

        config_path = Path(config_path)

        # Load YAML config if it exists
        config_data = {}
        if config_path.exists():
            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f) or {}

        settings = cls()

        if config_data:
            settings._update_from_dict(config_data)

        # Override with environment variables
        settings._update_from_env()

        return settings

    def _update_from_dict(self, data: Dict[str, Any]) -> None:
        """Update settings from dictionary."""
        if "app" in data:
            self._update_dataclass(self.app, data["app"])
        if "http" in data:
            self._update_dataclass(self.http, data["http"])
        if "logging" in data:
            self._update_dataclass(self.logging, data["logging"])
        if "providers" in data:
            for name, entry in (data["providers"] or {}).items():
                self.providers[name] = dict(entry or {})

    def _update_from_env(self) -> None:
        """Update settings from environment variables"""
        # Platform tokens only fill entries that don't carry one already
        for platform, env_var in TOKEN_ENV_VARS.items():
            token = os.getenv(env_var)
            if not token:
                continue
            for name, entry in self.providers.items():
                if entry.get("platform", name) == platform and not entry.get("token"):
                    entry["token"] = token

        if os.getenv("DEBUG"):
            self.app.debug = os.getenv("DEBUG").lower() in ("true", "1", "yes")

        if os.getenv("LOG_LEVEL"):
            self.app.log_level = os.getenv("LOG_LEVEL")

    @staticmethod
    def _update_dataclass(instance: Any, data: Dict[str, Any]) -> None:
        """Update a dataclass instance with dictionary data."""
        for key, value in data.items():
            if hasattr(instance, key):
                current_value = getattr(instance, key)
                if isinstance(current_value, dict) and isinstance(value, dict):
                    current_value.update(value)
                else:
                    setattr(instance, key, value)

    def token_for(self, platform: str) -> Optional[str]:
        """Return the auth token configured in the environment for a platform."""
        env_var = TOKEN_ENV_VARS.get(platform)
        return os.getenv(env_var) if env_var else None

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if self.app.log_level.upper() not in VALID_LOG_LEVELS:
            errors.append(f"Log level must be one of: {VALID_LOG_LEVELS}")

        if self.http.timeout <= 0:
            errors.append("HTTP timeout must be a positive number of seconds")

        if self.http.max_pages <= 0:
            errors.append("HTTP max_pages must be positive")

        for name, entry in self.providers.items():
            platform = entry.get("platform", name)
            if platform not in TOKEN_ENV_VARS:
                errors.append(
                    f"Provider '{name}' has unknown platform '{platform}' "
                    f"(expected one of: {sorted(TOKEN_ENV_VARS)})"
                )

        return errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary for serialization."""
        return {
            "app": self.app.__dict__,
            "http": self.http.__dict__,
            "logging": self.logging.__dict__,
            "providers": {
                name: {k: ("***" if k == "token" and v else v) for k, v in entry.items()}
                for name, entry in self.providers.items()
            },
        }


# Global settings instance
_settings: Optional[Settings] = None


def get_settings(config_path: Optional[str] = None, reload: bool = False) -> Settings:
    """Get the global settings instance."""
    global _settings

    if _settings is None or reload:
        _settings = Settings.load_from_file(config_path)

    return _settings


def reload_settings(config_path: Optional[str] = None) -> Settings:
    """Reload settings from file."""
    return get_settings(config_path, reload=True)
