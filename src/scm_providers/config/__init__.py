"""Configuration management module."""

from .settings import (
    Settings,
    AppConfig,
    HttpConfig,
    LoggingConfig,
    TOKEN_ENV_VARS,
    get_settings,
    reload_settings,
)

__all__ = [
    "Settings",
    "AppConfig",
    "HttpConfig",
    "LoggingConfig",
    "TOKEN_ENV_VARS",
    "get_settings",
    "reload_settings",
]
