"""Utility modules for scm-providers."""

from .logger import get_logger, log_function_call, LoggerSetup

__all__ = [
    "get_logger",
    "log_function_call",
    "LoggerSetup",
]
