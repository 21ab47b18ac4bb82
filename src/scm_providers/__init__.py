"""Unified access to branches, tags and file content on source hosting services."""

# Initialize logging when package is imported
from .utils.logger import LoggerSetup

# Ensure logging is set up
LoggerSetup.setup_logging()

__version__ = "0.1.0"
