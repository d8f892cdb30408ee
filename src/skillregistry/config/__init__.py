"""
Configuration module for skillregistry.

Uses pydantic-settings for environment variable loading.
"""

from skillregistry.config.settings import (
    Settings,
    find_git_root,
    find_project_root,
)
from skillregistry.config.sources import ConfigFileError

__all__ = ["ConfigFileError", "Settings", "find_git_root", "find_project_root"]
