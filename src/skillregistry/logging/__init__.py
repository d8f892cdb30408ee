"""
Logging for skillregistry.

Provides JSONL logging of registry events (loads, reloads, queries),
plus the stdlib logging setup used by the CLI.
"""

from skillregistry.logging.configure import configure_logging, create_event_logger
from skillregistry.logging.event_logger import RegistryEventLogger

__all__ = [
    "RegistryEventLogger",
    "configure_logging",
    "create_event_logger",
]
