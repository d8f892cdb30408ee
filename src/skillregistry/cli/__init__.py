"""
CLI module for skillregistry.

Provides the command-line interface using Click.
"""

from skillregistry.cli.main import cli, main

__all__ = ["main", "cli"]
