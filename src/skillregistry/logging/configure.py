"""
Logging setup helpers driven by Settings.
"""

import logging as _logging
import typing as _typing

import rich.console as _rich_console
import rich.logging as _rich_logging

import skillregistry.logging.event_logger as event_logger

if _typing.TYPE_CHECKING:
    import skillregistry.config as _config

_LEVELS = {
    "debug": _logging.DEBUG,
    "info": _logging.INFO,
    "warning": _logging.WARNING,
    "error": _logging.ERROR,
}


def configure_logging(level: str = "warning", *, verbose: bool = False) -> None:
    """
    Configure the skillregistry logger hierarchy.

    Records go to stderr through rich, so stdout stays clean for --json.

    Args:
        level: One of debug, info, warning, error.
        verbose: Force DEBUG regardless of level.
    """
    effective = _logging.DEBUG if verbose else _LEVELS.get(level.lower(), _logging.WARNING)
    logger = _logging.getLogger("skillregistry")
    logger.setLevel(effective)
    if not any(isinstance(h, _rich_logging.RichHandler) for h in logger.handlers):
        logger.addHandler(
            _rich_logging.RichHandler(
                console=_rich_console.Console(stderr=True),
                show_time=False,
                show_path=False,
            )
        )


def create_event_logger(settings: "_config.Settings") -> event_logger.RegistryEventLogger:
    """Create a RegistryEventLogger from the logging settings."""
    return event_logger.RegistryEventLogger(
        log_dir=settings.logs_dir,
        log_file=settings.log_file,
        private_mode=settings.logging.private,
        enabled=settings.logging.enabled,
    )
