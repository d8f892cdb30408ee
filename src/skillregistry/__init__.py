"""
skillregistry - Skill registry and invocation resolver

Indexes named guidance documents ("skills") and decides which of them
are relevant to a description of the current development context.
"""

import importlib.metadata as _metadata

# pyproject.toml owns the version
__version__: str = _metadata.version("skillregistry")
__version_info__: tuple[int, ...] = tuple(int(part) for part in __version__.split(".")[:3])
__author__ = "skillregistry Contributors"

from skillregistry.config import Settings  # noqa: E402
from skillregistry.skills import SkillRegistry  # noqa: E402

__all__ = ["__version__", "__version_info__", "Settings", "SkillRegistry"]
