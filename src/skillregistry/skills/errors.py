"""
Error types raised by the skill registry.

Load-time errors (MalformedRecordError, DuplicateIdError) are fatal to the
load or reload that raised them; the previously active snapshot, if any,
is left untouched. NotFoundError and InvalidArgumentError reject a single
call and leave the registry fully usable.
"""

from __future__ import annotations


class SkillRegistryError(Exception):
    """Base class for all skill registry errors."""

    pass


class MalformedRecordError(SkillRegistryError, ValueError):
    """Raised when a raw skill definition is missing required fields."""

    def __init__(self, reason: str, *, index: int | None = None) -> None:
        self.reason = reason
        self.index = index
        if index is None:
            super().__init__(f"Malformed skill record: {reason}")
        else:
            super().__init__(f"Malformed skill record #{index}: {reason}")


class DuplicateIdError(SkillRegistryError):
    """Raised when two skill records share the same id."""

    def __init__(self, skill_id: str) -> None:
        self.skill_id = skill_id
        super().__init__(f"Duplicate skill id: {skill_id!r}")


class NotFoundError(SkillRegistryError, LookupError):
    """Raised when fetching a skill id that is not in the store."""

    def __init__(self, skill_id: str) -> None:
        self.skill_id = skill_id
        super().__init__(f"Skill not found: {skill_id!r}")


class InvalidArgumentError(SkillRegistryError, ValueError):
    """Raised for bad call parameters (e.g. a non-positive limit)."""

    pass
