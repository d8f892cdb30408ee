"""
Turn a chat message into (message, skill instructions to inject).

`/skill <id> [rest]` injects one named skill and strips the command.
Plain messages can optionally be matched against the registry and the
best skills injected alongside the unchanged message.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import re as _re
import typing as _typing

import skillregistry.skills.errors as errors
import skillregistry.skills.registry as skill_registry

_logger = _logging.getLogger(__name__)

_COMMAND_PREFIX = _re.compile(
    r"^/skill\s+(?P<id>[a-z0-9](?:[a-z0-9-]*[a-z0-9])?)(?:\s+(?P<rest>.*))?$",
    _re.I | _re.S,
)

TriggerType = _typing.Literal["explicit", "auto"]


@_dataclasses.dataclass
class SkillPreprocessResult:
    user_message: str
    skill_injection: str | None = None
    skill_ids: list[str] = _dataclasses.field(default_factory=list)
    trigger_type: TriggerType | None = None
    error: str | None = None

    @property
    def triggered(self) -> bool:
        return self.skill_injection is not None


def format_skill_injection_message(content: str, skill_id: str) -> str:
    """Wrap a skill body in the header the assistant is told to obey."""
    return f"[Skill '{skill_id}' activated - follow these instructions:]\n\n{content}"


def _explicit(
    message: str,
    skill_id: str,
    rest: str,
    registry: skill_registry.SkillRegistry,
) -> SkillPreprocessResult:
    try:
        body = registry.trigger_skill(skill_id)
    except errors.NotFoundError:
        known = ", ".join(record.id for record in registry.list_skills())
        _logger.debug("/skill named unknown id %s", skill_id)
        return SkillPreprocessResult(
            user_message=message,
            skill_ids=[skill_id],
            trigger_type="explicit",
            error=f"Skill '{skill_id}' not found. Available: {known}",
        )
    return SkillPreprocessResult(
        user_message=rest.strip(),
        skill_injection=format_skill_injection_message(body, skill_id),
        skill_ids=[skill_id],
        trigger_type="explicit",
    )


def _automatic(
    message: str,
    registry: skill_registry.SkillRegistry,
    limit: int,
) -> SkillPreprocessResult:
    ranked = registry.query(message, limit=limit).ids()
    if not ranked:
        return SkillPreprocessResult(user_message=message)

    _logger.debug("Auto-triggered %s", ranked)
    blocks = [format_skill_injection_message(registry.trigger_skill(i), i) for i in ranked]
    return SkillPreprocessResult(
        user_message=message,
        skill_injection="\n\n".join(blocks),
        skill_ids=ranked,
        trigger_type="auto",
    )


def preprocess_for_skills(
    user_message: str,
    registry: skill_registry.SkillRegistry | None,
    *,
    auto_trigger: bool = False,
    auto_limit: int = 1,
) -> SkillPreprocessResult:
    """
    Decide which skills, if any, to inject for a message.

    An explicit command takes precedence over auto_trigger. An unknown id
    leaves the message untouched and sets `error`. With no registry the
    message passes through.
    """
    if registry is None:
        return SkillPreprocessResult(user_message=user_message)

    command = _COMMAND_PREFIX.match(user_message.strip())
    if command is not None:
        return _explicit(
            user_message,
            command.group("id").lower(),
            command.group("rest") or "",
            registry,
        )

    if auto_trigger:
        return _automatic(user_message, registry, auto_limit)
    return SkillPreprocessResult(user_message=user_message)
