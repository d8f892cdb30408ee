"""
Skills: what callers supply, what the store keeps, and how SKILL.md maps
onto both.

RawSkillDefinition is the loose input form (id optional, body optional).
SkillRecord is the frozen, indexed form the store hands out; its triggers
are computed once from the description and never recomputed.

On disk a skill is a directory whose SKILL.md starts with a YAML block
fenced by `---` lines. The block's `name` becomes the id, `title` (or
`name`) the display name; everything after the closing fence is the body.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import yaml as _yaml

import skillregistry.constants as constants
import skillregistry.skills.errors as errors
import skillregistry.skills.normalize as normalize

_logger = _logging.getLogger(__name__)

_FENCE = "---"

SkillSource = _typing.Literal["builtin", "global", "custom", "project", "inline"]

SkillId = _typing.Annotated[
    str,
    _pydantic.StringConstraints(
        min_length=1,
        max_length=64,
        pattern=r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?$",
    ),
]


class RawSkillDefinition(_pydantic.BaseModel):
    """Caller-supplied skill; `id` falls back to slugify(name)."""

    model_config = _pydantic.ConfigDict(extra="ignore", frozen=True)

    id: str | None = None
    name: str
    description: str
    body: str = ""
    source: SkillSource = "inline"
    path: _pathlib.Path | None = None

    @_pydantic.field_validator("name", "description")
    @classmethod
    def _require_text(cls, value: str) -> str:
        if value.strip():
            return value
        raise ValueError("must not be blank")

    @_pydantic.field_validator("id")
    @classmethod
    def _strip_id(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError("must not be blank when given")
        return value

    def resolve_id(self) -> str:
        return self.id if self.id is not None else normalize.slugify(self.name)


@_dataclasses.dataclass(frozen=True)
class SkillRecord:
    """A stored skill. Immutable once the store has built it."""

    id: str
    name: str
    description: str
    body: str
    triggers: frozenset[str]
    source: str = "inline"
    path: _pathlib.Path | None = None

    @property
    def terms(self) -> frozenset[str]:
        return frozenset(t for t in self.triggers if not normalize.is_phrase(t))

    @property
    def phrases(self) -> frozenset[str]:
        return frozenset(t for t in self.triggers if normalize.is_phrase(t))

    @property
    def body_line_count(self) -> int:
        return len(self.body.splitlines())

    @property
    def exceeds_soft_limit(self) -> bool:
        """Body longer than SKILL_BODY_SOFT_LIMIT lines."""
        return self.body_line_count > constants.SKILL_BODY_SOFT_LIMIT

    def get_metadata_for_prompt(self) -> str:
        return f"**{self.id}**: {self.description}"

    def to_dict(self) -> dict[str, _typing.Any]:
        """The four fields a fetch returns."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "body": self.body,
        }

    def to_summary(self) -> dict[str, _typing.Any]:
        """Listing view: everything except the body."""
        summary = self.to_dict()
        del summary["body"]
        summary.update(
            source=self.source,
            path=None if self.path is None else str(self.path),
            body_lines=self.body_line_count,
            exceeds_limit=self.exceeds_soft_limit,
            triggers=sorted(self.triggers),
        )
        return summary


def make_record(
    definition: RawSkillDefinition,
    normalizer: normalize.TextNormalizer,
) -> SkillRecord:
    return SkillRecord(
        id=definition.resolve_id(),
        name=definition.name,
        description=definition.description,
        body=definition.body,
        triggers=normalizer.triggers(definition.description),
        source=definition.source,
        path=definition.path,
    )


class SkillFrontmatter(_pydantic.BaseModel):
    """The YAML block at the top of SKILL.md. Unknown keys are kept."""

    model_config = _pydantic.ConfigDict(extra="allow")

    name: SkillId
    description: _typing.Annotated[str, _pydantic.StringConstraints(min_length=1, max_length=1024)]
    title: str | None = None
    license: str | None = None
    metadata: dict[str, _typing.Any] = _pydantic.Field(default_factory=dict)


def split_frontmatter(content: str) -> tuple[str, str]:
    """
    Separate SKILL.md text into (frontmatter YAML, body).

    The first line must be `---`; the block ends at the next `---` line.
    The body is returned with surrounding blank space removed.
    """
    lines = content.splitlines()
    if not lines or lines[0].strip() != _FENCE:
        raise errors.MalformedRecordError("SKILL.md must start with a --- frontmatter block")
    for end in range(1, len(lines)):
        if lines[end].strip() == _FENCE:
            return "\n".join(lines[1:end]), "\n".join(lines[end + 1 :]).strip()
    raise errors.MalformedRecordError("SKILL.md frontmatter block is not closed by ---")


def parse_skill_markdown(content: str) -> tuple[SkillFrontmatter, str]:
    """
    Parse SKILL.md text.

    Raises:
        MalformedRecordError: no frontmatter block, YAML that does not
            parse, or fields that fail validation.
    """
    block, body = split_frontmatter(content)
    try:
        data = _yaml.safe_load(block)
    except _yaml.YAMLError as e:
        raise errors.MalformedRecordError(f"frontmatter is not valid YAML: {e}") from e

    if not isinstance(data, dict):
        raise errors.MalformedRecordError("frontmatter must be a YAML mapping")
    try:
        return SkillFrontmatter.model_validate(data), body
    except _pydantic.ValidationError as e:
        raise errors.MalformedRecordError(f"frontmatter rejected: {e}") from e


def load_skill_definition(
    skill_dir: _pathlib.Path,
    source: SkillSource = "project",
) -> RawSkillDefinition:
    """
    Read <skill_dir>/SKILL.md into a RawSkillDefinition.

    Bodies over the soft line limit are accepted with a warning.

    Raises:
        FileNotFoundError: skill_dir has no SKILL.md.
        MalformedRecordError: SKILL.md cannot be read, parsed or validated.
    """
    document = skill_dir / constants.SKILL_FILENAME
    if not document.is_file():
        raise FileNotFoundError(f"{constants.SKILL_FILENAME} not found in {skill_dir}")

    try:
        content = document.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise errors.MalformedRecordError(f"cannot read {document}: {e}") from e

    frontmatter, body = parse_skill_markdown(content)
    try:
        definition = RawSkillDefinition(
            id=frontmatter.name,
            name=frontmatter.title or frontmatter.name,
            description=frontmatter.description,
            body=body,
            source=source,
            path=skill_dir.resolve(),
        )
    except _pydantic.ValidationError as e:
        raise errors.MalformedRecordError(f"frontmatter rejected: {e}") from e

    lines = len(body.splitlines())
    if lines > constants.SKILL_BODY_SOFT_LIMIT:
        _logger.warning(
            "%s: body is %d lines, over the %d line guideline",
            document,
            lines,
            constants.SKILL_BODY_SOFT_LIMIT,
        )
    return definition
