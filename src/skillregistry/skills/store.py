"""
Document store holding immutable skill records.

A store is produced in one step by SkillStore.load() and never mutated
afterwards. Reloading means building a new store, so no reader can ever
observe a half-populated one.
"""

from __future__ import annotations

import collections.abc as _abc
import logging as _logging
import types as _types
import typing as _typing

import pydantic as _pydantic

import skillregistry.skills.errors as errors
import skillregistry.skills.normalize as normalize
import skillregistry.skills.skill as skill_module

_logger = _logging.getLogger(__name__)

RawRecord = skill_module.RawSkillDefinition | _abc.Mapping[str, _typing.Any]


def _coerce_definition(raw: RawRecord, index: int) -> skill_module.RawSkillDefinition:
    """Validate one raw record into a RawSkillDefinition."""
    if isinstance(raw, skill_module.RawSkillDefinition):
        return raw
    if not isinstance(raw, _abc.Mapping):
        raise errors.MalformedRecordError(
            f"expected a mapping, got {type(raw).__name__}",
            index=index,
        )
    try:
        return skill_module.RawSkillDefinition.model_validate(dict(raw))
    except _pydantic.ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'record'}: {err['msg']}"
            for err in e.errors()
        )
        raise errors.MalformedRecordError(problems, index=index) from e


class SkillStore:
    """
    Immutable mapping from skill id to SkillRecord.

    Records keep the order in which they were supplied to load().
    """

    def __init__(
        self,
        records: _abc.Mapping[str, skill_module.SkillRecord],
        normalizer: normalize.TextNormalizer,
    ) -> None:
        """
        Wrap already-validated records. Use SkillStore.load() instead.

        Args:
            records: id -> record mapping, in insertion order.
            normalizer: Normalizer that derived the records' triggers.
        """
        self._records = _types.MappingProxyType(dict(records))
        self._normalizer = normalizer

    @classmethod
    def load(
        cls,
        records: _abc.Iterable[RawRecord],
        *,
        normalizer: normalize.TextNormalizer | None = None,
    ) -> SkillStore:
        """
        Validate raw definitions and build a store.

        Args:
            records: Raw skill definitions (models or plain mappings).
            normalizer: Normalizer used to derive triggers. Defaults to
                a TextNormalizer with the default stop words.

        Returns:
            Fully populated store.

        Raises:
            MalformedRecordError: If a record lacks a non-empty name or
                description, or its id cannot be derived.
            DuplicateIdError: If two records resolve to the same id.
        """
        normalizer = normalizer or normalize.TextNormalizer()
        built: dict[str, skill_module.SkillRecord] = {}

        for index, raw in enumerate(records):
            definition = _coerce_definition(raw, index)
            skill_id = definition.resolve_id()
            if not skill_id:
                raise errors.MalformedRecordError(
                    f"cannot derive an id from name {definition.name!r}",
                    index=index,
                )
            if skill_id in built:
                raise errors.DuplicateIdError(skill_id)
            built[skill_id] = skill_module.make_record(definition, normalizer)

        _logger.debug("Loaded %d skill records", len(built))
        return cls(built, normalizer)

    @property
    def normalizer(self) -> normalize.TextNormalizer:
        """Normalizer that derived every record's triggers."""
        return self._normalizer

    def get(self, skill_id: str) -> skill_module.SkillRecord:
        """
        Get a record by id.

        Raises:
            NotFoundError: If the id is not in the store.
        """
        try:
            return self._records[skill_id]
        except KeyError:
            raise errors.NotFoundError(skill_id) from None

    def all(self) -> _abc.ValuesView[skill_module.SkillRecord]:
        """
        All records in insertion order.

        The returned view is lazy and can be iterated any number of times.
        """
        return self._records.values()

    def ids(self) -> list[str]:
        """All skill ids in insertion order."""
        return list(self._records)

    def __contains__(self, skill_id: object) -> bool:
        return skill_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> _abc.Iterator[skill_module.SkillRecord]:
        return iter(self._records.values())
