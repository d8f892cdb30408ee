"""
Skill registry: the public entry point for loading and querying skills.

The registry holds one immutable Snapshot (store + index). Readers take
the current snapshot reference at call start and never lock. reload()
builds a complete new snapshot off to the side and swaps it in with a
single assignment, so a reader sees either the old snapshot or the new
one, never a mix. A failed reload leaves the active snapshot untouched.
"""

from __future__ import annotations

import collections.abc as _abc
import dataclasses as _dataclasses
import datetime as _datetime
import logging as _logging
import pathlib as _pathlib
import threading as _threading
import typing as _typing

import skillregistry.constants as constants
import skillregistry.skills.discovery as discovery
import skillregistry.skills.errors as errors
import skillregistry.skills.index as index_module
import skillregistry.skills.matcher as matcher
import skillregistry.skills.normalize as normalize
import skillregistry.skills.skill as skill_module
import skillregistry.skills.store as store_module

if _typing.TYPE_CHECKING:
    import skillregistry.config as _config
    import skillregistry.logging as _srlogging

_logger = _logging.getLogger(__name__)


@_dataclasses.dataclass(frozen=True)
class Snapshot:
    """An immutable (store, index) pair and when it became active."""

    store: store_module.SkillStore
    index: index_module.TriggerIndex
    version: int
    loaded_at: _datetime.datetime


def build_snapshot(
    source: _abc.Iterable[store_module.RawRecord],
    *,
    normalizer: normalize.TextNormalizer,
    version: int,
) -> Snapshot:
    """Load a store and build its index; raises before producing anything."""
    store = store_module.SkillStore.load(source, normalizer=normalizer)
    index = index_module.TriggerIndex.build(store)
    return Snapshot(
        store=store,
        index=index,
        version=version,
        loaded_at=_datetime.datetime.now(_datetime.timezone.utc),
    )


class SkillRegistry:
    """
    Registry for loading, matching and fetching skills.

    Handles:
    - All-or-nothing initialization from raw definitions
    - Atomic reload with the previous snapshot kept on failure
    - Deterministic query matching and fetch by id
    - Progressive disclosure helpers (metadata listing, triggered bodies)
    """

    def __init__(
        self,
        snapshot: Snapshot,
        *,
        weights: matcher.ScoringWeights | None = None,
        default_limit: int = constants.DEFAULT_QUERY_LIMIT,
        event_logger: _srlogging.RegistryEventLogger | None = None,
        skill_discovery: discovery.SkillDiscovery | None = None,
    ) -> None:
        """
        Wrap an already-built snapshot. Use initialize() or a from_*
        constructor instead.

        Args:
            snapshot: Initial snapshot.
            weights: Scoring weights for queries.
            default_limit: Limit used when query() gets none.
            event_logger: Optional JSONL event logger.
            skill_discovery: Discovery used by rediscover().
        """
        if default_limit <= 0:
            raise errors.InvalidArgumentError(
                f"default_limit must be positive, got {default_limit}"
            )
        self._snapshot = snapshot
        self._normalizer = snapshot.store.normalizer
        self._weights = weights or matcher.ScoringWeights()
        self._default_limit = default_limit
        self._event_logger = event_logger
        self._discovery = skill_discovery
        self._reload_lock = _threading.Lock()

        self._log_loaded(snapshot)

    # Construction
    @classmethod
    def initialize(
        cls,
        source: _abc.Iterable[store_module.RawRecord],
        *,
        normalizer: normalize.TextNormalizer | None = None,
        weights: matcher.ScoringWeights | None = None,
        default_limit: int = constants.DEFAULT_QUERY_LIMIT,
        event_logger: _srlogging.RegistryEventLogger | None = None,
        skill_discovery: discovery.SkillDiscovery | None = None,
    ) -> SkillRegistry:
        """
        Load raw definitions and build the index.

        Args:
            source: Raw skill definitions.
            normalizer: Text normalizer (stop words). Defaults to
                TextNormalizer().
            weights: Scoring weights for queries.
            default_limit: Limit used when query() gets none.
            event_logger: Optional JSONL event logger.
            skill_discovery: Discovery used by rediscover().

        Returns:
            Initialized registry.

        Raises:
            MalformedRecordError: If any record is malformed.
            DuplicateIdError: If two records share an id.
        """
        snapshot = build_snapshot(
            source,
            normalizer=normalizer or normalize.TextNormalizer(),
            version=1,
        )
        return cls(
            snapshot,
            weights=weights,
            default_limit=default_limit,
            event_logger=event_logger,
            skill_discovery=skill_discovery,
        )

    @classmethod
    def from_discovery(
        cls,
        skill_discovery: discovery.SkillDiscovery,
        **kwargs: _typing.Any,
    ) -> SkillRegistry:
        """Discover skill directories and initialize from them."""
        return cls.initialize(
            skill_discovery.discover(),
            skill_discovery=skill_discovery,
            **kwargs,
        )

    @classmethod
    def from_settings(
        cls,
        settings: _config.Settings,
        *,
        search_paths: list[_pathlib.Path] | None = None,
        event_logger: _srlogging.RegistryEventLogger | None = None,
    ) -> SkillRegistry:
        """
        Build a registry configured by Settings.

        Args:
            settings: Loaded settings.
            search_paths: Custom search paths (overrides default locations).
            event_logger: Optional JSONL event logger.
        """
        skill_discovery = discovery.SkillDiscovery(
            settings.project_root,
            search_paths,
            include_builtin=settings.discovery.include_builtin,
            extra_paths=settings.get_extra_paths(),
        )
        return cls.from_discovery(
            skill_discovery,
            normalizer=settings.build_normalizer(),
            weights=settings.build_weights(),
            default_limit=settings.matching.default_limit,
            event_logger=event_logger,
        )

    # Snapshot management
    @property
    def snapshot(self) -> Snapshot:
        """The currently active snapshot."""
        return self._snapshot

    @property
    def version(self) -> int:
        """Version of the active snapshot."""
        return self._snapshot.version

    @property
    def default_limit(self) -> int:
        """Limit used by query() when none is given."""
        return self._default_limit

    @property
    def search_paths(self) -> list[_pathlib.Path]:
        """Directories rediscover() scans; empty when not built from discovery."""
        if self._discovery is None:
            return []
        return self._discovery.get_search_paths()

    def reload(self, source: _abc.Iterable[store_module.RawRecord]) -> Snapshot:
        """
        Atomically replace the active snapshot.

        The new store and index are built before the swap. Queries already
        in flight keep the snapshot they started with.

        Args:
            source: Raw skill definitions.

        Returns:
            The new active snapshot.

        Raises:
            MalformedRecordError, DuplicateIdError: The previous snapshot
                stays active.
        """
        with self._reload_lock:
            current = self._snapshot
            try:
                snapshot = build_snapshot(
                    source,
                    normalizer=self._normalizer,
                    version=current.version + 1,
                )
            except errors.SkillRegistryError as e:
                _logger.warning(
                    "Reload rejected, keeping snapshot v%d: %s", current.version, e
                )
                if self._event_logger is not None:
                    self._event_logger.log_reload_failed(e, current.version)
                raise
            self._snapshot = snapshot

        self._log_loaded(snapshot)
        return snapshot

    def rediscover(self) -> Snapshot:
        """
        Re-run discovery and reload from its results.

        Raises:
            InvalidArgumentError: If the registry was not built from discovery.
        """
        if self._discovery is None:
            raise errors.InvalidArgumentError("registry was not created from discovery")
        return self.reload(self._discovery.discover())

    def _log_loaded(self, snapshot: Snapshot) -> None:
        _logger.info(
            "Skill registry v%d active: %d skills, %d index keys",
            snapshot.version,
            len(snapshot.store),
            len(snapshot.index),
        )
        if self._event_logger is not None:
            self._event_logger.log_registry_loaded(
                snapshot.version,
                len(snapshot.store),
                snapshot.index.stats(),
            )

    # Queries
    def query(self, text: str, limit: int | None = None) -> matcher.QueryResult:
        """
        Rank skills relevant to a free-text development context.

        Args:
            text: Query text.
            limit: Maximum matches. Defaults to the configured limit.

        Raises:
            InvalidArgumentError: If limit is not a positive integer.
        """
        snapshot = self._snapshot
        effective_limit = self._default_limit if limit is None else limit
        result = matcher.match(
            text,
            snapshot.store,
            snapshot.index,
            effective_limit,
            weights=self._weights,
        )
        if self._event_logger is not None:
            self._event_logger.log_query(
                text, effective_limit, result.pairs(), snapshot.version
            )
        return result

    def fetch(self, skill_id: str) -> skill_module.SkillRecord:
        """
        Get a skill record by id.

        Raises:
            NotFoundError: If the id is unknown in the active snapshot.
        """
        try:
            return self._snapshot.store.get(skill_id)
        except errors.NotFoundError:
            if self._event_logger is not None:
                self._event_logger.log_fetch_miss(skill_id)
            raise

    def has_skill(self, skill_id: str) -> bool:
        """Check if a skill exists."""
        return skill_id in self._snapshot.store

    def list_skills(self) -> list[skill_module.SkillRecord]:
        """All skills in the active snapshot, in load order."""
        return list(self._snapshot.store.all())

    # Progressive disclosure
    def get_metadata_for_prompt(self) -> str:
        """
        Get metadata for all skills, for a system prompt.

        Returns a compact listing of id and description per skill.
        """
        records = sorted(self._snapshot.store.all(), key=lambda r: r.id)
        if not records:
            return ""

        lines = ["## Available Skills", ""]
        lines.extend(record.get_metadata_for_prompt() for record in records)
        lines.append("")
        lines.append(
            "To use a skill, either let it activate automatically based on your "
            "task, or explicitly request it with /skill <id>."
        )
        return "\n".join(lines)

    def trigger_skill(self, skill_id: str) -> str:
        """
        Get a skill body wrapped for injection into a conversation.

        Raises:
            NotFoundError: If the id is unknown.
        """
        record = self.fetch(skill_id)
        return f"""<skill id="{record.id}">
{record.body}
</skill>"""

    # Serialization
    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        snapshot = self._snapshot
        return {
            "version": snapshot.version,
            "loaded_at": snapshot.loaded_at.isoformat(),
            "skill_count": len(snapshot.store),
            "index": snapshot.index.stats(),
            "skills": [record.to_summary() for record in snapshot.store.all()],
        }
