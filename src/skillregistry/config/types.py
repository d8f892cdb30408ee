"""Pydantic models for the sections of skillregistry configuration.

- MatchingConfig (matching.*): stop words, scoring weights, default limit
- DiscoveryConfig (discovery.*): bundled skills toggle, extra search paths
- LoggingConfig (logging.*): event log toggle, directory, level

Sections keep keys they do not recognise (extra="allow") instead of
dropping them, so `skillregistry config` can point out typos such as
`matching.term_wieght`.
"""

import typing as _typing

import pydantic as _pydantic

import skillregistry.constants as constants

LogLevel = _typing.Literal["debug", "info", "warning", "error"]


class ConfigSection(_pydantic.BaseModel):
    """Base for config sections: tolerant of unknown keys and able to list them."""

    model_config = _pydantic.ConfigDict(extra="allow")

    def unknown_keys(self, prefix: str = "") -> dict[str, _typing.Any]:
        """
        Unrecognised keys in this section and any nested sections.

        Args:
            prefix: Dotted path of this section, e.g. "matching".

        Returns:
            Mapping of dotted key path to the value supplied for it.
        """

        def _dotted(name: str) -> str:
            return f"{prefix}.{name}" if prefix else name

        found = {_dotted(key): value for key, value in (self.model_extra or {}).items()}
        for name in type(self).model_fields:
            child = getattr(self, name)
            if isinstance(child, ConfigSection):
                found.update(child.unknown_keys(_dotted(name)))
        return found


class MatchingConfig(ConfigSection):
    """How descriptions and queries are normalized and scored."""

    stop_words: list[str] = _pydantic.Field(
        default_factory=lambda: sorted(constants.DEFAULT_STOP_WORDS)
    )
    """Words dropped when normalizing descriptions and queries."""

    term_weight: int = _pydantic.Field(default=constants.DEFAULT_TERM_WEIGHT, ge=1)
    """Points per distinct query term found in a skill's triggers."""

    phrase_weight: int = _pydantic.Field(default=constants.DEFAULT_PHRASE_WEIGHT, ge=1)
    """Points per stored phrase found verbatim in the query."""

    default_limit: int = _pydantic.Field(default=constants.DEFAULT_QUERY_LIMIT, ge=1)
    """Maximum matches returned when a caller gives no limit."""

    auto_trigger: bool = False
    """Inject the best matching skill into messages without /skill."""

    @_pydantic.field_validator("stop_words")
    @classmethod
    def _lowercase_stop_words(cls, value: list[str]) -> list[str]:
        return sorted({word.strip().lower() for word in value if word.strip()})


class DiscoveryConfig(ConfigSection):
    """Where skill directories are looked for."""

    include_builtin: bool = True
    """Search the skills bundled with the package."""

    extra_paths: list[str] = _pydantic.Field(default_factory=list)
    """Searched after every standard location, in order (highest priority)."""


class LoggingConfig(ConfigSection):
    """Diagnostic logging and the JSONL registry event log."""

    enabled: bool = False
    """Write registry events (loads, reloads, queries) to a JSONL file."""

    dir: str | None = None
    """Event log directory. None means /tmp/skillregistry-logs-<user>."""

    level: LogLevel = "warning"

    private: bool = True
    """chmod the event log directory to 0700."""
