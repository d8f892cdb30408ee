"""
skillregistry settings (pydantic-settings).

Sources, strongest first:

1. keyword arguments to Settings(...)
2. SKILLREGISTRY_* environment variables; nested keys use "__", e.g.
   SKILLREGISTRY_MATCHING__DEFAULT_LIMIT=3
3. the .env file named by SKILLREGISTRY_ENV_FILE, if any
4. YAML layers from config.sources: project, user, bundled defaults
"""

import getpass as _getpass
import os as _os
import pathlib as _pathlib
import subprocess as _subprocess
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import skillregistry.config.sources as sources
import skillregistry.config.types as types
import skillregistry.constants as constants
import skillregistry.skills.matcher as matcher
import skillregistry.skills.normalize as normalize

PROJECT_MARKERS = (sources.PROJECT_CONFIG_DIRNAME, "composer.json", "pyproject.toml", ".git")


def _env_file_from_environment() -> str | None:
    """SKILLREGISTRY_ENV_FILE when it names an existing file; no other .env is read."""
    candidate = _os.environ.get("SKILLREGISTRY_ENV_FILE")
    if candidate and _pathlib.Path(candidate).is_file():
        return candidate
    return None


def _current_user() -> str:
    try:
        return _getpass.getuser()
    except (KeyError, OSError):
        return "unknown"


def find_git_root(start_path: _pathlib.Path | None = None) -> _pathlib.Path | None:
    """Top level of the git work tree containing start_path (default: cwd), if any."""
    try:
        proc = _subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=start_path or _pathlib.Path.cwd(),
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (OSError, _subprocess.TimeoutExpired):
        return None
    if proc.returncode != 0:
        return None
    return _pathlib.Path(proc.stdout.strip())


def find_project_root(start_path: _pathlib.Path | None = None) -> _pathlib.Path:
    """
    Locate the project a command is running in.

    Uses the git work tree when there is one; otherwise the closest
    directory at or above start_path holding one of PROJECT_MARKERS;
    otherwise the current directory.
    """
    start = start_path or _pathlib.Path.cwd()

    git_root = find_git_root(start)
    if git_root is not None:
        return git_root

    for candidate in (start.resolve(), *start.resolve().parents):
        if candidate == candidate.parent:
            break
        if any((candidate / marker).exists() for marker in PROJECT_MARKERS):
            return candidate

    return _pathlib.Path.cwd()


class Settings(_pydantic_settings.BaseSettings):
    """
    Effective skillregistry configuration.

    Every field can be set from the environment with the SKILLREGISTRY_
    prefix, or from any YAML layer (see config.sources).
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix=constants.ENV_PREFIX,
        env_nested_delimiter="__",
        env_file=_env_file_from_environment(),
        env_file_encoding="utf-8",
        extra="allow",
    )

    version: int = _pydantic.Field(default=1, description="Config schema version")

    matching: types.MatchingConfig = _pydantic.Field(default_factory=types.MatchingConfig)
    discovery: types.DiscoveryConfig = _pydantic.Field(default_factory=types.DiscoveryConfig)
    logging: types.LoggingConfig = _pydantic.Field(default_factory=types.LoggingConfig)

    log_file: str | None = _pydantic.Field(
        default=None,
        description="Event log file; replaces logging.dir plus the generated name",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[_pydantic_settings.BaseSettings],
        init_settings: _pydantic_settings.PydanticBaseSettingsSource,
        env_settings: _pydantic_settings.PydanticBaseSettingsSource,
        dotenv_settings: _pydantic_settings.PydanticBaseSettingsSource,
        file_secret_settings: _pydantic_settings.PydanticBaseSettingsSource,
    ) -> tuple[_pydantic_settings.PydanticBaseSettingsSource, ...]:
        yaml_layers = sources.YamlLayersSource(
            settings_cls,
            sources.default_layers(find_project_root()),
        )
        return (init_settings, env_settings, dotenv_settings, yaml_layers, file_secret_settings)

    @classmethod
    def construct_without_dotenv(cls, **kwargs: _typing.Any) -> "Settings":
        """Build settings ignoring any .env file (environment and YAML still apply)."""
        return cls(_env_file=None, **kwargs)  # type: ignore[call-arg]

    # Locations

    @property
    def config_dir(self) -> _pathlib.Path:
        return sources.get_user_config_dir()

    @property
    def project_root(self) -> _pathlib.Path:
        return find_project_root()

    @property
    def logs_dir(self) -> _pathlib.Path:
        """logging.dir, else /tmp/skillregistry-logs-<user>."""
        if self.logging.dir:
            return _pathlib.Path(self.logging.dir)
        return _pathlib.Path(f"/tmp/skillregistry-logs-{_current_user()}")

    # Objects built from configuration

    def build_normalizer(self) -> normalize.TextNormalizer:
        """Normalizer using the configured stop words."""
        return normalize.TextNormalizer(stop_words=frozenset(self.matching.stop_words))

    def build_weights(self) -> matcher.ScoringWeights:
        return matcher.ScoringWeights(
            term=self.matching.term_weight,
            phrase=self.matching.phrase_weight,
        )

    def get_extra_paths(self) -> list[_pathlib.Path]:
        """discovery.extra_paths with ~ expanded, resolved to absolute paths."""
        return [_pathlib.Path(p).expanduser().resolve() for p in self.discovery.extra_paths if p]

    # Auditing

    def unknown_keys(self) -> dict[str, _typing.Any]:
        """
        Every unrecognised key, top level and nested, by dotted path.

        Example: {"matching.term_wieght": 3}
        """
        found: dict[str, _typing.Any] = dict(self.model_extra or {})
        for name in ("matching", "discovery", "logging"):
            section: types.ConfigSection = getattr(self, name)
            found.update(section.unknown_keys(name))
        return found

    def to_dict(self) -> dict[str, _typing.Any]:
        """JSON-ready view of the effective configuration."""
        return {
            "version": self.version,
            "config_dir": str(self.config_dir),
            "project_root": str(self.project_root),
            "matching": self.matching.model_dump(exclude=set(self.matching.model_extra or {})),
            "discovery": {
                "include_builtin": self.discovery.include_builtin,
                "extra_paths": [str(p) for p in self.get_extra_paths()],
            },
            "logging": {
                "enabled": self.logging.enabled,
                "dir": str(self.logs_dir),
                "level": self.logging.level,
                "log_file": self.log_file,
            },
        }
