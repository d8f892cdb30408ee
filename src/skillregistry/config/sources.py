"""YAML configuration layers for skillregistry settings.

Three files feed Settings, lowest precedence first:

    defaults  config/defaults/config.yaml inside the package (must exist)
    user      $SKILLREGISTRY_CONFIG_DIR/config.yaml, else
              ~/.config/skillregistry/config.yaml
    project   <project root>/.skillregistry/config.yaml

They are deep-merged into one mapping which pydantic-settings validates
underneath environment variables and constructor arguments. Mappings merge
key by key; a list or scalar in a higher layer replaces the lower value.
"""

import collections.abc as _abc
import copy as _copy
import dataclasses as _dataclasses
import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic.fields as _pydantic_fields
import pydantic_settings as _pydantic_settings
import yaml as _yaml

import skillregistry.constants as constants

PROJECT_CONFIG_DIRNAME = ".skillregistry"
CONFIG_FILENAME = "config.yaml"


class ConfigFileError(Exception):
    """A configuration file is missing, unreadable or malformed."""

    def __init__(self, path: _pathlib.Path, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"Config file {path}: {message}")


@_dataclasses.dataclass(frozen=True)
class ConfigLayer:
    """One YAML file in the configuration stack."""

    name: str
    path: _pathlib.Path
    required: bool = False


def get_builtin_defaults_path() -> _pathlib.Path:
    """Defaults file shipped inside the package."""
    return _pathlib.Path(__file__).with_name("defaults") / CONFIG_FILENAME


def get_user_config_dir() -> _pathlib.Path:
    """$SKILLREGISTRY_CONFIG_DIR if set, else ~/.config/skillregistry."""
    override = _os.environ.get(constants.ENV_CONFIG_DIR)
    if override:
        return _pathlib.Path(override)
    return _pathlib.Path.home() / ".config" / "skillregistry"


def get_user_config_path() -> _pathlib.Path:
    return get_user_config_dir() / CONFIG_FILENAME


def get_project_config_path(project_root: _pathlib.Path) -> _pathlib.Path:
    return project_root / PROJECT_CONFIG_DIRNAME / CONFIG_FILENAME


def default_layers(
    project_root: _pathlib.Path | None = None,
    *,
    user_config_path: _pathlib.Path | None = None,
    defaults_path: _pathlib.Path | None = None,
) -> list[ConfigLayer]:
    """
    Standard configuration layers, lowest precedence first.

    Args:
        project_root: Root holding .skillregistry/config.yaml. None skips
            the project layer.
        user_config_path: Replaces the user config location.
        defaults_path: Replaces the bundled defaults location.
    """
    layers = [
        ConfigLayer("defaults", defaults_path or get_builtin_defaults_path(), required=True),
        ConfigLayer("user", user_config_path or get_user_config_path()),
    ]
    if project_root is not None:
        layers.append(ConfigLayer("project", get_project_config_path(project_root)))
    return layers


def deep_merge(
    base: _abc.Mapping[str, _typing.Any],
    override: _abc.Mapping[str, _typing.Any],
) -> dict[str, _typing.Any]:
    """
    Merge override into a copy of base.

    Mappings present in both are merged recursively; everything else in
    override wins.
    """
    merged: dict[str, _typing.Any] = _copy.deepcopy(dict(base))
    for key, value in override.items():
        existing = merged.get(key)
        if isinstance(existing, _abc.Mapping) and isinstance(value, _abc.Mapping):
            merged[key] = deep_merge(existing, value)
        else:
            merged[key] = _copy.deepcopy(value)
    return merged


def load_yaml_file(path: _pathlib.Path) -> dict[str, _typing.Any] | None:
    """
    Read one YAML config file.

    Returns:
        The top-level mapping, or None for an empty document.

    Raises:
        ConfigFileError: Unreadable file, invalid YAML, or a top level
            that is not a mapping.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigFileError(path, f"cannot read file: {e}") from e

    try:
        data = _yaml.safe_load(text)
    except _yaml.YAMLError as e:
        raise ConfigFileError(path, f"invalid YAML: {e}") from e

    if data is None or isinstance(data, dict):
        return data
    raise ConfigFileError(path, f"top level must be a mapping, not {type(data).__name__}")


def merge_layers(
    layers: _abc.Iterable[ConfigLayer],
) -> tuple[dict[str, _typing.Any], list[ConfigLayer]]:
    """
    Load and merge layers in order.

    Missing or empty optional layers are skipped. A required layer that is
    missing or empty means a broken installation.

    Returns:
        (merged mapping, layers that contributed values).
    """
    merged: dict[str, _typing.Any] = {}
    applied: list[ConfigLayer] = []
    for layer in layers:
        data = load_yaml_file(layer.path) if layer.path.exists() else None
        if not data:
            if layer.required:
                state = "empty" if layer.path.exists() else "missing"
                raise ConfigFileError(
                    layer.path, f"required {layer.name} config is {state} (broken install?)"
                )
            continue
        merged = deep_merge(merged, data)
        applied.append(layer)
    return merged, applied


class YamlLayersSource(_pydantic_settings.PydanticBaseSettingsSource):
    """pydantic-settings source backed by merged YAML layers."""

    def __init__(
        self,
        settings_cls: type[_pydantic_settings.BaseSettings],
        layers: _abc.Sequence[ConfigLayer],
    ) -> None:
        super().__init__(settings_cls)
        self._data, self._applied = merge_layers(layers)

    @property
    def applied_layers(self) -> list[ConfigLayer]:
        """Layers that contributed values, lowest precedence first."""
        return list(self._applied)

    def get_field_value(
        self,
        field: _pydantic_fields.FieldInfo,
        field_name: str,
    ) -> tuple[_typing.Any, str, bool]:
        return self._data.get(field_name), field_name, self.field_is_complex(field)

    def __call__(self) -> dict[str, _typing.Any]:
        # Unknown keys pass through so Settings.model_extra can report them.
        return _copy.deepcopy(self._data)
