"""
Finding SKILL.md directories on disk.

Search order, lowest precedence first; a later location replaces an
earlier skill with the same id:

    builtin   skills bundled with the package
    global    $SKILLREGISTRY_CONFIG_DIR/skills or ~/.config/skillregistry/skills
    custom    each entry of $SKILLREGISTRY_SKILL_PATH (colon-separated)
    project   <project root>/.skillregistry/skills
    custom    extra paths from configuration or --skill-path
"""

from __future__ import annotations

import collections.abc as _abc
import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing

import skillregistry.builtin_skills as builtin_skills
import skillregistry.constants as constants
import skillregistry.skills.errors as errors
import skillregistry.skills.skill as skill_module

_logger = _logging.getLogger(__name__)

DiscoveryItem = _typing.Union[
    skill_module.RawSkillDefinition,
    tuple[_pathlib.Path, Exception],
]


def get_builtin_skills_path() -> _pathlib.Path:
    return builtin_skills.get_builtin_skills_path()


def get_global_skills_path() -> _pathlib.Path:
    """skills/ under the user configuration directory."""
    override = _os.environ.get(constants.ENV_CONFIG_DIR)
    if override:
        return _pathlib.Path(override) / "skills"
    return _pathlib.Path.home() / ".config" / "skillregistry" / "skills"


def get_project_skills_path(project_root: _pathlib.Path) -> _pathlib.Path:
    return project_root / ".skillregistry" / "skills"


def _env_skill_paths() -> list[_pathlib.Path]:
    raw = _os.environ.get(constants.ENV_SKILL_PATH, "")
    entries = (entry.strip() for entry in raw.split(":"))
    return [_pathlib.Path(entry).expanduser().resolve() for entry in entries if entry]


def _locations(
    project_root: _pathlib.Path | None,
    include_builtin: bool,
    extra_paths: _abc.Iterable[_pathlib.Path],
) -> list[tuple[_pathlib.Path, skill_module.SkillSource]]:
    located: list[tuple[_pathlib.Path, skill_module.SkillSource]] = []
    if include_builtin:
        located.append((get_builtin_skills_path(), "builtin"))
    located.append((get_global_skills_path(), "global"))
    located.extend((path, "custom") for path in _env_skill_paths())
    if project_root is not None:
        located.append((get_project_skills_path(project_root), "project"))
    located.extend((path, "custom") for path in extra_paths)
    return located


def get_skill_search_paths(
    project_root: _pathlib.Path | None = None,
    *,
    include_builtin: bool = True,
    extra_paths: list[_pathlib.Path] | None = None,
) -> list[_pathlib.Path]:
    """
    Directories searched for skills, lowest precedence first.

    Args:
        project_root: Adds the project skills directory when given.
        include_builtin: Start with the bundled skills.
        extra_paths: Appended after everything else.
    """
    return [path for path, _ in _locations(project_root, include_builtin, extra_paths or [])]


class SkillDiscovery:
    """
    Loads every skill directory under a list of search paths.

    With explicit search_paths the standard locations are not used; each
    given path is still labelled builtin, global or project when it is
    one of those, otherwise custom.
    """

    def __init__(
        self,
        project_root: _pathlib.Path | None = None,
        search_paths: list[_pathlib.Path] | None = None,
        *,
        include_builtin: bool = True,
        extra_paths: list[_pathlib.Path] | None = None,
    ) -> None:
        self._project_root = project_root
        if search_paths is None:
            self._locations = _locations(project_root, include_builtin, extra_paths or [])
        else:
            self._locations = [(path, self._label(path)) for path in search_paths]

    def _label(self, path: _pathlib.Path) -> skill_module.SkillSource:
        known: dict[_pathlib.Path, skill_module.SkillSource] = {
            get_builtin_skills_path(): "builtin",
            get_global_skills_path(): "global",
        }
        if self._project_root is not None:
            known[get_project_skills_path(self._project_root)] = "project"
        return known.get(path, "custom")

    def get_search_paths(self) -> list[_pathlib.Path]:
        """Search locations in precedence order, lowest first."""
        return [path for path, _ in self._locations]

    def _candidates(
        self,
    ) -> _abc.Iterator[tuple[_pathlib.Path, skill_module.SkillSource]]:
        for root, source in self._locations:
            if not root.is_dir():
                continue
            for entry in sorted(root.iterdir()):
                if (entry / constants.SKILL_FILENAME).is_file():
                    yield entry, source

    def discover_all(self, *, include_errors: bool = False) -> _abc.Iterator[DiscoveryItem]:
        """
        Yield each loadable skill in search order, duplicates included.

        Directories that fail to load are yielded as (path, exception)
        when include_errors is set, and logged and dropped otherwise.
        """
        for skill_dir, source in self._candidates():
            try:
                definition = skill_module.load_skill_definition(skill_dir, source=source)
            except (FileNotFoundError, errors.MalformedRecordError) as e:
                if include_errors:
                    yield skill_dir, e
                else:
                    _logger.warning("Ignoring skill directory %s: %s", skill_dir, e)
                continue
            yield definition

    def discover(self) -> list[skill_module.RawSkillDefinition]:
        """
        One definition per id; the last location providing an id wins and
        takes that later position in the result.
        """
        by_id: dict[str, skill_module.RawSkillDefinition] = {}
        for item in self.discover_all():
            definition = _typing.cast(skill_module.RawSkillDefinition, item)
            skill_id = definition.resolve_id()
            replaced = by_id.pop(skill_id, None)
            if replaced is not None:
                _logger.debug(
                    "%s: %s skill replaces %s one", skill_id, definition.source, replaced.source
                )
            by_id[skill_id] = definition
        return list(by_id.values())
