"""
Shared pytest fixtures for skillregistry tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import os as _os
import pathlib as _pathlib
import typing as _typing

import pytest as _pytest

import skillregistry.skills as skills

# =============================================================================
# Sample data
# =============================================================================

TALL_DESCRIPTION = (
    "Invoke at the start of any session involving Livewire components, "
    "Alpine.js interactivity, or Tailwind styling"
)
SAIL_DESCRIPTION = "Invoke at the start of any development session using Laravel Sail"


def write_skill(
    parent: _pathlib.Path,
    name: str,
    description: str = "Test skill",
    body: str | None = None,
    title: str | None = None,
) -> _pathlib.Path:
    """Create a minimal skill directory containing a SKILL.md."""
    skill_dir = parent / name
    skill_dir.mkdir(parents=True)
    title_line = f"title: {title}\n" if title else ""
    content = body if body is not None else f"# {name}\n\nInstructions for {name}."
    (skill_dir / "SKILL.md").write_text(
        f"---\nname: {name}\n{title_line}description: {description}\n---\n\n{content}\n"
    )
    return skill_dir


# =============================================================================
# Environment isolation
# =============================================================================


@_pytest.fixture(autouse=True)
def isolated_env(
    tmp_path: _pathlib.Path,
    monkeypatch: _pytest.MonkeyPatch,
) -> _pathlib.Path:
    """
    Isolate every test from the user's environment.

    Clears SKILLREGISTRY_* variables, points the user config directory at
    an empty temp directory and runs the test from a temp working directory.

    Returns:
        The isolated user config directory.
    """
    for key in list(_os.environ):
        if key.startswith("SKILLREGISTRY_"):
            monkeypatch.delenv(key, raising=False)

    config_dir = tmp_path / "user-config"
    config_dir.mkdir()
    monkeypatch.setenv("SKILLREGISTRY_CONFIG_DIR", str(config_dir))

    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return config_dir


# =============================================================================
# Skill fixtures
# =============================================================================


@_pytest.fixture
def sample_records() -> list[dict[str, _typing.Any]]:
    """The two-skill source used across matcher and registry tests."""
    return [
        {
            "id": "tall",
            "name": "TALL Stack",
            "description": TALL_DESCRIPTION,
            "body": "Use Livewire v3 attributes.",
        },
        {
            "id": "sail",
            "name": "Laravel Sail",
            "description": SAIL_DESCRIPTION,
            "body": "Run everything through ./vendor/bin/sail.",
        },
    ]


@_pytest.fixture
def sample_store(sample_records: list[dict[str, _typing.Any]]) -> skills.SkillStore:
    """Store loaded from sample_records with default stop words."""
    return skills.SkillStore.load(sample_records)


@_pytest.fixture
def sample_index(sample_store: skills.SkillStore) -> skills.TriggerIndex:
    """Trigger index built from sample_store."""
    return skills.TriggerIndex.build(sample_store)


@_pytest.fixture
def sample_registry(
    sample_records: list[dict[str, _typing.Any]],
) -> skills.SkillRegistry:
    """Registry initialized from sample_records."""
    return skills.SkillRegistry.initialize(sample_records)


@_pytest.fixture
def make_skill() -> _typing.Callable[..., _pathlib.Path]:
    """Factory creating skill directories: make_skill(parent, name, description)."""
    return write_skill
