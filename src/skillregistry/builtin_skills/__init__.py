"""
Skills bundled with skillregistry.

Each subdirectory holds one SKILL.md. Bundled skills are searched first,
so a global or project skill with the same id replaces them.
"""

import pathlib as _pathlib

BUILTIN_SKILLS_DIR = _pathlib.Path(__file__).resolve().parent


def get_builtin_skills_path() -> _pathlib.Path:
    """Directory containing the bundled skill directories."""
    return BUILTIN_SKILLS_DIR


def list_builtin_skill_ids() -> list[str]:
    """Ids (directory names) of the bundled skills, sorted."""
    return sorted(
        entry.name for entry in BUILTIN_SKILLS_DIR.iterdir() if (entry / "SKILL.md").is_file()
    )
