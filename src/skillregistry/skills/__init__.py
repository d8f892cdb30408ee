"""
Skill registry and invocation resolver.

Skills are named guidance documents (name, description, opaque body).
The registry indexes the trigger terms and phrases found in each
description and ranks skills against a free-text description of the
current development context.

Skill discovery locations (in priority order):
1. Built-in skills bundled with the package
2. ~/.config/skillregistry/skills/ - User skills
3. $SKILLREGISTRY_SKILL_PATH - Custom paths (colon-separated)
4. Project .skillregistry/skills/ - Project-local skills
"""

from skillregistry.skills.discovery import (
    SkillDiscovery,
    get_builtin_skills_path,
    get_global_skills_path,
    get_project_skills_path,
    get_skill_search_paths,
)
from skillregistry.skills.errors import (
    DuplicateIdError,
    InvalidArgumentError,
    MalformedRecordError,
    NotFoundError,
    SkillRegistryError,
)
from skillregistry.skills.index import TriggerIndex
from skillregistry.skills.matcher import QueryResult, ScoringWeights, SkillMatch, match
from skillregistry.skills.normalize import TextNormalizer, slugify
from skillregistry.skills.registry import SkillRegistry, Snapshot
from skillregistry.skills.skill import (
    RawSkillDefinition,
    SkillFrontmatter,
    SkillRecord,
    load_skill_definition,
    parse_skill_markdown,
)
from skillregistry.skills.store import SkillStore

__all__ = [
    # Records
    "RawSkillDefinition",
    "SkillRecord",
    "SkillFrontmatter",
    # Parsing
    "load_skill_definition",
    "parse_skill_markdown",
    # Core
    "SkillStore",
    "TriggerIndex",
    "TextNormalizer",
    "slugify",
    "match",
    "QueryResult",
    "ScoringWeights",
    "SkillMatch",
    "SkillRegistry",
    "Snapshot",
    # Discovery
    "SkillDiscovery",
    "get_builtin_skills_path",
    "get_global_skills_path",
    "get_project_skills_path",
    "get_skill_search_paths",
    # Errors
    "SkillRegistryError",
    "MalformedRecordError",
    "DuplicateIdError",
    "NotFoundError",
    "InvalidArgumentError",
]
