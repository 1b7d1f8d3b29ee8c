"""Skill acquisition and installation.

A skill is a folder with a SKILL.md manifest. References are resolved to a
source (registry shortcut, repository URL or local path), fetched, scanned
for skill folders and copied into agent folders.
"""

from sundial.skills.discovery import find_skill_directories, list_skills_for_agent
from sundial.skills.frontmatter import parse_frontmatter, read_manifest
from sundial.skills.hashing import compute_content_hash
from sundial.skills.installer import (
    SkillInstaller,
    find_skill_installations,
    remove_skill,
)
from sundial.skills.models import (
    InstallResult,
    Installation,
    ScopeDecision,
    SkillMetadata,
    SkillSource,
    SourceKind,
)
from sundial.skills.source import resolve_skill_source
from sundial.skills.targets import resolve_targets, skill_install_path

__all__ = [
    "InstallResult",
    "Installation",
    "ScopeDecision",
    "SkillInstaller",
    "SkillMetadata",
    "SkillSource",
    "SourceKind",
    "compute_content_hash",
    "find_skill_directories",
    "find_skill_installations",
    "list_skills_for_agent",
    "parse_frontmatter",
    "read_manifest",
    "remove_skill",
    "resolve_skill_source",
    "resolve_targets",
    "skill_install_path",
]
