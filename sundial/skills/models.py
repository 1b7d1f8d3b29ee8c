"""Data models for skill sources, manifests and installations."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class SourceKind(str, Enum):
    """How a skill reference was classified."""
    SHORTCUT = "shortcut"
    REMOTE = "remote"
    LOCAL = "local"


class SkillSource(BaseModel):
    """Resolved origin of a user-supplied skill reference.

    ``location`` is ``owner/repo[/subpath][#branch]`` for shortcut and remote
    sources and an absolute filesystem path for local ones.
    """
    kind: SourceKind
    location: str
    original_input: str


class SkillMetadata(BaseModel):
    """Manifest header of a SKILL.md file."""
    name: str
    description: str
    license: str | None = None
    compatibility: str | None = None
    allowed_tools: str | None = None
    metadata: dict[str, str] = Field(default_factory=dict)


class Installation(BaseModel):
    """One on-disk copy of a named skill."""
    agent: str
    path: Path
    is_global: bool
    metadata: SkillMetadata
    content_hash: str


class ScopeDecision(BaseModel):
    """Where one add/remove invocation operates."""
    agents: list[str]
    is_global: bool


class InstallResult(BaseModel):
    skill_names: list[str]
    source: SkillSource
