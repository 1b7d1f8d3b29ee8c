"""Classify a user-supplied skill reference into a SkillSource."""

from __future__ import annotations

import re
from pathlib import Path

from sundial.errors import RegistryError, SkillNotFoundError
from sundial.registry import RegistryClient
from sundial.skills.models import SkillSource, SourceKind
from sundial.utils import get_logger

logger = get_logger(__name__)

GIT_HOST = "github.com"

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)
_HOST_RE = re.compile(r"^(?:www\.)?github\.com/", re.IGNORECASE)
_REF_MARKERS = {"tree", "blob", "raw"}
_LOCAL_PREFIXES = ("./", "../", "~/", "/")


def is_remote_url(raw_input: str) -> bool:
    return GIT_HOST in raw_input


def normalize_remote_url(url: str) -> str:
    """Turn a repository URL into ``owner/repo[/subpath][#branch]``.

    >>> normalize_remote_url("https://github.com/org/repo/tree/main/skills/x")
    'org/repo/skills/x#main'
    """
    location = _SCHEME_RE.sub("", url.strip())
    location = _HOST_RE.sub("", location)
    location, _, fragment = location.partition("#")
    location = location.split("?", 1)[0]
    parts = [part for part in location.split("/") if part]
    if len(parts) < 2:
        return "/".join(parts)

    owner, repo = parts[0], parts[1]
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    rest = parts[2:]

    branch = fragment or None
    if len(rest) >= 2 and rest[0] in _REF_MARKERS:
        marker, branch, rest = rest[0], rest[1], rest[2:]
        if marker in ("blob", "raw") and rest:
            # Points at a file; fetch the folder holding it
            rest = rest[:-1]

    location = "/".join([owner, repo, *rest])
    if branch:
        location = f"{location}#{branch}"
    return location


def is_local_path(raw_input: str) -> bool:
    if raw_input == "~" or raw_input.startswith(_LOCAL_PREFIXES):
        return True
    return Path(raw_input).exists()


def resolve_local_path(raw_input: str) -> Path:
    return Path(raw_input).expanduser().resolve()


async def _is_registry_shortcut(raw_input: str, registry: RegistryClient | None) -> bool:
    if registry is None:
        return False
    try:
        return await registry.is_shortcut(raw_input)
    except RegistryError as e:
        logger.warning("Skill registry unavailable, skipping shortcut lookup: %s", e)
        registry.mark_unavailable()
        return False


async def resolve_skill_source(
    raw_input: str, registry: RegistryClient | None = None
) -> SkillSource:
    """Resolve ``raw_input`` to a shortcut, a remote repository or a local path.

    The checks run in that order; the first match wins.

    Raises:
        SkillNotFoundError: No rule matched.
    """
    if await _is_registry_shortcut(raw_input, registry):
        location = await registry.shortcut_location(raw_input)
        return SkillSource(
            kind=SourceKind.SHORTCUT,
            location=location,
            original_input=raw_input,
        )

    if is_remote_url(raw_input):
        return SkillSource(
            kind=SourceKind.REMOTE,
            location=normalize_remote_url(raw_input),
            original_input=raw_input,
        )

    if is_local_path(raw_input):
        return SkillSource(
            kind=SourceKind.LOCAL,
            location=str(resolve_local_path(raw_input)),
            original_input=raw_input,
        )

    raise SkillNotFoundError(raw_input)
