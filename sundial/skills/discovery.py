"""Skill directory discovery."""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

from sundial.agents import AgentTarget, skills_dir
from sundial.skills.frontmatter import MANIFEST_FILENAME, read_manifest
from sundial.utils import get_logger

logger = get_logger(__name__)

VCS_PREFIX = ".git"


def iter_skill_directories(root: Path) -> Iterator[Path]:
    """Walk ``root`` and yield every directory holding a valid SKILL.md.

    Directories whose name starts with ``.git`` are skipped. Symlinked
    directories are not followed, and each real path is visited once.
    """
    visited: set[str] = set()
    stack = [Path(root)]

    while stack:
        directory = stack.pop()
        real = os.path.realpath(directory)
        if real in visited:
            continue
        visited.add(real)

        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            logger.debug("Skipping unreadable directory %s: %s", directory, e)
            continue

        subdirs: list[Path] = []
        for entry in entries:
            try:
                if entry.is_file() and entry.name == MANIFEST_FILENAME:
                    if read_manifest(directory) is not None:
                        yield directory
                elif entry.is_dir(follow_symlinks=False) and not entry.name.startswith(VCS_PREFIX):
                    subdirs.append(Path(entry.path))
            except OSError as e:
                logger.debug("Skipping %s: %s", entry.path, e)

        # Reversed so the stack pops siblings in name order
        stack.extend(reversed(subdirs))


def find_skill_directories(root: Path) -> list[Path]:
    return list(iter_skill_directories(root))


def is_valid_skill_directory(path: Path) -> bool:
    return read_manifest(path) is not None


def list_skills_for_agent(agent: AgentTarget, is_global: bool) -> list[str]:
    """Names of the valid skills installed for ``agent`` in the given scope."""
    base = skills_dir(agent, is_global)
    if not base.is_dir():
        return []

    names = []
    for child in sorted(base.iterdir()):
        if not child.is_dir():
            continue
        meta = read_manifest(child)
        if meta is not None:
            names.append(meta.name)
    return names


def skill_exists(name: str, agent: AgentTarget, is_global: bool) -> bool:
    path = skills_dir(agent, is_global) / name
    return path.is_dir() and is_valid_skill_directory(path)
