"""SKILL.md frontmatter parser.

The header is a ``---`` delimited block of ``key: value`` lines. A line that is
exactly ``metadata:`` opens a nested block; its indented ``key: value`` lines
are collected into a string map until the next unindented line.
"""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path

from sundial.skills.models import SkillMetadata
from sundial.utils import get_logger

logger = get_logger(__name__)

MANIFEST_FILENAME = "SKILL.md"
DELIMITER = "---"

# agentskills.io name rules: lowercase, digits, hyphens
NAME_RE = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")
MAX_NAME_LENGTH = 64
MAX_DESCRIPTION_LENGTH = 1024

_METADATA_MARKER_RE = re.compile(r"^metadata:\s*$")

_TOP_LEVEL_KEYS = {
    "name": "name",
    "description": "description",
    "license": "license",
    "compatibility": "compatibility",
    "allowed-tools": "allowed_tools",
}


class _State(Enum):
    TOP_LEVEL = "top_level"
    IN_METADATA_BLOCK = "in_metadata_block"


def _header_lines(content: str) -> list[str] | None:
    lines = content.splitlines()
    if not lines or lines[0].rstrip() != DELIMITER:
        return None
    for index, line in enumerate(lines[1:], start=1):
        if line.rstrip() == DELIMITER:
            return lines[1:index]
    return None


def _split_pair(line: str) -> tuple[str, str] | None:
    colon = line.find(":")
    if colon <= 0:
        return None
    key = line[:colon].strip()
    if not key:
        return None
    return key, _unquote(line[colon + 1:].strip())


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_frontmatter(content: str) -> SkillMetadata | None:
    """Parse manifest text into metadata.

    Returns None when there is no header block or when ``name`` or
    ``description`` is missing or empty.
    """
    lines = _header_lines(content)
    if lines is None:
        return None

    fields: dict[str, str] = {}
    nested: dict[str, str] = {}
    state = _State.TOP_LEVEL

    for line in lines:
        if _METADATA_MARKER_RE.match(line):
            state = _State.IN_METADATA_BLOCK
            continue

        if state is _State.IN_METADATA_BLOCK and line[:1] not in ("", " ", "\t"):
            state = _State.TOP_LEVEL

        pair = _split_pair(line)
        if pair is None:
            continue
        key, value = pair

        if state is _State.IN_METADATA_BLOCK:
            nested[key] = value
        elif key in _TOP_LEVEL_KEYS:
            fields[_TOP_LEVEL_KEYS[key]] = value

    if not fields.get("name") or not fields.get("description"):
        return None

    return SkillMetadata(**fields, metadata=nested)


def read_manifest(skill_dir: Path) -> SkillMetadata | None:
    """Read and parse ``skill_dir/SKILL.md``; None if absent or invalid."""
    manifest = skill_dir / MANIFEST_FILENAME
    try:
        content = manifest.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Cannot read manifest %s: %s", manifest, e)
        return None
    return parse_frontmatter(content)


def validate_metadata(meta: SkillMetadata) -> list[str]:
    """Check metadata against the agentskills.io limits. Returns warnings."""
    warnings = []

    if len(meta.name) > MAX_NAME_LENGTH:
        warnings.append(f"name exceeds {MAX_NAME_LENGTH} characters")
    elif not NAME_RE.match(meta.name):
        warnings.append(f"Invalid name: {meta.name}")

    if len(meta.description) > MAX_DESCRIPTION_LENGTH:
        warnings.append(f"description exceeds {MAX_DESCRIPTION_LENGTH} characters")

    return warnings


def is_safe_dir_name(name: str) -> bool:
    """True if ``name`` can be used as a single directory component."""
    if name in ("", ".", ".."):
        return False
    return "/" not in name and "\\" not in name and "\0" not in name
