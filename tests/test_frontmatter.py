"""Tests for SKILL.md frontmatter parsing."""

from __future__ import annotations

from pathlib import Path

from sundial.skills.frontmatter import (
    is_safe_dir_name,
    parse_frontmatter,
    read_manifest,
    validate_metadata,
)
from sundial.skills.models import SkillMetadata


class TestParseFrontmatter:
    def test_full_header(self):
        meta = parse_frontmatter(
            "---\n"
            "name: pdf-tools\n"
            "description: 'Work with PDF files.'\n"
            "license: MIT\n"
            "allowed-tools: Bash Read\n"
            "metadata:\n"
            "  author: acme\n"
            '  version: "1.0"\n'
            "---\n\n"
            "# PDF tools\n"
        )

        assert meta is not None
        assert meta.name == "pdf-tools"
        assert meta.description == "Work with PDF files."
        assert meta.license == "MIT"
        assert meta.allowed_tools == "Bash Read"
        assert meta.metadata == {"author": "acme", "version": "1.0"}

    def test_metadata_block_ends_at_unindented_line(self):
        meta = parse_frontmatter(
            "---\n"
            "name: x\n"
            "metadata:\n"
            "  author: acme\n"
            "description: after the block\n"
            "---\n"
        )

        assert meta is not None
        assert meta.description == "after the block"
        assert meta.metadata == {"author": "acme"}

    def test_value_keeps_later_colons(self):
        meta = parse_frontmatter("---\nname: x\ndescription: Use when: reading\n---\n")
        assert meta is not None
        assert meta.description == "Use when: reading"

    def test_no_opening_delimiter(self):
        assert parse_frontmatter("name: x\ndescription: y\n") is None

    def test_unclosed_header(self):
        assert parse_frontmatter("---\nname: x\ndescription: y\n") is None

    def test_missing_description(self):
        assert parse_frontmatter("---\nname: x\n---\n") is None

    def test_empty_quoted_name(self):
        assert parse_frontmatter('---\nname: ""\ndescription: y\n---\n') is None

    def test_blank_lines_ignored(self):
        meta = parse_frontmatter("---\n\nname: x\n\ndescription: y\n---\n")
        assert meta is not None
        assert meta.metadata == {}


class TestReadManifest:
    def test_reads_skill(self, tmp_path: Path, make_skill):
        make_skill(tmp_path / "s", "widget", "Does widget things.")
        meta = read_manifest(tmp_path / "s")
        assert meta is not None
        assert meta.name == "widget"

    def test_missing_manifest(self, tmp_path: Path):
        assert read_manifest(tmp_path) is None


class TestValidateMetadata:
    def test_valid(self):
        assert validate_metadata(SkillMetadata(name="my-skill", description="ok")) == []

    def test_invalid_name_format(self):
        warnings = validate_metadata(SkillMetadata(name="My_Skill", description="ok"))
        assert warnings == ["Invalid name: My_Skill"]

    def test_name_too_long(self):
        warnings = validate_metadata(SkillMetadata(name="a" * 65, description="ok"))
        assert warnings == ["name exceeds 64 characters"]

    def test_description_too_long(self):
        warnings = validate_metadata(SkillMetadata(name="ok", description="x" * 1025))
        assert warnings == ["description exceeds 1024 characters"]


class TestSafeDirName:
    def test_plain_names(self):
        assert is_safe_dir_name("widget")
        assert is_safe_dir_name("Widget Tools")

    def test_rejects_path_like_names(self):
        for name in ("", ".", "..", "a/b", "a\\b", "a\0b"):
            assert not is_safe_dir_name(name)
