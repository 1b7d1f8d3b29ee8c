"""Error hierarchy for skill resolution, fetching and installation."""

from __future__ import annotations


class SundialError(Exception):
    """Base class for every failure the core reports to the CLI."""

    code = "SUNDIAL_ERROR"

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class SkillNotFoundError(SundialError):
    """Input is neither a registry shortcut, a repository URL nor a local path."""

    code = "SKILL_NOT_FOUND"

    def __init__(self, raw_input: str) -> None:
        super().__init__(
            f'Skill not found: "{raw_input}". '
            "Expected a shortcut name, GitHub URL, or local path."
        )
        self.raw_input = raw_input


class FetchError(SundialError):
    code = "FETCH_FAILED"


class NoSkillsFoundError(SundialError):
    code = "NO_SKILLS_FOUND"

    def __init__(self, raw_input: str) -> None:
        super().__init__(
            f'No skills found in "{raw_input}". A skill must contain a SKILL.md file.'
        )
        self.raw_input = raw_input


class InvalidSkillError(SundialError):
    code = "INVALID_SKILL"


class NoTargetAgentsError(SundialError):
    code = "NO_TARGET_AGENTS"


class UnknownAgentError(SundialError):
    code = "UNKNOWN_AGENT"

    def __init__(self, flag: str) -> None:
        super().__init__(f"Unknown agent: {flag}")
        self.flag = flag


class RegistryError(SundialError):
    code = "REGISTRY_ERROR"
