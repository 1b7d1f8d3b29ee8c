"""Supported agent targets and detection of their folders on disk."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel

from sundial.errors import UnknownAgentError


class AgentTarget(BaseModel):
    """An agent integration skills can be installed into."""
    name: str
    flag: str
    folder_name: str


SUPPORTED_AGENTS: tuple[AgentTarget, ...] = (
    AgentTarget(name="Claude Code", flag="claude", folder_name=".claude"),
    AgentTarget(name="Codex", flag="codex", folder_name=".codex"),
    AgentTarget(name="Gemini", flag="gemini", folder_name=".gemini"),
)


class DetectedAgent(BaseModel):
    agent: AgentTarget
    path: Path
    is_global: bool


def get_agent(flag: str) -> AgentTarget:
    """Look up an agent by its CLI flag.

    Raises:
        UnknownAgentError: flag is not one of SUPPORTED_AGENTS.
    """
    for agent in SUPPORTED_AGENTS:
        if agent.flag == flag:
            return agent
    raise UnknownAgentError(flag)


def is_valid_agent(flag: str) -> bool:
    return any(agent.flag == flag for agent in SUPPORTED_AGENTS)


def agent_flags() -> list[str]:
    return [agent.flag for agent in SUPPORTED_AGENTS]


def supported_agents_message() -> str:
    names = ", ".join(agent.name for agent in SUPPORTED_AGENTS)
    return f"Currently supported agents: {names}"


def scope_root(is_global: bool) -> Path:
    """Home directory for global scope, current directory for local scope."""
    return Path.home() if is_global else Path.cwd()


def skills_dir(agent: AgentTarget, is_global: bool) -> Path:
    return scope_root(is_global) / agent.folder_name / "skills"


def detect_agents_in(directory: Path, is_global: bool) -> list[DetectedAgent]:
    """Return the agents whose folder exists directly under ``directory``."""
    detected: list[DetectedAgent] = []
    for agent in SUPPORTED_AGENTS:
        agent_path = directory / agent.folder_name
        if agent_path.exists():
            detected.append(DetectedAgent(agent=agent, path=agent_path, is_global=is_global))
    return detected


def detect_local_agents() -> list[DetectedAgent]:
    return detect_agents_in(Path.cwd(), is_global=False)


def detect_global_agents() -> list[DetectedAgent]:
    return detect_agents_in(Path.home(), is_global=True)


def detect_all_agents() -> list[DetectedAgent]:
    return [*detect_local_agents(), *detect_global_agents()]
