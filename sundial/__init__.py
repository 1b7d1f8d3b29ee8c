"""sundial - manage agent skills across Claude Code, Codex and Gemini."""

__version__ = "0.1.0"
