"""Configuration management for sundial.

Two layers:

- ``Settings``: where the registry, archive storage and git host live, plus
  logging. Read from ``<config_dir>/settings.yaml`` (optional) and
  ``SUNDIAL_*`` environment variables, which win over the file.
- ``ConfigStore``: the user's saved default agents in ``<config_dir>/config.json``.
"""

import json
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from sundial.utils import get_logger

logger = get_logger(__name__)

DEFAULT_REGISTRY_URL = "https://vfbndmrgggrhnlrileqv.supabase.co/functions/v1/skills"
DEFAULT_STORAGE_URL = (
    "https://vfbndmrgggrhnlrileqv.supabase.co/storage/v1/object/public/skill-zips"
)
CONFIG_DIR_NAME = ".sun"
CONFIG_FILE_NAME = "config.json"
SETTINGS_FILE_NAME = "settings.yaml"


def default_config_dir() -> Path:
    return Path.home() / CONFIG_DIR_NAME


def _substitute_env_vars(value: Any) -> Any:
    """Recursively substitute environment variables in config values.

    Supports ${VAR_NAME} and ${VAR_NAME:-default} syntax.
    """
    if isinstance(value, str):
        pattern = r'\$\{([^}:]+)(?::-([^}]*))?\}'

        def replacer(match: re.Match) -> str:
            var_name = match.group(1)
            default = match.group(2) if match.group(2) is not None else ""
            return os.environ.get(var_name, default)

        return re.sub(pattern, replacer, value)
    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_substitute_env_vars(v) for v in value]
    return value


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "WARNING"
    format: str = "text"


class Settings(BaseSettings):
    """Main sundial settings."""
    model_config = SettingsConfigDict(
        env_prefix="SUNDIAL_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    registry_url: str = DEFAULT_REGISTRY_URL
    storage_url: str = DEFAULT_STORAGE_URL
    git_host_url: str = "https://github.com"
    http_timeout: float = 30.0
    config_dir: Path = Field(default_factory=default_config_dir)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # env wins over init (YAML kwargs)
        return (env_settings, init_settings)


def load_settings(settings_path: str | Path | None = None) -> Settings:
    """Load settings from YAML with environment variable substitution.

    Args:
        settings_path: YAML file to read. Defaults to
            ``~/.sun/settings.yaml``.

    Returns:
        Loaded and validated Settings. Defaults if the file does not exist.
    """
    path = Path(settings_path) if settings_path else default_config_dir() / SETTINGS_FILE_NAME

    if not path.exists():
        return Settings()

    with open(path) as f:
        raw_config = yaml.safe_load(f)

    if raw_config is None:
        return Settings()

    return Settings(**_substitute_env_vars(raw_config))


class SunConfig(BaseModel):
    """Contents of config.json."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    default_agents: list[str] = Field(default_factory=list, alias="defaultAgents")
    first_run_complete: bool = Field(default=False, alias="firstRunComplete")
    skill_registry_url: str | None = Field(default=None, alias="skillRegistryUrl")


class ConfigStore:
    """Reads and writes the saved default agents.

    Args:
        config_dir: Directory holding config.json (created on save).
    """

    def __init__(self, config_dir: Path | None = None) -> None:
        self.config_dir = Path(config_dir) if config_dir else default_config_dir()

    @classmethod
    def from_settings(cls, settings: Settings) -> "ConfigStore":
        return cls(settings.config_dir)

    @property
    def path(self) -> Path:
        return self.config_dir / CONFIG_FILE_NAME

    def load(self) -> SunConfig:
        """Return the stored config, or defaults if missing or unreadable."""
        if not self.path.exists():
            return SunConfig()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return SunConfig.model_validate(data)
        except (OSError, ValueError, ValidationError) as e:
            logger.warning("Ignoring unreadable config %s: %s", self.path, e)
            return SunConfig()

    def save(self, config: SunConfig) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        payload = config.model_dump(by_alias=True, exclude_none=True)
        self.path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")

    def load_default_agents(self) -> list[str]:
        return list(self.load().default_agents)

    def save_default_agents(self, agents: list[str]) -> None:
        """Store ``agents`` as the defaults and mark the first run complete."""
        config = self.load()
        config.default_agents = list(agents)
        config.first_run_complete = True
        self.save(config)

    def is_first_run(self) -> bool:
        return not self.load().first_run_complete

    def registry_url(self, settings: Settings) -> str:
        """The registry URL saved in config.json, else the settings one."""
        return self.load().skill_registry_url or settings.registry_url
