"""Agent configuration.

Settings live in the "agent" section of the project's taskflow.config.json:

    {
      "version": "2.0",
      "agent": {
        "backupDir": ".taskflow/backups",
        "protectedPatterns": [".git/"],
        "bodyArguments": {"write_file": "content"}
      }
    }

Keys may be camelCase (as in the rest of the file) or snake_case.
"""

import json
import logging
import os
from pathlib import Path, PurePath
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "taskflow.config.json"
CONFIG_SECTION = "agent"
BACKUP_DIR_ENV = "TASKFLOW_BACKUP_DIR"

DEFAULT_BACKUP_DIR = ".taskflow/backups"
DEFAULT_BODY_ARGUMENTS = {"write_file": "content"}


class ConfigError(Exception):
    """Raised when the agent configuration holds invalid values."""

    pass


class AgentConfig(BaseModel):
    """Settings for the tool parser, sandbox and backups."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    backup_dir: str = Field(
        default=DEFAULT_BACKUP_DIR, description="Backup location relative to the project root"
    )
    protected_patterns: list[str] = Field(
        default_factory=list,
        description="Gitignore-style patterns denied by the sandbox even inside the root",
    )
    body_arguments: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_BODY_ARGUMENTS),
        description="Tool name -> argument filled from the tag's inner text",
    )

    @field_validator("backup_dir")
    @classmethod
    def _backup_dir_inside_root(cls, value: str) -> str:
        normalized = os.path.normpath(value)
        escapes = normalized.split(os.sep)[0] == ".."
        if PurePath(value).is_absolute() or normalized == "." or escapes:
            raise ValueError(f"backup_dir must be a relative path inside the project: {value}")
        return value


def load_agent_config(project_root: Union[str, Path]) -> AgentConfig:
    """Load the agent configuration for a project.

    Missing file or section gives defaults. An unreadable or malformed file is
    logged and also gives defaults. TASKFLOW_BACKUP_DIR overrides backup_dir.

    Raises:
        ConfigError: If the section contains invalid values
    """
    config_path = Path(project_root) / CONFIG_FILENAME
    data: dict[str, Any] = {}

    if config_path.exists():
        try:
            raw = json.loads(config_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to load config from {config_path}: {e}")
            raw = {}

        section = raw.get(CONFIG_SECTION) if isinstance(raw, dict) else None
        if isinstance(section, dict):
            data.update(section)
        elif section is not None:
            logger.warning(f"Ignoring non-object '{CONFIG_SECTION}' section in {config_path}")

    source = str(config_path)
    env_backup_dir = os.getenv(BACKUP_DIR_ENV)
    if env_backup_dir:
        data.pop("backupDir", None)
        data["backup_dir"] = env_backup_dir
        source = f"{config_path} (backup_dir from {BACKUP_DIR_ENV})"

    try:
        return AgentConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid agent configuration in {source}: {e}") from e
