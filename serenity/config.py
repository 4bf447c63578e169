"""
Configuration for the meditation system.

Limits and version are plain constants; ``SystemConfig`` carries the
per-instance values and is validated with pydantic when it is built.
"""

import json
from pathlib import Path
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError

from .core.exceptions import ConfigurationError

VERSION = "1.0.0"
MAX_SESSIONS = 1000
MAX_USERS = 500
SYSTEM_NAME = "Meditation & Mindfulness System"


class SystemConfig(BaseModel):
    """Settings for a MeditationSystem instance and its composition root."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    system_name: str = Field(default=SYSTEM_NAME, min_length=1)
    version: str = Field(default=VERSION, min_length=1)
    max_sessions: int = Field(default=MAX_SESSIONS, gt=0, description="Maximum number of sessions held")
    max_users: int = Field(default=MAX_USERS, gt=0, description="Maximum number of registered people")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    json_logs: bool = Field(default=False, description="Render log lines as JSON instead of console text")


def load_config(path: Optional[Union[str, Path]] = None, **overrides: Any) -> SystemConfig:
    """Build a SystemConfig from an optional JSON file plus keyword overrides."""
    data: dict = {}
    if path:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read configuration file {path}: {e}")
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {path} must contain a JSON object")
    data.update({key: value for key, value in overrides.items() if value is not None})
    if isinstance(data.get('log_level'), str):
        data['log_level'] = data['log_level'].upper()
    try:
        return SystemConfig(**data)
    except PydanticValidationError as e:
        raise ConfigurationError(
            "Invalid configuration",
            error_code="invalid_config",
            details={'errors': e.errors(include_url=False)}
        )
