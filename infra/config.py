"""
Configuration Manager
---------------------
Settings for the function-calling engine.
Loads configuration from YAML with environment variable overrides.

Rules:
- Secrets never in config files (only the *name* of the env var holding one)
- Environment variables override file values: SIDEKICK_<FIELD>
"""

from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging
import os

import yaml
from pydantic import BaseModel, Field

ENV_PREFIX = "SIDEKICK_"

_logger = logging.getLogger("sidekick.infra.config")


class DuplicatePolicy(str, Enum):
    """What the registry does when a tool name is registered twice."""
    REJECT = "reject"    # Raise DuplicateTool
    REPLACE = "replace"  # Later registration wins


class FunctionSettings(BaseModel):
    """Engine settings."""

    # Advertise and accept function calls at all
    use_functions: bool = True

    # Name shown in confirmation prompts
    assistant_name: str = "Sidekick"

    # None = wait for the user indefinitely
    authorization_timeout_seconds: Optional[float] = Field(default=None, gt=0)

    duplicate_policy: DuplicatePolicy = DuplicatePolicy.REJECT

    # Env var holding the passphrase for console strong authentication
    strong_auth_env_var: str = "SIDEKICK_FUNCTIONS_PASSPHRASE"

    log_level: str = "INFO"
    log_dir: Optional[str] = None


def _env_overrides() -> Dict[str, Any]:
    """Collect SIDEKICK_<FIELD> overrides from the environment."""
    overrides: Dict[str, Any] = {}
    for name in FunctionSettings.model_fields:
        value = os.getenv(f"{ENV_PREFIX}{name.upper()}")
        if value is not None:
            overrides[name] = value
    return overrides


def load_settings(path: Optional[Union[str, Path]] = None) -> FunctionSettings:
    """
    Load settings from a YAML file, then apply environment overrides.

    A missing file falls back to defaults. Invalid values raise
    pydantic.ValidationError.
    """
    data: Dict[str, Any] = {}

    if path is not None:
        config_path = Path(path)
        if config_path.exists():
            with open(config_path, "r") as f:
                data = yaml.safe_load(f) or {}
            _logger.info(f"Loaded config from {config_path}")
        else:
            _logger.warning(f"Config file not found: {config_path}")

    data.update(_env_overrides())
    return FunctionSettings.model_validate(data)
