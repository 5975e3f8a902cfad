"""
Installer settings loaded from an optional YAML file.

@requires: Optional YAML file matching InstallerSettings
@returns: Validated InstallerSettings
@errors: ConfigError
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigError

CONFIG_ENV_VAR = "INDEXTTS_INSTALLER_CONFIG"
HOST_URL_ENV_VAR = "INDEXTTS_HOST_URL"


class InstallerSettings(BaseModel):
    """Settings shared by the installer client and the host service."""

    # Client side
    host_url: str = "http://127.0.0.1:6658"
    poll_interval: float = Field(1.0, gt=0)
    request_timeout: float = Field(10.0, gt=0)
    locale: Literal["en", "zh"] = "en"
    log_level: str = "INFO"
    log_dir: Path | None = None

    # Host side
    bind_host: str = "127.0.0.1"
    bind_port: int = Field(6658, ge=1, le=65535)
    repository_url: str = "https://github.com/X-T-E-R/IndexTTS.git"
    python_executable: str = "python"
    step_delay: float = Field(1.0, ge=0)

    class Config:
        extra = "forbid"
        json_schema_extra = {
            "example": {
                "host_url": "http://127.0.0.1:6658",
                "poll_interval": 1.0,
                "locale": "zh",
                "repository_url": "https://github.com/X-T-E-R/IndexTTS.git",
            }
        }


def load_settings(config_path: Path | str | None = None) -> InstallerSettings:
    """Load installer settings.

    The file is taken from ``config_path`` or, when omitted, from the
    ``INDEXTTS_INSTALLER_CONFIG`` environment variable. Without either the
    defaults are used. ``INDEXTTS_HOST_URL`` overrides ``host_url``.

    Raises:
        ConfigError: If the file is missing, is not valid YAML, or does not
            validate against InstallerSettings
    """
    if config_path is None:
        config_path = os.environ.get(CONFIG_ENV_VAR)

    data: dict = {}
    if config_path:
        path = Path(config_path).expanduser()
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax in {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to load {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Configuration root must be a mapping: {path}")

    host_url = os.environ.get(HOST_URL_ENV_VAR)
    if host_url:
        data["host_url"] = host_url

    try:
        return InstallerSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid installer configuration: {e}") from e
