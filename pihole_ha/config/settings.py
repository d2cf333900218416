"""
Settings for pihole-ha

Built-in defaults cover a stock Debian/Raspberry Pi OS host running Pi-hole.
An optional YAML file named by ``PIHOLE_HA_CONFIG`` is merged over them.
"""

from __future__ import annotations

import os

from pathlib import Path
from typing import Any

import structlog
import yaml

from pydantic import BaseModel, Field, ValidationError as SettingsValidationError, validator

logger = structlog.get_logger(__name__)

CONFIG_ENV_VAR = "PIHOLE_HA_CONFIG"


class LoggingSettings(BaseModel):
    """Logging options."""

    level: str = Field(default="INFO", description="Logging level")
    json_format: bool = Field(default=False, description="Emit JSON log lines")

    @validator("level")
    def validate_level(cls, v: str) -> str:
        """Normalize and check the level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class PromptDefaults(BaseModel):
    """Values offered as defaults by the interactive prompts."""

    primary_priority: int = Field(default=101, ge=0)
    secondary_priority: int = Field(default=100, ge=0)
    group_id: int = Field(default=51, ge=0, le=255)
    prefix_length: int = Field(default=24, ge=1, le=32)
    no_preempt: bool = True
    time_sync_monitoring: bool = False
    floating_address_example: str = "192.168.0.5"


class SetupSettings(BaseModel):
    """Host-level settings for a setup run."""

    resolver_unit: str = Field(
        default="pihole-FTL.service", description="DNS resolver unit gating health"
    )
    failover_service: str = Field(default="keepalived", description="Failover daemon unit")
    failover_package: str = Field(default="keepalived", description="Failover daemon package")
    time_sync_package: str = Field(default="chrony", description="Time sync daemon package")
    time_sync_tool: str = Field(default="chronyc", description="Time sync query tool")
    install_time_sync: bool = Field(
        default=True,
        description="Install the time sync package when time sync monitoring is enabled",
    )

    health_check_path: Path = Path("/usr/local/bin/pihole_check.sh")
    failover_config_path: Path = Path("/etc/keepalived/keepalived.conf")
    script_user: str = Field(
        default="keepalived_script", description="Account that runs the health check"
    )

    settle_delay: float = Field(default=3.0, ge=0)
    command_timeout: float = Field(default=300.0, gt=0)
    log_lookback: str = Field(default="1 minute ago", description="journalctl --since window")
    require_root: bool = True

    prompts: PromptDefaults = Field(default_factory=PromptDefaults)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @validator("health_check_path", "failover_config_path")
    def validate_absolute(cls, v: Path) -> Path:
        """Artifact paths are written verbatim into the daemon config."""
        if not v.is_absolute():
            raise ValueError(f"Path must be absolute: {v}")
        return v


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(config_path: Path | None = None) -> SetupSettings:
    """Load settings from file or use defaults.

    Args:
        config_path: YAML file to read; falls back to ``$PIHOLE_HA_CONFIG``

    Returns:
        Validated settings. A missing, unreadable or invalid file is logged
        and the built-in defaults are returned.
    """
    if config_path is None and os.environ.get(CONFIG_ENV_VAR):
        config_path = Path(os.environ[CONFIG_ENV_VAR])

    if not config_path:
        return SetupSettings()

    if not config_path.exists():
        logger.warning("Config file not found, using defaults", config_path=str(config_path))
        return SetupSettings()

    try:
        with config_path.open("r", encoding="utf-8") as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ValueError("Config file must contain a mapping")

        defaults: dict[str, Any] = SetupSettings().dict()
        return SetupSettings(**_merge(defaults, file_config))

    except (OSError, yaml.YAMLError, ValueError, SettingsValidationError) as e:
        logger.warning(
            "Failed to load config file, using defaults",
            config_path=str(config_path),
            error=f"{e.__class__.__name__}: {e}",
        )
        return SetupSettings()
