"""
Configuration Module

Architectural Intent:
- Centralized configuration loading from a JSON file
- Provides typed access to the host store root, readiness polling and logging
- Falls back to defaults when the config file is absent
- Environment variables override file-based config

Design Decisions:
- Config is a frozen dataclass for immutability after load
- Nested config sections map to sub-dataclasses
- Certificate organization and key size are not configurable
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import dataclasses
import json
import logging
import os

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreConfig:
    """Where host store directories live."""
    root: str = "~/.hostforge/machines"


@dataclass(frozen=True)
class ReadinessConfig:
    """Docker daemon readiness polling."""
    interval_seconds: int = 5
    timeout_seconds: int = 0  # 0 waits without bound

    @property
    def timeout(self) -> Optional[float]:
        return float(self.timeout_seconds) if self.timeout_seconds > 0 else None


@dataclass(frozen=True)
class HostforgeConfig:
    """Root configuration for hostforge."""
    store: StoreConfig = field(default_factory=StoreConfig)
    readiness: ReadinessConfig = field(default_factory=ReadinessConfig)
    log_level: str = "WARNING"
    log_json: bool = False


def _env_override(data: dict, prefix: str = "HOSTFORGE") -> dict:
    """Override config values with environment variables.

    Environment variables follow the pattern HOSTFORGE_SECTION_KEY.
    For example: HOSTFORGE_STORE_ROOT=/srv/machines,
    HOSTFORGE_READINESS_TIMEOUT_SECONDS=300, HOSTFORGE_LOG_LEVEL=DEBUG
    """
    top_level = {f.name for f in dataclasses.fields(HostforgeConfig)}
    for key, value in os.environ.items():
        if not key.startswith(f"{prefix}_"):
            continue
        name = key[len(prefix) + 1:].lower()
        if name in top_level:
            data[name] = value
            continue
        parts = name.split("_", 1)
        if len(parts) == 2:
            section, field_name = parts
            if not isinstance(data.get(section), dict):
                data[section] = {}
            data[section][field_name] = value
    return data


def _parse_config_file(path: Path) -> dict:
    """Parse a JSON config file. Returns empty dict on failure."""
    try:
        with open(path) as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.debug("Config file not found: %s", path)
        return {}
    except json.JSONDecodeError as e:
        logger.warning("Invalid config file %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Config file %s is not a JSON object", path)
        return {}
    return data


def _coerce(value, type_name: str):
    if not isinstance(value, str):
        return value
    if type_name == "int":
        return int(value)
    if type_name == "bool":
        return value.lower() in ("true", "1", "yes")
    return value


def _build_sub_config(cls, data: dict):
    """Build a sub-config dataclass from a dict, ignoring unknown keys."""
    valid_fields = {f.name: f for f in dataclasses.fields(cls)}
    filtered = {
        k: _coerce(v, valid_fields[k].type)
        for k, v in data.items()
        if k in valid_fields
    }
    return cls(**filtered)


def load_config(
    path: Optional[str] = None,
    env_prefix: str = "HOSTFORGE",
) -> HostforgeConfig:
    """Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (HOSTFORGE_SECTION_KEY)
    2. Config file values
    3. Defaults

    Args:
        path: Path to config file (JSON). Defaults to hostforge.json in CWD.
        env_prefix: Environment variable prefix. Defaults to HOSTFORGE.
    """
    config_path = Path(path) if path else Path("hostforge.json")
    data = _parse_config_file(config_path)
    data = _env_override(data, env_prefix)

    return HostforgeConfig(
        store=_build_sub_config(StoreConfig, data.get("store", {})),
        readiness=_build_sub_config(ReadinessConfig, data.get("readiness", {})),
        log_level=str(data.get("log_level", "WARNING")),
        log_json=_coerce(data.get("log_json", False), "bool"),
    )
