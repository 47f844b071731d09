"""Toolkit settings loaded from config files and environment variables."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from enum import StrEnum
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


class RestoreOrder(StrEnum):
    """Order in which registered mocks are reverted.

    LIFO is the default: when one key is mocked twice, reverting the newest
    mock first leaves the original value in place. FIFO reverts in
    registration order, so stacked mocks of one key end on the first mock's
    value instead.
    """

    LIFO = "lifo"
    FIFO = "fifo"


@dataclass(slots=True)
class Settings:
    """Resolved toolkit settings."""

    loop_mode: bool = True
    restore_order: RestoreOrder = RestoreOrder.LIFO

    @classmethod
    def load(cls) -> Settings:
        """Load settings from files and environment variables.

        Priority (highest to lowest):
        1. Environment variables (UNDERSTUDY_*)
        2. Project config (.understudy/config.toml or .understudy/config.yaml)
        3. Global config (~/.understudy/config.toml or ~/.understudy/config.yaml)
        4. Defaults
        """
        data: dict[str, Any] = {}

        global_config_dir = Path.home() / ".understudy"
        data = cls._merge_config(data, cls._load_config_file(global_config_dir))

        project_config_dir = Path.cwd() / ".understudy"
        data = cls._merge_config(data, cls._load_config_file(project_config_dir))

        data = cls._apply_env_vars(data)
        return cls._from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        """Plain representation used by the CLI."""
        return {
            "loop_mode": self.loop_mode,
            "restore_order": self.restore_order.value,
        }

    @classmethod
    def _load_config_file(cls, config_dir: Path) -> dict[str, Any]:
        """Load settings from a directory (TOML or YAML)."""
        toml_path = config_dir / "config.toml"
        yaml_path = config_dir / "config.yaml"
        yml_path = config_dir / "config.yml"

        if toml_path.exists():
            with open(toml_path, "rb") as f:
                return tomllib.load(f)
        if yaml_path.exists():
            with open(yaml_path) as f:
                return yaml.safe_load(f) or {}
        if yml_path.exists():
            with open(yml_path) as f:
                return yaml.safe_load(f) or {}

        return {}

    @classmethod
    def _merge_config(cls, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        result = base.copy()
        result.update(override)
        return result

    @classmethod
    def _apply_env_vars(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Apply UNDERSTUDY_* environment variables."""
        env_mappings = {
            "UNDERSTUDY_LOOP_MODE": "loop_mode",
            "UNDERSTUDY_RESTORE_ORDER": "restore_order",
        }

        for env_var, key in env_mappings.items():
            if value := os.environ.get(env_var):
                data[key] = value

        return data

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> Settings:
        """Create Settings from a dictionary, ignoring unusable values."""
        try:
            restore_order = RestoreOrder(str(data.get("restore_order", "lifo")).lower())
        except ValueError:
            restore_order = RestoreOrder.LIFO

        return cls(
            loop_mode=_parse_bool(data.get("loop_mode"), default=True),
            restore_order=restore_order,
        )


def _parse_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_VALUES:
            return True
        if lowered in FALSE_VALUES:
            return False
    return default


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings for this process, loaded once."""
    return Settings.load()
