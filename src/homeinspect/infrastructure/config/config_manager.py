"""Service settings: .homeinspect.yml merged over defaults, then environment overrides"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml
from pydantic import ValidationError

from homeinspect.domain.config import (
    AppSettings,
    LimitsConfig,
    ProviderConfig,
    ServerConfig,
    StorageConfig,
)

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".homeinspect.yml"

# Environment variable -> (section, key)
ENV_OVERRIDES: Dict[str, Tuple[str, str]] = {
    "PORT": ("server", "port"),
    "HOMEINSPECT_CONFIG_PATH": ("storage", "config_path"),
    "HOMEINSPECT_UPLOAD_DIR": ("storage", "upload_dir"),
    "HOMEINSPECT_LLM_PROVIDER": ("provider", "type"),
}


class ConfigurationError(Exception):
    """Settings file or environment produced invalid settings."""

    pass


def format_validation_errors(error: ValidationError, field_names: Optional[Mapping[str, str]] = None) -> List[str]:
    """Format pydantic errors as ``field: message`` lines

    ``field_names`` renames the leading location segment, e.g. attribute -> wire name.
    """
    lines = []
    for item in error.errors():
        loc = [str(x) for x in item["loc"]]
        if loc and field_names:
            loc[0] = field_names.get(loc[0], loc[0])
        field = ".".join(loc) or "body"
        lines.append(f"{field}: {item['msg']}")
    return lines


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``override`` into a copy of ``base``; nested sections merge key by key"""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def find_settings_file(start: Optional[Path] = None) -> Optional[Path]:
    """Look for .homeinspect.yml in ``start`` (default: cwd) and its parents"""
    start = start or Path.cwd()
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILE_NAME
        if candidate.is_file():
            logger.info(f"Found settings file: {candidate}")
            return candidate
    logger.debug(f"No {CONFIG_FILE_NAME} found, using defaults")
    return None


class ConfigManager:
    """Loads the static service settings

    Later sources win:
    1. Defaults (DEFAULT_CONFIG, mirroring the Pydantic models)
    2. .homeinspect.yml (explicit path, or searched from the current directory upward)
    3. Environment variables (ENV_OVERRIDES and OPENAI_BASE_URL)
    4. CLI flags (applied by the CLI layer)

    The OpenAI API key is never part of these settings; providers read it from
    the environment on each call.
    """

    DEFAULT_CONFIG = {
        "server": {
            "host": "0.0.0.0",
            "port": 5000,
            "cors_origins": ["*"],
            "max_body_bytes": 50 * 1024 * 1024,
            "static_dir": None,
        },
        "storage": {
            "config_path": "llm-config.json",
            "upload_dir": "uploads",
        },
        "provider": {
            "type": "openai",
            "api_url": "https://api.openai.com/v1/chat/completions",
            "api_key_env": "OPENAI_API_KEY",
            "timeout": 120,
        },
        "limits": {
            "context_max_chars": 4000,
            "config_test_timeout": 15.0,
        },
    }

    def __init__(self, config_path: Optional[Path] = None):
        """
        Args:
            config_path: Settings file to use instead of searching for one

        Raises:
            ConfigurationError: If the merged settings do not validate
        """
        self.config_path = Path(config_path) if config_path else find_settings_file()
        raw = self._apply_env_overrides(deep_merge(copy.deepcopy(self.DEFAULT_CONFIG), self._read_file()))
        try:
            self.settings = AppSettings(**raw)
        except ValidationError as e:
            details = "\n".join(f"  - {line}" for line in format_validation_errors(e))
            raise ConfigurationError(f"Configuration validation failed:\n{details}") from e

    def _read_file(self) -> Dict[str, Any]:
        """Parsed settings file, or {} when absent or unreadable"""
        if not self.config_path or not self.config_path.exists():
            return {}
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to read settings from {self.config_path}: {e}")
            logger.info("Using default settings")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring {self.config_path}: top level must be a mapping")
            return {}
        logger.info(f"Loaded settings from {self.config_path}")
        return data

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        for variable, (section, key) in ENV_OVERRIDES.items():
            value = os.getenv(variable)
            if value:
                config.setdefault(section, {})[key] = value

        base_url = os.getenv("OPENAI_BASE_URL")
        if base_url:
            config.setdefault("provider", {})["api_url"] = f"{base_url.rstrip('/')}/chat/completions"
        return config

    def get_server_config(self) -> ServerConfig:
        return self.settings.server

    def get_storage_config(self) -> StorageConfig:
        return self.settings.storage

    def get_provider_config(self) -> ProviderConfig:
        return self.settings.provider

    def get_limits_config(self) -> LimitsConfig:
        return self.settings.limits

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a setting by dotted path, e.g. ``"server.port"``"""
        node: Any = self.settings
        for part in key.split("."):
            if not hasattr(node, part):
                return default
            node = getattr(node, part)
        return node
