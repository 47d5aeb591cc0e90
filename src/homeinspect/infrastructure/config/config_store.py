"""LLM configuration store - validated updates mirrored to a JSON file"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Set, Tuple

from pydantic import ValidationError

from homeinspect.domain.config.llm import LLMConfig
from homeinspect.domain.errors import ConfigValidationError
from homeinspect.domain.models.capabilities import enforce_capabilities
from homeinspect.infrastructure.config.config_manager import format_validation_errors

logger = logging.getLogger(__name__)

# Wire name -> LLMConfig attribute
ALLOWED_FIELDS: Dict[str, str] = {
    "systemPrompt": "system_prompt",
    "modelName": "model_name",
    "temperature": "temperature",
    "topP": "top_p",
    "streaming": "streaming",
    "chatPrompt": "chat_prompt",
}
# LLMConfig attribute -> wire name, for error messages
WIRE_NAMES: Dict[str, str] = {attribute: wire for wire, attribute in ALLOWED_FIELDS.items()}
CREDENTIAL_FIELD = "openAIApiKey"

Listener = Callable[[LLMConfig], None]


def build_candidate(base: LLMConfig, changes: Mapping[str, Any]) -> Tuple[LLMConfig, Set[str]]:
    """Merge wire-named changes onto ``base`` and type/range check the result.

    Unknown fields are ignored; the credential field is discarded.

    Returns:
        Tuple of (candidate config, attribute names explicitly proposed)

    Raises:
        ConfigValidationError: If a field has the wrong type or is out of range
    """
    if not isinstance(changes, Mapping):
        raise ConfigValidationError("Configuration update must be a JSON object")

    proposed: Dict[str, Any] = {}
    for key, value in changes.items():
        if key == CREDENTIAL_FIELD:
            logger.warning("Ignoring API key in configuration update; the key is read from the environment")
        elif key in ALLOWED_FIELDS:
            proposed[ALLOWED_FIELDS[key]] = value
        else:
            logger.debug(f"Ignoring unknown configuration field: {key}")

    # JSON null for an optional field means "not proposed"
    for name in ("top_p", "chat_prompt"):
        if name in proposed and proposed[name] is None:
            del proposed[name]

    values = base.model_dump()
    values.update(proposed)
    try:
        candidate = LLMConfig.model_validate(values)
    except ValidationError as e:
        errors = format_validation_errors(e, WIRE_NAMES)
        raise ConfigValidationError("Invalid configuration: " + "; ".join(errors), errors) from e
    return candidate, set(proposed)


class ConfigStore:
    """Owner of the live LLM configuration.

    Readers get immutable snapshots via :meth:`get`. Writers go through
    :meth:`update`, which validates, commits and persists under a lock so
    concurrent writes are applied one at a time. A failed validation leaves
    the committed configuration untouched.
    """

    def __init__(self, path: Optional[Path] = None, initial: Optional[LLMConfig] = None):
        if isinstance(path, str):
            path = Path(path)
        self.path = path
        self._lock = threading.Lock()
        self._listeners: List[Listener] = []
        self._config: LLMConfig = initial if initial is not None else self._load()

    def _load(self) -> LLMConfig:
        """Load configuration from disk, falling back to defaults"""
        if self.path is None or not self.path.exists():
            logger.info("No saved LLM configuration found, using defaults")
            return LLMConfig()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            candidate, proposed = build_candidate(LLMConfig(), data)
            config = LLMConfig.model_validate(enforce_capabilities(candidate.model_dump(), proposed))
            logger.info(f"Loaded LLM configuration from {self.path}")
            return config
        except (OSError, ValueError, ConfigValidationError) as e:
            logger.warning(f"Failed to load LLM configuration from {self.path}: {e}")
            logger.info("Using default LLM configuration")
            return LLMConfig()

    def get(self) -> LLMConfig:
        """Current configuration snapshot"""
        return self._config

    def subscribe(self, listener: Listener) -> None:
        """Register a callback invoked with every committed configuration"""
        self._listeners.append(listener)

    def update(self, changes: Mapping[str, Any]) -> LLMConfig:
        """Validate, commit and persist a partial configuration update

        Args:
            changes: Wire-named fields to change

        Returns:
            Newly committed configuration

        Raises:
            ConfigValidationError: If the update is rejected (nothing changes)
        """
        with self._lock:
            candidate, proposed = build_candidate(self._config, changes)
            values = enforce_capabilities(candidate.model_dump(), proposed)
            new_config = LLMConfig.model_validate(values)

            self._config = new_config
            logger.info(
                f"LLM configuration updated: model={new_config.model_name} "
                f"temperature={new_config.temperature} topP={new_config.top_p} "
                f"streaming={new_config.streaming}"
            )
            self._persist(new_config)

            for listener in self._listeners:
                listener(new_config)
        return new_config

    def _persist(self, config: LLMConfig) -> None:
        """Write the configuration file; failures are logged, not raised"""
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=str(self.path.parent), prefix=".llm-config-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(config.to_wire(), f, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
            logger.debug(f"Saved LLM configuration to {self.path}")
        except OSError as e:
            logger.error(f"Failed to save LLM configuration to {self.path}: {e}")
