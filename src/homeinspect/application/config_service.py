"""Configuration service - read, update and live-test LLM settings"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from homeinspect.domain.config.llm import LLMConfig
from homeinspect.domain.error_translator import (
    TranslatedError,
    translate_provider_error,
    translate_timeout,
)
from homeinspect.domain.errors import ProviderError, ProviderTimeoutError
from homeinspect.domain.prompts.messages import system_message, user_message
from homeinspect.infrastructure.config.config_store import ConfigStore, build_candidate
from homeinspect.infrastructure.llm.base import LLMProvider

logger = logging.getLogger(__name__)

CONFIG_TEST_TIMEOUT_SECONDS = 15.0

# 1x1 PNG used to check that a model accepts image input
VISION_TEST_IMAGE = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8BQDwAEhQGAhKmMIQAAAABJRU5ErkJggg=="
)
VISION_TEST_PROMPT = "This is a configuration test. Reply with one short sentence confirming you can see the attached image."


@dataclass
class ConfigTestResult:
    """Outcome of a live configuration test"""

    config: LLMConfig
    response: Optional[str] = None
    error: Optional[TranslatedError] = None

    @property
    def success(self) -> bool:
        return self.error is None

    def tested_config(self) -> Dict[str, Any]:
        return {
            "model": self.config.model_name,
            "temperature": self.config.temperature,
            "topP": self.config.top_p,
            "streaming": self.config.streaming,
        }


class ConfigService:
    """Service behind the configuration endpoints"""

    def __init__(
        self,
        store: ConfigStore,
        llm_provider: LLMProvider,
        test_timeout: float = CONFIG_TEST_TIMEOUT_SECONDS,
    ):
        self.store = store
        self.llm_provider = llm_provider
        self.test_timeout = test_timeout

    def read(self) -> Dict[str, Any]:
        """Current configuration in wire format (never includes the API key)"""
        return self.store.get().to_wire()

    def update(self, changes: Mapping[str, Any]) -> LLMConfig:
        """Validate and commit a partial update

        Raises:
            ConfigValidationError: If the update is rejected
        """
        return self.store.update(changes)

    def _round_trip(self, candidate: LLMConfig) -> str:
        messages = [
            system_message(candidate.system_prompt),
            user_message(VISION_TEST_PROMPT, [VISION_TEST_IMAGE]),
        ]
        if candidate.streaming:
            with self.llm_provider.stream(messages, candidate) as fragments:
                return "".join(fragments)
        return self.llm_provider.generate(messages, candidate)

    def test(self, changes: Mapping[str, Any]) -> ConfigTestResult:
        """Round-trip a candidate configuration against the provider.

        The candidate is merged over the current configuration and only
        type/range checked, so provider-side parameter errors surface here
        instead of after saving. It is never persisted. The call is abandoned
        after ``test_timeout`` seconds regardless of the HTTP timeout.

        Raises:
            ConfigValidationError: If a field has the wrong type or is out of range
        """
        candidate, _ = build_candidate(self.store.get(), changes)
        logger.info(f"Testing LLM configuration: model={candidate.model_name} streaming={candidate.streaming}")

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="config-test")
        try:
            future = executor.submit(self._round_trip, candidate)
            try:
                response = future.result(timeout=self.test_timeout)
            except FutureTimeoutError:
                future.cancel()
                raise ProviderTimeoutError(self.test_timeout)
        except ProviderTimeoutError as e:
            logger.warning(f"Configuration test timed out after {self.test_timeout:g}s")
            return ConfigTestResult(config=candidate, error=translate_timeout(e))
        except ProviderError as e:
            logger.warning(f"Configuration test failed: {e!r}")
            return ConfigTestResult(config=candidate, error=translate_provider_error(e))
        finally:
            executor.shutdown(wait=False)

        logger.info("Configuration test succeeded")
        return ConfigTestResult(config=candidate, response=response)
