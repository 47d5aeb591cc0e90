"""OpenAI-compatible chat-completions provider base.

Any endpoint exposing an OpenAI-compatible /v1/chat/completions API can be
driven through this class; the API key is read from the environment on every
call and never stored.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Iterator, List, Optional

import requests

from homeinspect.domain.config.llm import LLMConfig
from homeinspect.domain.errors import ProviderError
from homeinspect.infrastructure.http_client import iter_sse_events, post_json
from homeinspect.infrastructure.llm.base import FragmentStream, LLMProvider, Message

logger = logging.getLogger(__name__)


class OpenAICompatibleChatProvider(LLMProvider):
    """OpenAI-compatible provider using chat completions endpoint."""

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        *,
        api_url: str,
        api_key_env: str,
    ):
        if config is None:
            config = {}
        super().__init__(config)

        self.api_url = config.get("api_url") or api_url
        self.api_key_env = config.get("api_key_env") or api_key_env
        self.timeout = float(config.get("timeout", 120))

    def _validate_config(self, config: Dict[str, Any]) -> None:
        if "api_url" in config and not isinstance(config["api_url"], str):
            raise ValueError("api_url must be a string")

        if "timeout" in config:
            timeout = config["timeout"]
            if not isinstance(timeout, (int, float)) or timeout <= 0:
                raise ValueError("timeout must be a positive number")

    def _headers(self) -> Dict[str, str]:
        api_key = os.getenv(self.api_key_env)
        if not api_key:
            raise ProviderError(
                f"API key is missing. Set the {self.api_key_env} environment variable.",
                status=401,
                code="missing_api_key",
            )

        return {"Content-Type": "application/json", "Authorization": f"Bearer {api_key}"}

    def build_payload(self, messages: List[Message], llm_config: LLMConfig, stream: bool) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": llm_config.model_name,
            "messages": messages,
            "temperature": llm_config.temperature,
            "stream": stream,
        }
        if llm_config.top_p is not None:
            payload["top_p"] = llm_config.top_p
        return payload

    def generate(self, messages: List[Message], llm_config: Optional[LLMConfig] = None) -> str:
        settings = self._effective(llm_config)
        payload = self.build_payload(messages, settings, stream=False)
        logger.debug(f"Chat completion with {settings.model_name} ({len(messages)} messages)")

        response = post_json(self.api_url, payload=payload, headers=self._headers(), timeout=self.timeout)
        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except Exception as e:
            raise ProviderError(f"Failed to parse LLM response JSON: {e}", status=response.status_code) from e
        logger.debug(f"LLM response received ({len(content or '')} chars)")
        return content or ""

    def stream(self, messages: List[Message], llm_config: Optional[LLMConfig] = None) -> FragmentStream:
        settings = self._effective(llm_config)
        payload = self.build_payload(messages, settings, stream=True)
        logger.debug(f"Streaming chat completion with {settings.model_name} ({len(messages)} messages)")

        response = post_json(
            self.api_url, payload=payload, headers=self._headers(), timeout=self.timeout, stream=True
        )

        def _fragments() -> Iterator[str]:
            try:
                yield from _decode(iter_sse_events(response))
            except requests.exceptions.RequestException as e:
                raise ProviderError(f"Provider stream interrupted: {e}", code="connection_error") from e

        def _decode(events: Iterator[Dict[str, Any]]) -> Iterator[str]:
            for event in events:
                error = event.get("error")
                if error:
                    raise ProviderError(
                        error.get("message", "Stream aborted by provider"),
                        status=response.status_code,
                        code=error.get("code"),
                        parameter=error.get("param"),
                        error_type=error.get("type"),
                    )
                for choice in event.get("choices") or []:
                    text = (choice.get("delta") or {}).get("content")
                    if text:
                        yield text

        return FragmentStream(_fragments(), on_close=response.close)


class OpenAIProvider(OpenAICompatibleChatProvider):
    """Provider for api.openai.com (or any endpoint set through ``api_url``)"""

    API_URL = "https://api.openai.com/v1/chat/completions"

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config, api_url=self.API_URL, api_key_env="OPENAI_API_KEY")
