"""Mock LLM provider for testing and offline use"""

import time
from typing import Any, Dict, List, Optional

from homeinspect.domain.config.llm import LLMConfig
from homeinspect.domain.errors import ProviderError
from homeinspect.infrastructure.llm.base import FragmentStream, LLMProvider, Message


def last_user_text(messages: List[Message]) -> str:
    """Text of the last user message (text parts only)"""
    for message in reversed(messages):
        if message.get("role") != "user":
            continue
        content = message.get("content")
        if isinstance(content, str):
            return content
        return " ".join(part.get("text", "") for part in content or [] if part.get("type") == "text")
    return ""


class MockLLMProvider(LLMProvider):
    """Mock LLM provider that returns predefined responses"""

    DEFAULT_RESPONSE = "Mock LLM response"

    def __init__(self, config: Dict[str, Any] = None):
        """Initialize mock provider

        Args:
            config: Optional configuration with:
                - delay: Simulated API delay in seconds (default: 0)
                - responses: Dict mapping last user message text to responses
                - response: Fallback response text
                - fragment_size: Characters per streamed fragment (default: 16)
                - error: ProviderError raised by every call
        """
        if config is None:
            config = {}
        super().__init__(config)
        self.delay = config.get("delay", 0)
        self.responses = config.get("responses", {})
        self.response = config.get("response")
        self.fragment_size = config.get("fragment_size", 16)
        self.error: Optional[ProviderError] = config.get("error")
        self.calls: List[Dict[str, Any]] = []

    def _validate_config(self, config: Dict[str, Any]) -> None:
        """Validate mock provider configuration"""
        if "delay" in config and not isinstance(config["delay"], (int, float)):
            raise ValueError("delay must be a number")
        if "delay" in config and config["delay"] < 0:
            raise ValueError("delay must be non-negative")
        if "fragment_size" in config and (
            not isinstance(config["fragment_size"], int) or config["fragment_size"] < 1
        ):
            raise ValueError("fragment_size must be a positive integer")
        if "error" in config and not isinstance(config["error"], (ProviderError, type(None))):
            raise ValueError("error must be a ProviderError")

    def _respond(self, messages: List[Message], llm_config: Optional[LLMConfig], stream: bool) -> str:
        settings = self._effective(llm_config)
        self.calls.append({"messages": messages, "llm_config": settings, "stream": stream})

        # Simulate API delay
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error

        prompt = last_user_text(messages)
        if prompt in self.responses:
            return self.responses[prompt]
        if self.response is not None:
            return self.response
        return self.DEFAULT_RESPONSE

    def generate(self, messages: List[Message], llm_config: Optional[LLMConfig] = None) -> str:
        return self._respond(messages, llm_config, stream=False)

    def stream(self, messages: List[Message], llm_config: Optional[LLMConfig] = None) -> FragmentStream:
        text = self._respond(messages, llm_config, stream=True)
        size = self.fragment_size
        return FragmentStream(text[i:i + size] for i in range(0, len(text), size))
