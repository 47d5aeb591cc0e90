"""LLM providers"""

from homeinspect.infrastructure.llm.base import FragmentStream, LLMProvider
from homeinspect.infrastructure.llm.mock import MockLLMProvider
from homeinspect.infrastructure.llm.openai_compatible import OpenAIProvider

__all__ = ["FragmentStream", "LLMProvider", "MockLLMProvider", "OpenAIProvider"]
