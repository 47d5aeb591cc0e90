"""Provider construction from settings"""

import logging
from typing import Any, Dict, Optional, Type

from homeinspect.domain.config.provider import ProviderConfig
from homeinspect.infrastructure.llm.base import LLMProvider
from homeinspect.infrastructure.llm.mock import MockLLMProvider
from homeinspect.infrastructure.llm.openai_compatible import OpenAIProvider

logger = logging.getLogger(__name__)


class LLMProviderFactory:
    """Maps provider names from settings and CLI flags to implementations"""

    PROVIDERS: Dict[str, Type[LLMProvider]] = {
        "mock": MockLLMProvider,
        "openai": OpenAIProvider,
    }

    @classmethod
    def create(cls, provider_type: str, config: Optional[Dict[str, Any]] = None) -> LLMProvider:
        """Create a provider by name

        Raises:
            ValueError: If the name is unknown or the provider rejects ``config``
        """
        name = provider_type.strip().lower()
        provider_class = cls.PROVIDERS.get(name)
        if provider_class is None:
            raise ValueError(
                f"Unknown LLM provider: {provider_type} (expected one of: {', '.join(sorted(cls.PROVIDERS))})"
            )
        logger.info(f"Using {name} LLM provider")
        return provider_class(dict(config or {}))

    @classmethod
    def from_settings(cls, settings: ProviderConfig, provider_type: Optional[str] = None) -> LLMProvider:
        """Create the provider described by the ``provider`` settings section

        Args:
            settings: Connection settings (endpoint, key variable, timeout)
            provider_type: Name overriding ``settings.type``
        """
        return cls.create(
            provider_type or settings.type,
            {
                "api_url": settings.api_url,
                "api_key_env": settings.api_key_env,
                "timeout": settings.timeout,
            },
        )
