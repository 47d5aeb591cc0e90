"""Configuration models with Pydantic validation."""

from homeinspect.domain.config.app import AppSettings
from homeinspect.domain.config.limits import LimitsConfig
from homeinspect.domain.config.llm import LLMConfig
from homeinspect.domain.config.provider import ProviderConfig
from homeinspect.domain.config.server import ServerConfig
from homeinspect.domain.config.storage import StorageConfig

__all__ = [
    "AppSettings",
    "LLMConfig",
    "LimitsConfig",
    "ProviderConfig",
    "ServerConfig",
    "StorageConfig",
]
