"""Main application settings model."""

from pydantic import BaseModel, ConfigDict, Field

from homeinspect.domain.config.limits import LimitsConfig
from homeinspect.domain.config.provider import ProviderConfig
from homeinspect.domain.config.server import ServerConfig
from homeinspect.domain.config.storage import StorageConfig


class AppSettings(BaseModel):
    """Service settings.

    Root model aggregating the static settings sections. Unlike LLMConfig,
    these are read once at startup and never changed at runtime.

    Attributes:
        server: HTTP server configuration
        storage: On-disk state locations
        provider: LLM provider connection
        limits: Request limits
    """

    server: ServerConfig = Field(default_factory=ServerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    limits: LimitsConfig = Field(default_factory=LimitsConfig)

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
        json_schema_extra={
            "example": {
                "server": {"host": "0.0.0.0", "port": 5000, "cors_origins": ["*"]},
                "storage": {"config_path": "llm-config.json", "upload_dir": "uploads"},
                "provider": {"type": "openai", "api_key_env": "OPENAI_API_KEY", "timeout": 120},
                "limits": {"context_max_chars": 4000, "config_test_timeout": 15.0},
            }
        },
    )
