"""LLM provider connection configuration model."""

from typing import Literal

from pydantic import BaseModel, Field


class ProviderConfig(BaseModel):
    """Configuration for the LLM provider connection.

    Attributes:
        type: Provider implementation
        api_url: Chat completions endpoint
        api_key_env: Environment variable holding the API key
        timeout: HTTP timeout in seconds
    """

    type: Literal["openai", "mock"] = "openai"
    api_url: str = "https://api.openai.com/v1/chat/completions"
    api_key_env: str = "OPENAI_API_KEY"
    timeout: float = Field(120.0, gt=0)
