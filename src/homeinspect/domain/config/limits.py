"""Request limits configuration model."""

from pydantic import BaseModel, Field


class LimitsConfig(BaseModel):
    """Configuration for request limits.

    Attributes:
        context_max_chars: Longest chat context substituted into a prompt
        config_test_timeout: Upper bound for the configuration test call (seconds)
    """

    context_max_chars: int = Field(4000, gt=0)
    config_test_timeout: float = Field(15.0, gt=0)
