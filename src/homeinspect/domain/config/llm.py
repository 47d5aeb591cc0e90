"""LLM configuration model."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr

from homeinspect.domain.prompts.inspection_prompts import DEFAULT_SYSTEM_PROMPT

DEFAULT_MODEL = "gpt-4o-mini"


class LLMConfig(BaseModel):
    """Runtime LLM invocation parameters.

    One instance is live at a time (owned by the configuration store); it is
    frozen so readers always hold a consistent snapshot. Field aliases are the
    wire names used by the HTTP API and the persisted JSON file.

    Attributes:
        model_name: Remote model identifier
        streaming: Use incremental (streamed) provider calls
        temperature: Sampling temperature (0.0-2.0)
        top_p: Nucleus sampling parameter (0.0-1.0), None = not sent
        system_prompt: Persona/instructions sent as the leading message
        chat_prompt: Optional chat system prompt template
    """

    model_name: StrictStr = Field(DEFAULT_MODEL, alias="modelName", min_length=1)
    streaming: StrictBool = True
    temperature: float = Field(0.3, ge=0.0, le=2.0)
    top_p: Optional[float] = Field(1.0, ge=0.0, le=1.0, alias="topP")
    system_prompt: StrictStr = Field(DEFAULT_SYSTEM_PROMPT, alias="systemPrompt")
    chat_prompt: Optional[StrictStr] = Field(None, alias="chatPrompt")

    model_config = ConfigDict(
        frozen=True,
        strict=True,  # no "0.5" -> 0.5 or true -> 1.0 coercion
        populate_by_name=True,
        extra="ignore",
        protected_namespaces=(),
    )

    def to_wire(self) -> Dict[str, Any]:
        """Serialize with wire names; absent optional fields are omitted"""
        return self.model_dump(by_alias=True, exclude_none=True)
