"""Translate provider errors into plain-language guidance.

The same translation is applied at every entry point that can reach the
provider (analyze, chat, config test), so callers must never build their own
error text from a ProviderError.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from homeinspect.domain.errors import ProviderError, ProviderTimeoutError
from homeinspect.domain.models.capabilities import VISION_CAPABLE_MODELS

VISION_UNSUPPORTED_MARKERS = (
    "image_url is only supported by certain models",
    "does not support image",
    "image input is not supported",
)

_REQUIRED_VALUE_RE = re.compile(r"only the default \(([0-9.]+)\) value is supported", re.IGNORECASE)


class ErrorCategory:
    """Translated error categories"""

    STREAMING_VERIFICATION = "streaming_verification_required"
    FIXED_TEMPERATURE = "unsupported_temperature"
    TOP_P_UNSUPPORTED = "unsupported_top_p"
    VISION_UNSUPPORTED = "vision_unsupported"
    AUTHENTICATION = "authentication"
    RATE_LIMIT = "rate_limit"
    SERVICE_UNAVAILABLE = "service_unavailable"
    TIMEOUT = "timeout"
    PROVIDER = "provider_error"


@dataclass(frozen=True)
class TranslatedError:
    """Human-readable provider error with remediation steps"""

    message: str
    category: str
    remediation: List[str] = field(default_factory=list)
    status: Optional[int] = None
    code: Optional[str] = None
    parameter: Optional[str] = None
    error_type: Optional[str] = None
    provider_message: Optional[str] = None

    @property
    def is_vision_error(self) -> bool:
        return self.category == ErrorCategory.VISION_UNSUPPORTED

    @property
    def is_timeout(self) -> bool:
        return self.category == ErrorCategory.TIMEOUT

    def to_response(self) -> Dict[str, Any]:
        """Render as the JSON error body used by the HTTP layer"""
        return {
            "success": False,
            "error": self.message,
            "errorType": self.error_type or self.category,
            "errorCode": self.code,
            "parameter": self.parameter,
            "details": {
                "category": self.category,
                "status": self.status,
                "remediation": list(self.remediation),
                "providerMessage": self.provider_message,
            },
        }


def _required_value(message: str) -> str:
    match = _REQUIRED_VALUE_RE.search(message or "")
    return match.group(1) if match else "1"


def translate_provider_error(error: ProviderError) -> TranslatedError:
    """Map a provider error to a translated error.

    Rules are checked in priority order; the first match wins. Unrecognized
    errors pass the provider's message through unmodified.

    Args:
        error: Error raised by the provider adapter

    Returns:
        Translated error (deterministic for a given status/code/parameter/message)
    """
    status = error.status
    code = error.code
    param = error.parameter
    raw = error.message or ""

    def build(message: str, category: str, remediation: List[str]) -> TranslatedError:
        return TranslatedError(
            message=message,
            category=category,
            remediation=remediation,
            status=status,
            code=code,
            parameter=param,
            error_type=error.error_type,
            provider_message=raw,
        )

    if status == 400 and code == "unsupported_value" and param == "stream":
        return build(
            "Streaming is not available for this model until your OpenAI organization is verified.",
            ErrorCategory.STREAMING_VERIFICATION,
            [
                "Verify your organization at https://platform.openai.com/settings/organization/general",
                "Or disable streaming in the LLM configuration and try again",
                "Verification can take up to 15 minutes to take effect",
            ],
        )

    if status == 400 and code == "unsupported_value" and param == "temperature":
        required = _required_value(raw)
        return build(
            f"This model only supports a fixed temperature of {required}.",
            ErrorCategory.FIXED_TEMPERATURE,
            [
                f"Set temperature to {required} in the LLM configuration",
                "Or choose a model that supports custom temperature (e.g. gpt-4o-mini)",
            ],
        )

    if status == 400 and code in ("unsupported_parameter", "unsupported_value") and param == "top_p":
        return build(
            "This model does not accept the topP parameter.",
            ErrorCategory.TOP_P_UNSUPPORTED,
            [
                "Remove topP from the LLM configuration",
                "Or choose a model that supports topP (e.g. gpt-4o-mini)",
            ],
        )

    lowered = raw.lower()
    if any(marker in lowered for marker in VISION_UNSUPPORTED_MARKERS):
        return build(
            "This model cannot analyze images. "
            f"Choose a vision-capable model such as: {', '.join(VISION_CAPABLE_MODELS)}.",
            ErrorCategory.VISION_UNSUPPORTED,
            [
                "Home inspection analysis requires image input",
                f"Switch to one of: {', '.join(VISION_CAPABLE_MODELS)}",
            ],
        )

    if status == 401:
        return build(
            "The OpenAI API key is invalid or missing.",
            ErrorCategory.AUTHENTICATION,
            [
                "Check that OPENAI_API_KEY is set in the server environment",
                "Make sure the key has not been revoked",
            ],
        )

    if status == 429:
        return build(
            "Rate limit reached for the OpenAI API.",
            ErrorCategory.RATE_LIMIT,
            [
                "Wait a minute and try again",
                "Or upgrade your OpenAI plan for higher limits",
            ],
        )

    if status == 503:
        return build(
            "The OpenAI service is temporarily unavailable.",
            ErrorCategory.SERVICE_UNAVAILABLE,
            ["Try again in a few minutes"],
        )

    return build(raw or "Unknown provider error", ErrorCategory.PROVIDER, [])


def translate_timeout(error: ProviderTimeoutError) -> TranslatedError:
    """Translate an abandoned provider call"""
    return TranslatedError(
        message=f"The model did not respond within {error.seconds:g} seconds.",
        category=ErrorCategory.TIMEOUT,
        remediation=[
            "Try again in a moment",
            "Or choose a faster model",
        ],
        code="timeout",
    )
