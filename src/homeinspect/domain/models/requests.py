"""Per-call request models for analysis and chat"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

from homeinspect.domain.errors import ConfigValidationError
from homeinspect.domain.prompts.inspection_prompts import UNKNOWN_CATEGORY, describe_photos

DEFAULT_IMAGE_MIME = "image/jpeg"


def to_data_uri(data: bytes, content_type: Optional[str] = None) -> str:
    """Encode raw image bytes as an inline base64 data URI"""
    mime = content_type if content_type and content_type.startswith("image/") else DEFAULT_IMAGE_MIME
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


@dataclass
class InspectionImage:
    """One uploaded photo and its caller-supplied category"""

    category: str
    data: bytes
    content_type: Optional[str] = None

    @property
    def data_uri(self) -> str:
        return to_data_uri(self.data, self.content_type)


@dataclass
class AnalysisRequest:
    """Photos to analyze, in upload order"""

    images: List[InspectionImage] = field(default_factory=list)

    @property
    def descriptors(self) -> List[str]:
        return describe_photos([image.category for image in self.images])

    @property
    def categories(self) -> List[str]:
        return [image.category for image in self.images]


def category_for(categories: List[str], index: int) -> str:
    """Category label for the photo at ``index`` (missing labels -> Unknown)"""
    if index < len(categories) and categories[index]:
        return categories[index]
    return UNKNOWN_CATEGORY


@dataclass(frozen=True)
class ChatTurn:
    """Prior conversation turn"""

    role: str  # user, assistant
    content: str


def normalize_history(raw: Optional[Iterable[Any]]) -> List[ChatTurn]:
    """Map caller-supplied history into role-tagged turns.

    Entries with an unknown role or blank content are dropped.
    """
    turns: List[ChatTurn] = []
    for entry in raw or []:
        if isinstance(entry, ChatTurn):
            role, content = entry.role, entry.content
        elif isinstance(entry, dict):
            role, content = entry.get("role"), entry.get("content")
        else:
            role = getattr(entry, "role", None)
            content = getattr(entry, "content", None)
        text = "" if content is None else str(content)
        if role in ("user", "assistant") and text.strip():
            turns.append(ChatTurn(role=role, content=text))
    return turns


def normalize_image(raw: Any) -> str:
    """Turn a caller-supplied image into a URL usable as an image_url part.

    Accepts data URIs, http(s) URLs, bare base64 strings and objects with a
    ``url`` or ``base64`` key.

    Raises:
        ConfigValidationError: If the entry has no usable image
    """
    if isinstance(raw, dict):
        if raw.get("url"):
            return normalize_image(str(raw["url"]))
        if raw.get("base64"):
            mime = raw.get("mimeType") or DEFAULT_IMAGE_MIME
            return f"data:{mime};base64,{raw['base64']}"
        raise ConfigValidationError("Image objects must have a 'url' or 'base64' field")
    if isinstance(raw, str) and raw.strip():
        value = raw.strip()
        if value.startswith(("data:", "http://", "https://")):
            return value
        return f"data:{DEFAULT_IMAGE_MIME};base64,{value}"
    raise ConfigValidationError("Images must be data URIs, URLs or base64 strings")


@dataclass
class ChatRequest:
    """Follow-up chat message. The caller resupplies the whole history each call."""

    message: str
    system_prompt: Optional[str] = None
    context: Optional[str] = None
    history: List[ChatTurn] = field(default_factory=list)
    images: List[str] = field(default_factory=list)
    prompt_override: Optional[str] = None

    @property
    def has_images(self) -> bool:
        return bool(self.images)
