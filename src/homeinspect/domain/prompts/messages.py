"""OpenAI-style chat message builders"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

Message = Dict[str, Any]


def system_message(text: str) -> Message:
    return {"role": "system", "content": text}


def assistant_message(text: str) -> Message:
    return {"role": "assistant", "content": text}


def user_message(text: str, image_urls: Sequence[str] = ()) -> Message:
    """Build a user message; with images the content becomes a list of parts"""
    if not image_urls:
        return {"role": "user", "content": text}
    parts: List[Dict[str, Any]] = [{"type": "text", "text": text}]
    for url in image_urls:
        parts.append({"type": "image_url", "image_url": {"url": url}})
    return {"role": "user", "content": parts}
