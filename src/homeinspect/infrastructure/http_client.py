"""Shared HTTP client utilities for OpenAI-compatible providers.

We keep HTTP logic centralized so every provider reports errors the same way.
Provider calls are never retried: a failure is surfaced to the caller as-is.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterator

import requests

from homeinspect.domain.errors import ProviderError

logger = logging.getLogger(__name__)

SSE_DONE = "[DONE]"


def provider_error_from_response(response: requests.Response) -> ProviderError:
    """Build a ProviderError from an error response.

    OpenAI-compatible APIs return ``{"error": {"message", "type", "param", "code"}}``;
    anything else falls back to the raw body.
    """
    status = response.status_code
    try:
        body = response.json()
    except ValueError:
        body = None

    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return ProviderError(
            error.get("message") or f"HTTP {status}",
            status=status,
            code=error.get("code"),
            parameter=error.get("param"),
            error_type=error.get("type"),
        )
    if isinstance(error, str):
        return ProviderError(error, status=status)

    text = (response.text or "").strip()
    return ProviderError(text or f"HTTP {status} {response.reason or ''}".strip(), status=status)


def post_json(
    url: str,
    *,
    payload: Dict[str, Any],
    headers: Dict[str, str],
    timeout: float,
    stream: bool = False,
) -> requests.Response:
    """POST JSON once.

    Raises:
        ProviderError: On transport failure or a 4xx/5xx response
    """
    logger.debug(f"HTTP POST {url} (stream={stream})")
    try:
        response = requests.post(url, json=payload, headers=headers, timeout=timeout, stream=stream)
    except requests.exceptions.RequestException as e:
        raise ProviderError(f"Could not reach the LLM provider: {e}", code="connection_error") from e

    if response.status_code >= 400:
        try:
            error = provider_error_from_response(response)
        finally:
            response.close()
        logger.warning(f"Provider returned HTTP {error.status}: {error.code or ''} {error.message}")
        raise error
    return response


def iter_sse_events(response: requests.Response) -> Iterator[Dict[str, Any]]:
    """Yield decoded JSON payloads of a server-sent events stream.

    Stops at the ``[DONE]`` sentinel or when the server closes the stream.
    """
    for raw_line in response.iter_lines():
        if not raw_line:
            continue
        line = raw_line.decode("utf-8") if isinstance(raw_line, bytes) else raw_line
        if not line.startswith("data:"):
            continue  # comments, event names, ids
        data = line[len("data:"):].strip()
        if data == SSE_DONE:
            return
        try:
            yield json.loads(data)
        except ValueError:
            logger.warning(f"Skipping malformed stream event: {data[:80]}")
