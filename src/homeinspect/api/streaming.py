"""Relay provider fragments to an HTTP client"""

from __future__ import annotations

import logging
from typing import AsyncIterator, Callable, Optional

from fastapi import Request
from starlette.concurrency import run_in_threadpool

from homeinspect.domain.errors import ProviderError
from homeinspect.infrastructure.llm.base import FragmentStream

logger = logging.getLogger(__name__)


def _next_fragment(fragments: FragmentStream) -> Optional[str]:
    return next(fragments, None)


async def relay_fragments(
    request: Request,
    fragments: FragmentStream,
    on_error: Callable[[ProviderError], str],
) -> AsyncIterator[str]:
    """Yield fragments one at a time as the provider produces them.

    The client's disconnect signal is checked before every fragment; once the
    client is gone the provider stream is closed so no further output is
    consumed. A provider error after the response has started can no longer
    change the status code, so it is rendered into the body via ``on_error``.
    """
    count = 0
    try:
        while True:
            if await request.is_disconnected():
                logger.info(f"Client disconnected after {count} fragment(s), closing provider stream")
                break
            fragment = await run_in_threadpool(_next_fragment, fragments)
            if fragment is None:
                break
            count += 1
            yield fragment
    except ProviderError as e:
        logger.error(f"Provider stream failed after {count} fragment(s): {e!r}")
        yield on_error(e)
    finally:
        fragments.close()
        logger.debug(f"Relayed {count} fragment(s)")
