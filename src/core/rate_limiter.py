"""Interpret GitHub throttling signals and sleep before retrying.

Two cases are honored:
- Secondary rate limits: 429 (or 403) carrying Retry-After.
- Primary quota exhaustion: 403/429 with X-RateLimit-Remaining == 0, delayed
  until X-RateLimit-Reset.
Sleeps are bounded so a tool call never blocks for a whole quota window.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Mapping, Optional

import httpx

logger = logging.getLogger(__name__)


class RateLimiter:
    def __init__(self, *, max_sleep_seconds: int = 60) -> None:
        self._max_sleep_seconds = int(max_sleep_seconds)

    async def maybe_sleep_and_retry(self, response: httpx.Response) -> bool:
        # Returns True if caller should retry after sleeping.
        if response.status_code not in (403, 429):
            return False

        request = response.request
        target = f"{request.method} {request.url.path}"

        if response.headers.get("X-RateLimit-Remaining") == "0":
            reset = self._parse_int_header(response.headers, "X-RateLimit-Reset")
            if reset is not None:
                sleep_for = max(0, reset - int(time.time())) + 1
                logger.warning("Request quota exhausted for %s, retrying after %ss", target, sleep_for)
                await self._sleep_bounded(sleep_for)
                return True

        retry_after = self._parse_int_header(response.headers, "Retry-After")
        if retry_after is not None:
            logger.warning("Secondary rate limit hit for %s, retrying after %ss", target, retry_after)
            await self._sleep_bounded(retry_after)
            return True

        return False

    async def _sleep_bounded(self, seconds: int) -> None:
        await asyncio.sleep(min(int(seconds), self._max_sleep_seconds))

    def _parse_int_header(self, headers: Mapping[str, str], name: str) -> Optional[int]:
        value = (headers.get(name) or "").strip()
        if not value.isdigit():
            return None
        return int(value)
