"""CodeRabbit API client.

Only the developer activity report is served by the public CodeRabbit API.
The review operations of earlier releases are kept as disabled entry points
that fail with a fixed message pointing callers at the GitHub pull request
workflow (see clients.github.GitHubClient).
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, NoReturn, Optional

import httpx

from core.cache import TTLCache
from core.errors import EndpointUnavailableError, ExternalServiceError

logger = logging.getLogger(__name__)

CODERABBIT_APP_URL = "https://github.com/apps/coderabbitai"

# Disabled operation -> (deprecation log line, error returned to the caller)
_UNAVAILABLE: Dict[str, tuple[str, str]] = {
    "trigger_review": (
        "Use GitHub PR workflow instead.",
        "This endpoint is not available in the public API. Please use GitHub Pull Requests "
        f"to trigger CodeRabbit reviews. See: {CODERABBIT_APP_URL}",
    ),
    "get_review_status": (
        "Use GitHub API to get CodeRabbit comments from PRs.",
        "This endpoint is not available in the public API. Use GitHub API to get CodeRabbit comments from PRs.",
    ),
    "ask_coderabbit": (
        "Use GitHub comments with @coderabbitai to interact.",
        "This endpoint is not available in the public API. Use GitHub comments with @coderabbitai to interact.",
    ),
    "get_review_history": (
        "Use GitHub API to get PR history with CodeRabbit comments.",
        "This endpoint is not available in the public API. "
        "Use GitHub API to get PR history with CodeRabbit comments.",
    ),
    "configure_review": (
        "Configure CodeRabbit via .coderabbit.yaml file in your repository.",
        "This endpoint is not available in the public API. "
        "Configure CodeRabbit via .coderabbit.yaml file in your repository.",
    ),
}


def report_fingerprint(payload: Dict[str, Any]) -> str:
    return "coderabbit:report:" + json.dumps(payload, sort_keys=True)


class CodeRabbitClient:
    """Async client for the CodeRabbit REST API.

    Purpose:
      - generate_report(from_date, to_date, ...) -> JSON or text report (cached)
      - trigger_review / get_review_status / ask_coderabbit /
        get_review_history / configure_review -> always EndpointUnavailableError
    """

    API_KEY_HEADER = "x-coderabbitai-api-key"

    def __init__(
        self,
        api_key: str,
        *,
        api_url: str = "https://api.coderabbit.ai/api",
        timeout: float = 600.0,
        verify: bool = True,
        cache: Optional[TTLCache[Any]] = None,
    ) -> None:
        self._base_url = (api_url or "").rstrip("/")
        self._timeout = float(timeout)
        self._verify = bool(verify)
        self._headers = {
            self.API_KEY_HEADER: api_key,
            "Content-Type": "application/json",
        }
        self._cache = cache

    async def generate_report(
        self,
        *,
        from_date: str,
        to_date: str,
        prompt: Optional[str] = None,
        group_by: Optional[str] = None,
        org_id: Optional[str] = None,
    ) -> Any:
        """Generate a developer activity report (beta; may take minutes)."""
        payload = {
            "from": from_date,
            "to": to_date,
            "prompt": prompt,
            "groupBy": group_by,
            "orgId": org_id,
        }
        payload = {k: v for k, v in payload.items() if v is not None}

        key = report_fingerprint(payload)
        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                return cached

        logger.info("Generating developer activity report from %s to %s", from_date, to_date)
        try:
            async with self._create_client() as client:
                resp = await client.post("/v1/report.generate", json=payload)
                resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError(f"CodeRabbit returned an error: {e}") from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Failed to call CodeRabbit: {e}") from e

        try:
            report: Any = resp.json()
        except ValueError:
            report = resp.text

        if self._cache is not None:
            self._cache.set(key, report)
        return report

    # --- Disabled operations ---

    async def trigger_review(self, **_: Any) -> NoReturn:
        self._unavailable("trigger_review")

    async def get_review_status(self, **_: Any) -> NoReturn:
        self._unavailable("get_review_status")

    async def ask_coderabbit(self, **_: Any) -> NoReturn:
        self._unavailable("ask_coderabbit")

    async def get_review_history(self, **_: Any) -> NoReturn:
        self._unavailable("get_review_history")

    async def configure_review(self, **_: Any) -> NoReturn:
        self._unavailable("configure_review")

    def _unavailable(self, operation: str) -> NoReturn:
        hint, message = _UNAVAILABLE[operation]
        logger.warning("[DEPRECATED] %s is no longer available. %s", operation, hint)
        raise EndpointUnavailableError(message)

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers,
            timeout=self._timeout,
            verify=self._verify,
        )
