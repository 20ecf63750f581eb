"""Server bootstrap for the CodeRabbit MCP service.

Creates the FastMCP instance, builds the shared response cache and the
CodeRabbit/GitHub clients, registers tools and starts the MCP server
(stdio transport). GitHub tools are only registered when GITHUB_TOKEN is set.
"""

import logging
import sys
from typing import Any

from mcp.server.fastmcp import FastMCP

from clients.coderabbit import CodeRabbitClient
from clients.github import GitHubClient, GitRepo
from config import (
    CACHE_MAXSIZE,
    CACHE_SWEEP_SECONDS,
    CACHE_TTL_SECONDS,
    CODERABBIT_API_KEY,
    CODERABBIT_API_URL,
    CODERABBIT_TIMEOUT,
    GIT_REPO_ROOT,
    GITHUB_TIMEOUT,
    GITHUB_TOKEN,
    HTTP_VERIFY,
    LOG_LEVEL,
)
from core.cache import TTLCache

from tools.cache_stats import register as register_cache_stats
from tools.create_pr import register as register_create_pr
from tools.generate_report import register as register_generate_report
from tools.legacy_reviews import register as register_legacy_reviews
from tools.pr_comments import register as register_pr_comments

logger = logging.getLogger(__name__)

mcp = FastMCP("coderabbit-mcp")


def configure_logging() -> None:
    # stdout carries the MCP stdio protocol; logs must go to stderr
    logging.basicConfig(
        level=LOG_LEVEL,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def build_cache() -> TTLCache[Any]:
    return TTLCache(
        ttl_seconds=CACHE_TTL_SECONDS,
        maxsize=CACHE_MAXSIZE,
        sweep_interval_seconds=CACHE_SWEEP_SECONDS,
    )


def register_tools(cache: TTLCache[Any]) -> int:
    """Register every tool against `mcp` and return how many were registered."""
    coderabbit_client = CodeRabbitClient(
        CODERABBIT_API_KEY or "",
        api_url=CODERABBIT_API_URL,
        timeout=CODERABBIT_TIMEOUT,
        verify=HTTP_VERIFY,
        cache=cache,
    )

    register_generate_report(mcp, coderabbit_client=coderabbit_client)
    register_legacy_reviews(mcp, coderabbit_client=coderabbit_client)
    register_cache_stats(mcp, cache=cache)
    count = 7

    if GITHUB_TOKEN:
        logger.info("GitHub integration enabled - registering GitHub tools")
        github_client = GitHubClient(
            GITHUB_TOKEN,
            timeout=GITHUB_TIMEOUT,
            verify=HTTP_VERIFY,
            cache=cache,
            git=GitRepo(GIT_REPO_ROOT),
        )
        register_create_pr(mcp, github_client=github_client)
        register_pr_comments(mcp, github_client=github_client)
        count += 5
    else:
        logger.warning("GitHub integration disabled - set GITHUB_TOKEN to enable")

    return count


def main() -> None:
    configure_logging()

    if not CODERABBIT_API_KEY:
        logger.error("CODERABBIT_API_KEY environment variable is required")
        raise SystemExit(1)

    cache = build_cache()
    try:
        count = register_tools(cache)
        logger.info("CodeRabbit MCP server running with %d tools registered", count)
        mcp.run(transport="stdio")
    finally:
        cache.destroy()


if __name__ == "__main__":
    main()
