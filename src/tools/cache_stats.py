"""MCP tool exposing the shared response cache statistics."""

from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP

from core.cache import TTLCache
from tools.formatting import format_cache_stats


def register(mcp: FastMCP, *, cache: TTLCache[Any]) -> None:
    @mcp.tool(name="getCacheStats")
    async def get_cache_stats() -> str:
        """Report entry count, capacity, hits, misses and hit rate of the cache."""
        return format_cache_stats(cache.get_stats())
