"""Disabled CodeRabbit review tools.

These names were served by earlier releases; the public CodeRabbit API no
longer offers them. Each tool fails with EndpointUnavailableError naming
the GitHub workflow to use instead.
"""

from __future__ import annotations

from typing import List, Optional

from mcp.server.fastmcp import FastMCP

from clients.coderabbit import CodeRabbitClient


def register(mcp: FastMCP, *, coderabbit_client: CodeRabbitClient) -> None:
    @mcp.tool(name="triggerReview")
    async def trigger_review(
        repository: str,
        pr_number: Optional[int] = None,
        branch: Optional[str] = None,
        scope: str = "incremental",
        files: Optional[List[str]] = None,
        use_local_changes: bool = False,
    ) -> str:
        """Deprecated: open a pull request (createPRForReview) instead."""
        return await coderabbit_client.trigger_review(
            repository=repository,
            pr_number=pr_number,
            branch=branch,
            scope=scope,
            files=files,
            use_local_changes=use_local_changes,
        )

    @mcp.tool(name="getReviewStatus")
    async def get_review_status(
        review_id: Optional[str] = None,
        repository: Optional[str] = None,
        pr_number: Optional[int] = None,
    ) -> str:
        """Deprecated: use getCodeRabbitComments instead."""
        return await coderabbit_client.get_review_status(
            review_id=review_id, repository=repository, pr_number=pr_number
        )

    @mcp.tool(name="askCodeRabbit")
    async def ask_coderabbit(review_id: str, question: str, context: str = "general") -> str:
        """Deprecated: use askCodeRabbitInPR instead."""
        return await coderabbit_client.ask_coderabbit(review_id=review_id, question=question, context=context)

    @mcp.tool(name="getReviewHistory")
    async def get_review_history(repository: str, limit: int = 10, since: Optional[str] = None) -> str:
        """Deprecated: list PR comments with getCodeRabbitComments instead."""
        return await coderabbit_client.get_review_history(repository=repository, limit=limit, since=since)

    @mcp.tool(name="configureReview")
    async def configure_review(repository: str, settings: Optional[dict] = None) -> str:
        """Deprecated: commit a .coderabbit.yaml file to the repository instead."""
        return await coderabbit_client.configure_review(repository=repository, settings=settings)
