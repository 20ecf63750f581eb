"""MCP tools that read and write CodeRabbit activity on a pull request.

Registers 'getCodeRabbitComments', 'getCodeRabbitReviews' and
'askCodeRabbitInPR'.
"""

from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from clients.github import GitHubClient
from clients.github.inputs import require_text, validate_name, validate_pr_number
from tools.formatting import format_comments, format_posted_question, format_reviews


def register(mcp: FastMCP, *, github_client: GitHubClient) -> None:
    @mcp.tool(name="getCodeRabbitComments")
    async def get_coderabbit_comments(owner: str, repo: str, pr_number: int) -> str:
        """Get CodeRabbit review comments from a GitHub pull request."""
        comments = await github_client.get_coderabbit_comments(
            owner=validate_name(owner, field="owner"),
            repo=validate_name(repo, field="repository name"),
            pr_number=validate_pr_number(pr_number),
        )
        return format_comments(comments)

    @mcp.tool(name="getCodeRabbitReviews")
    async def get_coderabbit_reviews(owner: str, repo: str, pr_number: int) -> str:
        """Get the pull request reviews submitted by CodeRabbit."""
        reviews = await github_client.get_coderabbit_reviews(
            owner=validate_name(owner, field="owner"),
            repo=validate_name(repo, field="repository name"),
            pr_number=validate_pr_number(pr_number),
        )
        return format_reviews(reviews)

    @mcp.tool(name="askCodeRabbitInPR")
    async def ask_coderabbit_in_pr(owner: str, repo: str, pr_number: int, question: str) -> str:
        """Ask CodeRabbit a question by posting an @coderabbitai comment in a PR.

        CodeRabbit answers asynchronously; read the reply later with
        getCodeRabbitComments.
        """
        result = await github_client.ask_coderabbit(
            owner=validate_name(owner, field="owner"),
            repo=validate_name(repo, field="repository name"),
            pr_number=validate_pr_number(pr_number),
            question=require_text(question, field="Question"),
        )
        return format_posted_question(result)
