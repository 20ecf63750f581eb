"""MCP tools that open pull requests so CodeRabbit reviews them.

Registers 'createPRForReview' (PR from an existing branch) and
'pushChangesAndCreatePR' (commit local work on a new branch first).
"""

from __future__ import annotations

from typing import List, Optional

from mcp.server.fastmcp import FastMCP

from clients.github import GitHubClient
from clients.github.inputs import require_text, validate_branch, validate_name
from tools.formatting import format_pull_request


def register(mcp: FastMCP, *, github_client: GitHubClient) -> None:
    @mcp.tool(name="createPRForReview")
    async def create_pr_for_review(
        owner: str,
        repo: str,
        title: str,
        head: str,
        base: str = "main",
        body: Optional[str] = None,
    ) -> str:
        """Create a GitHub pull request to trigger automatic CodeRabbit review.

        Params:
          - owner / repo: repository owner and name.
          - title: PR title (required).
          - head: source branch.
          - base: target branch (default: "main").
          - body: optional PR description.
        """
        pr = await github_client.create_pull_request(
            owner=validate_name(owner, field="owner"),
            repo=validate_name(repo, field="repository name"),
            title=require_text(title, field="Title"),
            head=validate_branch(head),
            base=validate_branch(base or "main"),
            body=body,
        )
        return format_pull_request(pr)

    @mcp.tool(name="pushChangesAndCreatePR")
    async def push_changes_and_create_pr(
        owner: str,
        repo: str,
        branch: str,
        title: str,
        description: Optional[str] = None,
        files: Optional[List[str]] = None,
    ) -> str:
        """Commit local changes on a new branch, push it and open a PR for review.

        Nothing may be staged beforehand and `branch` must not exist locally.
        Without `files` the modified tracked files are committed; new files
        must be listed in `files`. On failure the commit is undone (its changes
        stay in the working tree), the original branch is restored and the
        new branch removed.
        """
        pr = await github_client.push_changes_and_create_pr(
            owner=validate_name(owner, field="owner"),
            repo=validate_name(repo, field="repository name"),
            branch=validate_branch(branch),
            title=require_text(title, field="Title"),
            description=description,
            files=files,
        )
        return format_pull_request(pr)
