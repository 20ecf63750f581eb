"""GitHub client module: drive CodeRabbit reviews through pull requests.

CodeRabbit reviews pull requests as a GitHub App, so every "real" review
operation is a GitHub REST call: open a PR, read the bot's comments and
reviews, or mention @coderabbitai in a comment. Read operations go through
the shared `core.cache.TTLCache`; all requests honor GitHub throttling
signals via `core.rate_limiter.RateLimiter`.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence

import httpx

from core.cache import TTLCache
from core.errors import (
    ExternalServiceError,
    GitOperationError,
    NotFoundError,
    RateLimitExceededError,
    ValidationError,
)
from core.models import CodeRabbitComment, PostedQuestion, PRReview, PullRequest
from core.rate_limiter import RateLimiter

from .git import GitRepo

logger = logging.getLogger(__name__)

# GitHub Apps may show up with or without the [bot] suffix
CODERABBIT_USERNAMES = frozenset({"coderabbitai", "coderabbitai[bot]"})

DEFAULT_PR_BODY = "PR created for CodeRabbit review"


def comments_fingerprint(owner: str, repo: str, pr_number: int) -> str:
    return f"github:comments:{owner}/{repo}#{pr_number}"


def reviews_fingerprint(owner: str, repo: str, pr_number: int) -> str:
    return f"github:reviews:{owner}/{repo}#{pr_number}"


def _is_coderabbit(item: Mapping[str, Any]) -> bool:
    login = ((item.get("user") or {}).get("login") or "").lower()
    return login in CODERABBIT_USERNAMES


@dataclass
class _PushProgress:
    # What push_changes_and_create_pr has changed so far, so rollback undoes only that
    created: bool = False
    committed: bool = False


class GitHubClient:
    """Async GitHub REST client for the CodeRabbit pull request workflow.

    Purpose:
      - create_pull_request(...) -> PullRequest
      - get_coderabbit_comments(...) / get_coderabbit_reviews(...) (cached)
      - ask_coderabbit(...) -> PostedQuestion
      - push_changes_and_create_pr(...) -> PullRequest (local git + PR)

    Key behavior:
      - Checks the core rate limit before each operation and refuses to
        proceed when the quota is exhausted.
      - Retries requests on explicit throttling responses (bounded).
    """

    BASE_URL = "https://api.github.com"
    JSON_ACCEPT = "application/vnd.github+json"

    _MAX_RATE_LIMIT_RETRIES = 2  # total attempts = 1 + retries
    _LOW_QUOTA_THRESHOLD = 100

    def __init__(
        self,
        token: str,
        *,
        timeout: float = 20.0,
        verify: bool = True,
        cache: Optional[TTLCache[Any]] = None,
        rate_limiter: Optional[RateLimiter] = None,
        git: Optional[GitRepo] = None,
    ) -> None:
        token_clean = (token or "").strip()
        if not token_clean:
            raise ValidationError("GitHub token is required and cannot be empty")

        self._timeout = float(timeout)
        self._verify = bool(verify)
        self._headers = {
            "Accept": self.JSON_ACCEPT,
            "Authorization": f"Bearer {token_clean}",
            "User-Agent": "coderabbit-mcp-server",
        }

        self._cache = cache
        self._rate_limiter = rate_limiter or RateLimiter()
        self._git = git

    # --- Rate limit ---

    async def check_rate_limit(self, client: httpx.AsyncClient) -> None:
        """Raise RateLimitExceededError when the core quota is used up.

        Failures of the check itself are logged and ignored.
        """
        try:
            resp = await client.get("/rate_limit")
            resp.raise_for_status()
            data = resp.json() or {}
            core = (data.get("resources") or {}).get("core") or data.get("rate") or {}
            remaining = int(core["remaining"])
            limit = int(core["limit"])
            reset = int(core["reset"])
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
            logger.warning("Could not check GitHub rate limit: %s", e)
            return

        if remaining < self._LOW_QUOTA_THRESHOLD:
            logger.warning("GitHub API rate limit low: %d/%d remaining", remaining, limit)

        if remaining == 0:
            wait_seconds = max(0.0, reset - time.time())
            minutes = math.ceil(wait_seconds / 60)
            raise RateLimitExceededError(f"GitHub API rate limit exceeded. Resets in {minutes} minutes")

    # --- Pull requests ---

    async def create_pull_request(
        self,
        *,
        owner: str,
        repo: str,
        title: str,
        head: str,
        base: str = "main",
        body: Optional[str] = None,
    ) -> PullRequest:
        async with self._create_client() as client:
            await self.check_rate_limit(client)
            resp = await self._request(
                client,
                "POST",
                f"/repos/{owner}/{repo}/pulls",
                json={
                    "title": title,
                    "head": head,
                    "base": base or "main",
                    "body": body or DEFAULT_PR_BODY,
                },
            )
            if resp.status_code == 404:
                raise NotFoundError(f"Repository not found: {owner}/{repo}")
            self._raise_for_status(resp, context="create_pull_request")
            return PullRequest.from_api(resp.json())

    async def get_coderabbit_comments(self, *, owner: str, repo: str, pr_number: int) -> List[CodeRabbitComment]:
        """Issue comments on the PR written by CodeRabbit, oldest first."""
        key = comments_fingerprint(owner, repo, pr_number)
        cached = self._cache_get(key)
        if cached is not None:
            return list(cached)

        async with self._create_client() as client:
            await self.check_rate_limit(client)
            resp = await self._request(
                client,
                "GET",
                f"/repos/{owner}/{repo}/issues/{pr_number}/comments",
                params={"per_page": 100},
            )
            if resp.status_code == 404:
                raise NotFoundError(f"Pull request not found: {owner}/{repo}#{pr_number}")
            self._raise_for_status(resp, context="get_coderabbit_comments")

            out = [CodeRabbitComment.from_api(item) for item in resp.json() or [] if _is_coderabbit(item)]
            self._cache_set(key, out)
            return list(out)

    async def get_coderabbit_reviews(self, *, owner: str, repo: str, pr_number: int) -> List[PRReview]:
        key = reviews_fingerprint(owner, repo, pr_number)
        cached = self._cache_get(key)
        if cached is not None:
            return list(cached)

        async with self._create_client() as client:
            await self.check_rate_limit(client)
            resp = await self._request(
                client,
                "GET",
                f"/repos/{owner}/{repo}/pulls/{pr_number}/reviews",
                params={"per_page": 100},
            )
            if resp.status_code == 404:
                raise NotFoundError(f"Pull request not found: {owner}/{repo}#{pr_number}")
            self._raise_for_status(resp, context="get_coderabbit_reviews")

            out = [PRReview.from_api(item) for item in resp.json() or [] if _is_coderabbit(item)]
            self._cache_set(key, out)
            return list(out)

    async def ask_coderabbit(self, *, owner: str, repo: str, pr_number: int, question: str) -> PostedQuestion:
        """Post an @coderabbitai mention; the bot answers asynchronously in the PR."""
        async with self._create_client() as client:
            await self.check_rate_limit(client)
            resp = await self._request(
                client,
                "POST",
                f"/repos/{owner}/{repo}/issues/{pr_number}/comments",
                json={"body": f"@coderabbitai {question}"},
            )
            if resp.status_code == 404:
                raise NotFoundError(f"Pull request not found: {owner}/{repo}#{pr_number}")
            self._raise_for_status(resp, context="ask_coderabbit")

        # Our own comment changes the thread; drop the cached listing
        if self._cache is not None:
            self._cache.delete(comments_fingerprint(owner, repo, pr_number))

        data = resp.json()
        return PostedQuestion(comment_id=int(data["id"]), url=str(data.get("html_url") or ""))

    async def push_changes_and_create_pr(
        self,
        *,
        owner: str,
        repo: str,
        branch: str,
        title: str,
        description: Optional[str] = None,
        files: Optional[Sequence[str]] = None,
    ) -> PullRequest:
        """Commit local work on a new branch, push it and open a PR against main.

        The working tree may carry unstaged edits (they are what gets shipped)
        but nothing may be staged yet, and `branch` must not exist locally.
        On a later failure the commit is undone with its changes left as
        unstaged edits, the original branch is checked out again and the
        branch created here is deleted before the error propagates.
        """
        if self._git is None:
            raise GitOperationError("No local git repository configured")
        git = self._git

        original_branch = await asyncio.to_thread(git.current_branch)
        # Refusals happen before anything is touched, so they need no rollback
        await asyncio.to_thread(self._ensure_can_branch, git, branch)

        progress = _PushProgress()
        try:
            await asyncio.to_thread(self._commit_on_new_branch, git, branch, title, files, progress)
            await asyncio.to_thread(git.push, branch)
            return await self.create_pull_request(
                owner=owner,
                repo=repo,
                title=title,
                head=branch,
                base="main",
                body=description,
            )
        except Exception:
            await asyncio.to_thread(self._rollback, git, original_branch, branch, progress)
            raise

    # --- Git helpers ---

    @staticmethod
    def _ensure_can_branch(git: GitRepo, branch: str) -> None:
        if git.has_staged_changes():
            raise GitOperationError("Repository has staged changes. Please commit or unstage them first.")
        if branch in git.local_branches():
            raise GitOperationError(
                f"Branch {branch} already exists locally. Please use a different branch name."
            )

    @staticmethod
    def _commit_on_new_branch(
        git: GitRepo,
        branch: str,
        title: str,
        files: Optional[Sequence[str]],
        progress: _PushProgress,
    ) -> None:
        git.checkout_new_branch(branch)
        progress.created = True

        if files:
            git.add(files)
        else:
            # Only updated tracked files; new files must be listed explicitly
            git.add_tracked()
            if git.untracked_files():
                logger.warning(
                    "New untracked files detected but not added. Specify files explicitly if needed."
                )

        if not git.has_staged_changes():
            raise GitOperationError("No changes to commit")

        git.commit(f"feat: {title}")
        progress.committed = True

    @staticmethod
    def _rollback(git: GitRepo, original_branch: str, branch: str, progress: _PushProgress) -> None:
        if not progress.created:
            return

        if progress.committed:
            try:
                git.reset_last_commit()
            except GitOperationError as e:
                logger.error("Failed to undo commit on %s, leaving the branch in place: %s", branch, e)
                return

        try:
            git.checkout(original_branch)
        except GitOperationError as e:
            logger.error("Failed to restore original branch %s: %s", original_branch, e)
            return

        try:
            git.delete_branch(branch)
        except GitOperationError as e:
            logger.warning("Branch %s not deleted during rollback: %s", branch, e)

    # --- Cache helpers ---

    def _cache_get(self, key: str) -> Any:
        return self._cache.get(key) if self._cache is not None else None

    def _cache_set(self, key: str, value: Any) -> None:
        if self._cache is not None:
            self._cache.set(key, value)

    # --- HTTP helpers ---

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers=self._headers,
            timeout=self._timeout,
            verify=self._verify,
        )

    def _external(self, context: str, err: BaseException) -> ExternalServiceError:
        return ExternalServiceError(f"GitHub request failed ({context}): {err}")

    def _raise_for_status(self, resp: httpx.Response, *, context: str) -> None:
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise self._external(context, e) from e

    async def _request(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Optional[Mapping[str, Any]] = None,
    ) -> httpx.Response:
        """Send a request with bounded retries for explicit throttling signals."""
        attempts = self._MAX_RATE_LIMIT_RETRIES + 1

        for attempt in range(attempts):
            try:
                resp = await client.request(method, url, params=params, json=json)
            except httpx.HTTPError as e:
                raise self._external(f"{method} {url}", e) from e

            if attempt < attempts - 1:
                should_retry = await self._rate_limiter.maybe_sleep_and_retry(resp)
                if should_retry:
                    continue

            return resp

        raise RuntimeError("Unreachable: _request did not return a response")
