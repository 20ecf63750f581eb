"""Markdown rendering for tool results.

Each helper turns a client result into the text block returned to the
calling agent.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Sequence

from core.cache import CacheStats
from core.models import CodeRabbitComment, PostedQuestion, PRReview, PullRequest

NO_COMMENTS_MESSAGE = (
    "No CodeRabbit comments found. The review might still be in progress "
    "or CodeRabbit is not installed for this repository."
)
NO_REVIEWS_MESSAGE = (
    "No CodeRabbit reviews found. The review might still be in progress "
    "or CodeRabbit is not installed for this repository."
)


def format_timestamp(value: str) -> str:
    # GitHub timestamps look like 2025-01-31T12:00:00Z
    raw = (value or "").strip()
    if not raw:
        return "unknown time"
    try:
        dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return raw
    return dt.strftime("%Y-%m-%d %H:%M:%S %Z").strip()


def format_report(report: Any, *, from_date: str, to_date: str) -> str:
    content = "## Developer Activity Report\n\n"
    content += f"**Period:** {from_date} to {to_date}\n\n"
    if isinstance(report, str):
        content += report
    else:
        content += "```json\n" + json.dumps(report, indent=2) + "\n```"
    return content


def format_pull_request(pr: PullRequest) -> str:
    content = "## Pull Request Created\n\n"
    content += f"**PR Number:** #{pr.number}\n"
    content += f"**URL:** {pr.url}\n"
    content += f"**Status:** {pr.state}\n\n"
    content += "CodeRabbit will automatically review this PR within 1-2 minutes."
    return content


def format_comments(comments: Sequence[CodeRabbitComment]) -> str:
    if not comments:
        return NO_COMMENTS_MESSAGE

    content = f"## CodeRabbit Comments ({len(comments)})\n\n"
    for comment in comments:
        content += f"### {format_timestamp(comment.created_at)}\n"
        content += f"{comment.body}\n"
        content += f"[View on GitHub]({comment.html_url})\n\n"
    return content


def format_reviews(reviews: Sequence[PRReview]) -> str:
    if not reviews:
        return NO_REVIEWS_MESSAGE

    content = f"## CodeRabbit Reviews ({len(reviews)})\n\n"
    for review in reviews:
        submitted = format_timestamp(review.submitted_at) if review.submitted_at else "not submitted"
        content += f"### {review.state} ({submitted})\n"
        if review.body:
            content += f"{review.body}\n"
        content += f"[View on GitHub]({review.html_url})\n\n"
    return content


def format_posted_question(result: PostedQuestion) -> str:
    content = "## Question Posted to CodeRabbit\n\n"
    content += f"**Comment ID:** {result.comment_id}\n"
    content += f"**URL:** {result.url}\n\n"
    content += result.message
    return content


def format_cache_stats(stats: CacheStats) -> str:
    hit_rate = "n/a (no lookups yet)" if stats.hit_rate is None else f"{stats.hit_rate:.1%}"
    content = "## Cache Statistics\n\n"
    content += f"**Entries:** {stats.size}/{stats.maxsize}\n"
    content += f"**Hits:** {stats.hits}\n"
    content += f"**Misses:** {stats.misses}\n"
    content += f"**Hit Rate:** {hit_rate}\n"
    return content
