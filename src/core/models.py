"""Immutable records returned by the CodeRabbit and GitHub clients.

Tools format these into Markdown; keeping them typed keeps the client
APIs explicit and the formatting code free of raw JSON lookups.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class PullRequest:
    number: int
    url: str
    state: str

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "PullRequest":
        return cls(
            number=int(data["number"]),
            url=str(data.get("html_url") or ""),
            state=str(data.get("state") or "open"),
        )


@dataclass(frozen=True)
class CodeRabbitComment:
    """An issue comment left on a pull request by the CodeRabbit bot."""

    id: int
    body: str
    created_at: str
    html_url: str

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "CodeRabbitComment":
        return cls(
            id=int(data["id"]),
            body=str(data.get("body") or ""),
            created_at=str(data.get("created_at") or ""),
            html_url=str(data.get("html_url") or ""),
        )


@dataclass(frozen=True)
class PRReview:
    """A pull request review submitted by the CodeRabbit bot."""

    id: int
    state: str
    body: str
    submitted_at: Optional[str]
    html_url: str

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "PRReview":
        return cls(
            id=int(data["id"]),
            state=str(data.get("state") or "PENDING"),
            body=str(data.get("body") or ""),
            submitted_at=data.get("submitted_at") or None,
            html_url=str(data.get("html_url") or ""),
        )


@dataclass(frozen=True)
class PostedQuestion:
    comment_id: int
    url: str
    message: str = "Question posted. CodeRabbit will respond in the PR."
