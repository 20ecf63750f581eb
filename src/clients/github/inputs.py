from __future__ import annotations

import re
from datetime import datetime
from typing import Optional, Tuple

from core.errors import ValidationError


_NAME_RE = re.compile(r"^[a-zA-Z0-9_.-]+$")
_BRANCH_RE = re.compile(r"^[a-zA-Z0-9/_.-]+$")
_REPOSITORY_RE = re.compile(r"^([a-zA-Z0-9_.-]+)/([a-zA-Z0-9_.-]+)$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def validate_name(value: str, *, field: str = "name") -> str:
    # GitHub owner / repository names
    clean = (value or "").strip()
    if not _NAME_RE.match(clean):
        raise ValidationError(f"Invalid {field}: {value!r}")
    return clean


def validate_branch(branch: str) -> str:
    clean = (branch or "").strip()
    if not _BRANCH_RE.match(clean):
        raise ValidationError(f"Invalid branch name: {branch!r}")
    return clean


def parse_repository(repository: str) -> Tuple[str, str]:
    m = _REPOSITORY_RE.match((repository or "").strip())
    if not m:
        raise ValidationError("Repository must be in format owner/repo")
    return m.group(1), m.group(2)


def validate_pr_number(pr_number: int) -> int:
    try:
        n = int(pr_number)
    except (TypeError, ValueError) as e:
        raise ValidationError("PR number must be a positive integer") from e
    if n <= 0:
        raise ValidationError("PR number must be positive")
    return n


def require_text(value: Optional[str], *, field: str) -> str:
    clean = (value or "").strip()
    if not clean:
        raise ValidationError(f"{field} cannot be empty")
    return clean


def validate_report_date(value: str, *, field: str) -> str:
    """Accept YYYY-MM-DD or a full ISO-8601 datetime (e.g. 2025-01-31T23:59:59Z)."""
    raw = (value or "").strip()
    if _DATE_RE.match(raw):
        try:
            datetime.strptime(raw, "%Y-%m-%d")
        except ValueError as e:
            raise ValidationError(f"Invalid {field} date: {value!r}") from e
        return raw

    if "T" in raw:
        try:
            # fromisoformat does not accept a trailing "Z" before Python 3.11
            datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError as e:
            raise ValidationError(f"Invalid {field} datetime: {value!r}") from e
        return raw

    raise ValidationError(f"{field} must be in format YYYY-MM-DD or an ISO datetime")
