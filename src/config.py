"""Configuration and environment helpers for the project.

Loads a local .env file (if any), provides small helpers to read typed
environment variables and exposes the settings used across the codebase
(CodeRabbit/GitHub credentials, HTTP timeouts, cache sizing, logging).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def _env_str(name: str) -> Optional[str]:
    raw = (os.environ.get(name) or "").strip()
    return raw or None


# CodeRabbit
CODERABBIT_API_KEY = _env_str("CODERABBIT_API_KEY")
CODERABBIT_API_URL = os.environ.get("CODERABBIT_API_URL", "https://api.coderabbit.ai/api").strip()
CODERABBIT_TIMEOUT = _env_float("CODERABBIT_TIMEOUT", 600.0)  # report generation is slow

# GitHub (tools are only registered when a token is present)
GITHUB_TOKEN = _env_str("GITHUB_TOKEN")
GITHUB_TIMEOUT = _env_float("GITHUB_TIMEOUT", 20.0)

# Network / HTTP
HTTP_VERIFY = _env_bool("HTTP_VERIFY", True)

# Cache
CACHE_TTL_SECONDS = _env_float("CACHE_TTL_SECONDS", 300.0)
CACHE_MAXSIZE = _env_int("CACHE_MAXSIZE", 100)
CACHE_SWEEP_SECONDS = _env_float("CACHE_SWEEP_SECONDS", 60.0)

# Local working tree used by pushChangesAndCreatePR
GIT_REPO_ROOT = Path(os.environ.get("GIT_REPO_ROOT", ".")).resolve()

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
