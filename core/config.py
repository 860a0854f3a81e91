"""Application settings read from environment variables (+ optional .env).

Every value has a default so nothing is required at import time. Variables
use the ``TODO_`` prefix, e.g. ``TODO_BASE_URL=http://pb.local:8090``.
"""
from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TODO"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str) -> str:
    v = os.getenv(_k(name))
    return default if v is None or v.strip() == "" else v.strip()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(_k(name))
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(_k(name))
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(_k(name))
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# ---------- store ----------
BASE_URL = _env("BASE_URL", "http://127.0.0.1:8090")
COLLECTION = _env("COLLECTION", "tasks")
REQUEST_TIMEOUT = _env_float("REQUEST_TIMEOUT", 10.0)
STORE_RETRIES = _env_int("STORE_RETRIES", 2)
STORE_RETRY_BACKOFF = _env_float("STORE_RETRY_BACKOFF", 0.5)
PAGE_SIZE = _env_int("PAGE_SIZE", 200)

# ---------- ui ----------
TICK_INTERVAL_MS = _env_int("TICK_INTERVAL_MS", 1000)
WORKER_POLL_MS = _env_int("WORKER_POLL_MS", 50)
TOAST_DURATION_MS = _env_int("TOAST_DURATION_MS", 2500)
WINDOW_GEOMETRY = _env("WINDOW_GEOMETRY", "560x640")
TOPMOST = _env_bool("TOPMOST", False)

# ---------- logging ----------
LOG_DIR = Path(_env("LOG_DIR", ".local/countdown-todo")).expanduser()
LOG_LEVEL = _env("LOG_LEVEL", "INFO").upper()
