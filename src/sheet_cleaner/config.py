"""Environment-driven settings."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _safe_float(value: str | None, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _safe_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class CleanerConfig:
    alias_store_url: str | None = None
    alias_store_token: str | None = None
    alias_store_timeout_sec: float = 5.0
    search_debounce_sec: float = 0.3
    search_limit: int = 20

    @classmethod
    def from_env(cls) -> "CleanerConfig":
        return cls(
            alias_store_url=os.getenv("ALIAS_STORE_URL") or None,
            alias_store_token=os.getenv("ALIAS_STORE_TOKEN") or None,
            alias_store_timeout_sec=max(0.1, _safe_float(os.getenv("ALIAS_STORE_TIMEOUT_SEC"), 5.0)),
            search_debounce_sec=max(0.0, _safe_float(os.getenv("SEARCH_DEBOUNCE_SEC"), 0.3)),
            search_limit=max(1, _safe_int(os.getenv("SEARCH_LIMIT"), 20)),
        )
