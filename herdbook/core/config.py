from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    window_months: int = 12
    # Off keeps the live shared-cost denominator; on evaluates sold animals as of their sale date.
    freeze_shared_cost_at_sale: bool = False


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got '{raw}'.") from exc


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUE_VALUES


def load_settings(env_file: Path | None = None) -> Settings:
    env_path = env_file or Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    window_months = _env_int("HERDBOOK_WINDOW_MONTHS", 12)
    if not 1 <= window_months <= 12:
        raise ValueError("HERDBOOK_WINDOW_MONTHS must be between 1 and 12.")

    return Settings(
        log_level=os.getenv("HERDBOOK_LOG_LEVEL", "INFO").upper(),
        window_months=window_months,
        freeze_shared_cost_at_sale=_env_bool("HERDBOOK_FREEZE_SHARED_COST_AT_SALE", False),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
