"""Runtime settings read from the environment (and an optional ``.env`` file)."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

# Project root directory (repo root)
ROOT_DIR = Path(__file__).resolve().parents[1]


def _int_from_env(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"Environment variable '{name}' must be an integer") from exc


DEFAULT_SEED: Optional[int] = _int_from_env("DRAWKIT_SEED", None)
"""Seed for :func:`drawkit.random_source.make_random_source`; unset means system entropy."""

DEFAULT_RETRY_COUNT: int = _int_from_env("DRAWKIT_RETRY_COUNT", 10)  # type: ignore[assignment]
"""Consecutive misses tolerated per item group before sampling gives up."""

DEFAULT_CSV_DELIMITER: str = os.getenv("DRAWKIT_CSV_DELIMITER", ",")
"""Field delimiter of record files read by :class:`FileRecordSource`."""

DB_URL: str = os.getenv("DB_URL", "sqlite:///./dev.db")
"""Database URL used when no explicit URL is passed to ``make_engine``."""

LOG_LEVEL: str = os.getenv("DRAWKIT_LOG_LEVEL", "WARNING")
"""Log level applied by the command-line script."""
