from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv


def project_root() -> Path:
    # cfbstats/utils/env.py -> project root
    return Path(__file__).resolve().parents[2]


def load_env() -> None:
    """
    Load settings from a dotenv file without overriding the real environment.

    ENV_FILE points at an explicit file; otherwise python-dotenv searches
    upwards for a .env.
    """
    env_file = os.getenv("ENV_FILE")
    load_dotenv(dotenv_path=env_file or None, override=False)


def _raw(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def getenv_str(name: str, default: Optional[str] = None) -> Optional[str]:
    return _raw(name) or default


def getenv_float(name: str, default: float) -> float:
    raw = _raw(name)
    try:
        return float(raw) if raw is not None else default
    except ValueError:
        return default


def getenv_int(name: str, default: int) -> int:
    raw = _raw(name)
    try:
        return int(raw) if raw is not None else default
    except ValueError:
        return default


def getenv_choice(name: str, choices: Sequence[str], default: str) -> str:
    """Case-insensitive enum setting; unknown values raise so typos are loud."""
    raw = (_raw(name) or default).lower()
    if raw not in choices:
        raise ValueError(f"{name} must be one of {', '.join(choices)}; got {raw!r}")
    return raw
