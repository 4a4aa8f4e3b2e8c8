from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional

from dotenv import dotenv_values


_CACHE: Dict[str, Optional[str]] = {}
_DOTENV_CACHE: Optional[Dict[str, str]] = None


def _load_dotenv_values() -> Dict[str, str]:
    global _DOTENV_CACHE
    if _DOTENV_CACHE is not None:
        return _DOTENV_CACHE

    values: Dict[str, str] = {}
    env_file = Path(os.getenv("VETCATALOG_ENV_FILE", ".env"))
    if env_file.exists():
        for key, value in dotenv_values(env_file).items():
            if isinstance(key, str) and isinstance(value, str):
                values[key.upper()] = value

    _DOTENV_CACHE = values
    return values


def get_secret(name: str, default: Optional[str] = None) -> Optional[str]:
    """
    Retrieve a setting from the environment, falling back to the .env file.
    """
    key = name.upper()
    if key in _CACHE:
        return _CACHE[key] if _CACHE[key] is not None else default

    value = os.getenv(key)
    if value:
        _CACHE[key] = value
        return value

    # Prefixed variant for hosts that namespace app settings
    alt_value = os.getenv("VETCATALOG_" + key)
    if alt_value:
        _CACHE[key] = alt_value
        return alt_value

    values = _load_dotenv_values()
    if key in values:
        _CACHE[key] = values[key]
        return values[key]

    _CACHE[key] = None
    return default


def clear_cache() -> None:
    global _DOTENV_CACHE
    _CACHE.clear()
    _DOTENV_CACHE = None
