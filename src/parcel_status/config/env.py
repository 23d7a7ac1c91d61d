# src/parcel_status/config/env.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional, Tuple

from dotenv import dotenv_values, find_dotenv, load_dotenv

from parcel_status.models import EnvCfg


class EnvError(RuntimeError):
    """Raised when required configuration is missing or malformed."""


# Either one is enough to answer lookups.
SOURCE_KEYS: Tuple[str, ...] = (
    "PARCEL_API_BASE_URL",
    "PARCEL_DATA_FILE",
)

DEFAULT_HTTP_TIMEOUT = 30


def load_project_dotenv(start: Optional[Path] = None, *, override: bool = False) -> Path:
    """
    Find the closest `.env` (CWD first, then the parents of `start`) and load it.
    Returns the resolved path, or Path() when there is none.
    """
    found = find_dotenv(filename=".env", usecwd=True)
    path = Path(found) if found else None

    if path is None and start is not None:
        base = Path(start)
        path = next(
            (p / ".env" for p in (base, *base.parents) if (p / ".env").is_file()),
            None,
        )

    if path is None or not path.is_file():
        return Path()

    load_dotenv(dotenv_path=path, override=override)
    return path.resolve()


def get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(name, default)


def get_required_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise EnvError(f"Missing required environment variable: {name}")
    return value


def env(name: str, *, default: Optional[str] = None, required: bool = False, cast=None):
    """
    Read one variable. Missing + required raises KeyError(name); missing otherwise
    returns `default`. `cast` is applied to present values and may raise.
    """
    raw = os.getenv(name)
    if raw is None:
        if required:
            raise KeyError(name)
        return default
    return cast(raw) if cast is not None else raw


def load_env(
    dotenv_path: Optional[Path] = None,
    *,
    override: bool = False,
    required_keys: Tuple[str, ...] = (),
    strict: bool = False,
) -> Dict[str, str]:
    """
    Load a .env file into the process environment and return the values it holds.

    With no `dotenv_path` the nearest file is discovered. A missing file is not an
    error; `strict` only checks `required_keys` against the resulting environment.
    """
    if dotenv_path:
        path = Path(dotenv_path)
        if path.is_file():
            load_dotenv(dotenv_path=path, override=override)
    else:
        path = load_project_dotenv(override=override)

    loaded: Dict[str, str] = {}
    if path.is_file():
        loaded = {k: v for k, v in dotenv_values(path).items() if v is not None}

    if strict and required_keys:
        missing = [k for k in required_keys if not os.getenv(k)]
        if missing:
            raise EnvError(
                f"Missing required environment variable(s): {', '.join(missing)}")

    return loaded


def _timeout_from_env() -> int:
    raw = (os.getenv("PARCEL_HTTP_TIMEOUT") or "").strip()
    if not raw:
        return DEFAULT_HTTP_TIMEOUT
    try:
        value = int(raw)
    except ValueError as e:
        raise EnvError(f"PARCEL_HTTP_TIMEOUT must be an integer, got {raw!r}") from e
    if value <= 0:
        raise EnvError(f"PARCEL_HTTP_TIMEOUT must be positive, got {value}")
    return value


def get_app_env(dotenv_path: Path | str | None = ".env", *, strict: bool = False) -> EnvCfg:
    """
    Build the lookup configuration from the environment (process env wins over
    the .env file). `dotenv_path=None` auto-discovers the file.

    With `strict=True` one of SOURCE_KEYS must be set; otherwise callers fall back
    to the bundled sample shipments.
    """
    load_env(Path(dotenv_path) if dotenv_path else None, override=False)

    cfg = EnvCfg(
        API_BASE_URL=os.getenv("PARCEL_API_BASE_URL") or None,
        DATA_FILE=os.getenv("PARCEL_DATA_FILE") or None,
        HTTP_TIMEOUT=_timeout_from_env(),
    )
    if strict and not cfg.has_source:
        raise EnvError(
            "Missing required environment variable: set one of "
            + " or ".join(SOURCE_KEYS)
        )
    return cfg


__all__ = [
    "DEFAULT_HTTP_TIMEOUT",
    "EnvError",
    "SOURCE_KEYS",
    "load_project_dotenv",
    "load_env",
    "get_env",
    "get_required_env",
    "env",
    "get_app_env",
]
