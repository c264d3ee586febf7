from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

"""Environment helper utilities.

Loads a `.env` file from the project root so that repricing settings
(e.g. ``REPRICING_LOG_LEVEL``) defined there become available via
``os.getenv``, and reads typed values back out of the environment.
"""

__all__ = ["load_project_dotenv", "env_int", "env_str"]

logger = logging.getLogger(__name__)


def _find_project_root(start: Path | None = None) -> Path:
    """Traverse upwards until we find a directory that contains `pyproject.toml`."""
    current = start or Path(__file__).resolve().parent
    for _ in range(10):  # safety break
        if (current / "pyproject.toml").exists():
            return current
        if current.parent == current:
            break
        current = current.parent
    return Path(__file__).resolve().parent


def load_project_dotenv(start: Path | None = None) -> bool:
    """Load environment variables from the project-level `.env` if present."""
    dotenv_path = _find_project_root(start) / ".env"
    if not dotenv_path.exists():
        return False
    return load_dotenv(dotenv_path=dotenv_path, override=False)


def env_str(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip()


def env_int(name: str, default: int | None = None) -> int | None:
    """Integer environment variable; invalid values fall back to the default."""
    value = env_str(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring non-integer value for {name}: {value!r}")
        return default
