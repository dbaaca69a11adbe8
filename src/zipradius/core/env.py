"""
Project root, `.env` and relative-path resolution.

The default dataset (`data/zipCodeDatabase.json`) and cache dir are relative paths, and
the Mapbox token usually sits in a repo-local `.env`. Uvicorn, the CLI and the scripts are
started from arbitrary working directories, so both are anchored to the project root:

1. `ZIPRADIUS_PROJECT_ROOT`, if set;
2. the directory of `ZIPRADIUS_ENV_FILE`, if set;
3. the nearest ancestor of the CWD, then of this file, holding a root marker.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Iterator

from dotenv import load_dotenv

_ROOT_MARKERS = (".env", ".git", "pyproject.toml")


def _is_root(path: Path) -> bool:
    return any((path / marker).exists() for marker in _ROOT_MARKERS)


def _ancestors(*starts: Path) -> Iterator[Path]:
    for start in starts:
        here = start.resolve()
        yield here
        yield from here.parents


@lru_cache
def get_project_root() -> Path:
    """Directory that relative config paths are resolved against (cached)."""
    explicit_root = os.getenv("ZIPRADIUS_PROJECT_ROOT")
    if explicit_root:
        return Path(explicit_root).expanduser().resolve()
    env_file = os.getenv("ZIPRADIUS_ENV_FILE")
    if env_file:
        return Path(env_file).expanduser().resolve().parent
    for candidate in _ancestors(Path.cwd(), Path(__file__).parent):
        if _is_root(candidate):
            return candidate
    return Path.cwd().resolve()


@lru_cache
def load_dotenv_if_present() -> Path | None:
    """Load the project `.env` once; variables already in the environment win.

    Returns the file that was loaded, or None.
    """
    env_file = os.getenv("ZIPRADIUS_ENV_FILE")
    path = Path(env_file).expanduser().resolve() if env_file else get_project_root() / ".env"
    if not path.is_file():
        return None
    load_dotenv(dotenv_path=path, override=False)
    return path


def resolve_project_path(path: str | Path) -> Path:
    p = Path(path).expanduser()
    return p if p.is_absolute() else (get_project_root() / p).resolve()
