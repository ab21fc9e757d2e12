"""
`.env` loading and data-path resolution.

Supabase credentials (`SUPABASE_URL`, `SUPABASE_ANON_KEY`) usually live in a `.env`
file next to the checkout. The local catalogs in `data/catalogs/` are addressed with
relative paths, which are anchored where the configuration came from:
- the directory of an external settings file (`JPYCMAP_CONFIG_PATH`), else
- the directory of the loaded `.env`, else
- the current working directory.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import find_dotenv, load_dotenv


@lru_cache
def load_dotenv_if_present() -> Path | None:
    """Load `.env` once; returns its path, or None when there is none.

    `JPYCMAP_ENV_FILE` names the file explicitly; otherwise python-dotenv searches
    upwards from the working directory. Variables already set in the process win.
    """
    explicit = os.getenv("JPYCMAP_ENV_FILE")
    if explicit:
        env_path = Path(explicit).expanduser().resolve()
    else:
        found = find_dotenv(usecwd=True)
        if not found:
            return None
        env_path = Path(found).resolve()
    if not env_path.is_file():
        return None
    load_dotenv(dotenv_path=env_path, override=False)
    return env_path


def data_root() -> Path:
    """Directory that relative data paths (catalogs) are resolved against by default."""
    env_path = load_dotenv_if_present()
    return env_path.parent if env_path is not None else Path.cwd().resolve()


def resolve_data_path(path: str | Path, *, base: Path | None = None) -> Path:
    """Resolve a possibly-relative data path against `base` (default: `data_root()`)."""
    p = Path(path).expanduser()
    if p.is_absolute():
        return p
    return ((base or data_root()) / p).resolve()
