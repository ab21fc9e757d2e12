"""
Local listing catalogs.

When no Supabase project is configured, the directory reads listings from local JSON
files (defaults: `data/catalogs/shops.json`, `data/catalogs/online_merchants.json`).
We validate them into the same Pydantic models the store rows use, so the browse
code cannot tell the two sources apart.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import TypeAdapter

from jpycmap.core.env import resolve_data_path
from jpycmap.domain.models import OnlineMerchant, Shop


_SHOPS_ADAPTER = TypeAdapter(list[Shop])
_MERCHANTS_ADAPTER = TypeAdapter(list[OnlineMerchant])


def _read_json(path: str | Path) -> object:
    resolved = resolve_data_path(path)
    if not resolved.is_file():
        return []
    return json.loads(resolved.read_text(encoding="utf-8"))


def load_shops(path: str | Path) -> list[Shop]:
    """Load and validate a shop catalog; a missing file is an empty catalog."""
    return _SHOPS_ADAPTER.validate_python(_read_json(path))


def load_merchants(path: str | Path) -> list[OnlineMerchant]:
    """Load and validate an online merchant catalog; a missing file is an empty catalog."""
    return _MERCHANTS_ADAPTER.validate_python(_read_json(path))
