"""
Listing fetch for the browse tabs.

Reads approved listings from the store (or the local catalog when the store is not
configured) and turns any failure into a generic, user-facing error state. A failed
fetch never yields a partial list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

from jpycmap.catalog.loader import load_merchants, load_shops
from jpycmap.config.settings import Settings
from jpycmap.domain.models import OnlineMerchant, Shop
from jpycmap.store.supabase import StoreError, SupabaseClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

SHOPS_FETCH_ERROR = "店舗データの取得に失敗しました"
MERCHANTS_FETCH_ERROR = "オンライン事業者データの取得に失敗しました"

_SHOPS_ADAPTER = TypeAdapter(list[Shop])
_MERCHANTS_ADAPTER = TypeAdapter(list[OnlineMerchant])


@dataclass(frozen=True)
class ListingLoad(Generic[T]):
    """Result of one fetch: the listings, or an empty list plus an error message."""

    items: list[T] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def fetch_shops(store: SupabaseClient | None, settings: Settings) -> ListingLoad[Shop]:
    """Fetch approved shops; failures become `ListingLoad(error=SHOPS_FETCH_ERROR)`."""
    try:
        if store is None:
            shops = load_shops(settings.catalog.shops_path)
        else:
            rows = await store.fetch(settings.store.shops_table, status="approved")
            shops = _SHOPS_ADAPTER.validate_python(rows)
    except (StoreError, ValidationError, OSError, ValueError):
        logger.exception("Failed to load shops")
        return ListingLoad(error=SHOPS_FETCH_ERROR)
    return ListingLoad(items=[s for s in shops if s.status == "approved"])


async def fetch_merchants(store: SupabaseClient | None, settings: Settings) -> ListingLoad[OnlineMerchant]:
    """Fetch approved online merchants; failures become `ListingLoad(error=MERCHANTS_FETCH_ERROR)`."""
    try:
        if store is None:
            merchants = load_merchants(settings.catalog.merchants_path)
        else:
            rows = await store.fetch(settings.store.merchants_table, status="approved")
            merchants = _MERCHANTS_ADAPTER.validate_python(rows)
    except (StoreError, ValidationError, OSError, ValueError):
        logger.exception("Failed to load online merchants")
        return ListingLoad(error=MERCHANTS_FETCH_ERROR)
    return ListingLoad(items=[m for m in merchants if m.status == "approved"])
