"""
Online merchant search: keyword + service-type filter.
"""

from __future__ import annotations

from typing import Iterable

from jpycmap.domain.models import OnlineMerchant

ALL_SERVICE_TYPES = "all"


def _matches_query(merchant: OnlineMerchant, needle: str) -> bool:
    if needle in merchant.name.lower():
        return True
    if merchant.description and needle in merchant.description.lower():
        return True
    return any(needle in tag.lower() for tag in merchant.tags or [])


def filter_merchants(
    merchants: Iterable[OnlineMerchant],
    query: str = "",
    service_type: str = ALL_SERVICE_TYPES,
) -> list[OnlineMerchant]:
    """Keep merchants matching the keyword (name/description/tags) and the service type.

    The keyword match is a case-insensitive substring test; an empty query matches
    everything. `service_type` is compared exactly unless it is `"all"`.
    """
    needle = query.lower()
    out: list[OnlineMerchant] = []
    for m in merchants:
        if needle and not _matches_query(m, needle):
            continue
        if service_type != ALL_SERVICE_TYPES and m.service_type != service_type:
            continue
        out.append(m)
    return out


def service_type_options(merchants: Iterable[OnlineMerchant]) -> list[str]:
    """Distinct non-empty service types, in first-seen order."""
    seen: dict[str, None] = {}
    for m in merchants:
        if m.service_type:
            seen.setdefault(m.service_type, None)
    return list(seen)
