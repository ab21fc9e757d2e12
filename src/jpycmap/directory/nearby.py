"""
Nearby shop search.

Pure derived view: given the approved shops, an origin, and a radius, return the shops
within the radius sorted by distance. Nothing is cached; callers recompute whenever
the shop list, origin, or radius changes.
"""

from __future__ import annotations

from typing import Iterable

from jpycmap.config.settings import NearbySettings
from jpycmap.core.geo import GeoPoint, haversine_km
from jpycmap.domain.models import NearbyShop, Shop


def nearby_shops(shops: Iterable[Shop], origin: GeoPoint, radius_km: float) -> list[NearbyShop]:
    """Return shops within `radius_km` of `origin`, nearest first.

    `sorted` is stable, so shops at the same distance keep their input order.
    """
    if radius_km < 0:
        raise ValueError("radius_km must be >= 0")
    annotated = [NearbyShop(shop=s, distance_km=haversine_km(origin, s.location)) for s in shops]
    within = [n for n in annotated if n.distance_km <= radius_km]
    return sorted(within, key=lambda n: n.distance_km)


def resolve_radius_km(radius_km: float | None, settings: NearbySettings) -> float:
    """Apply the default radius and check the configured range."""
    if radius_km is None:
        return float(settings.default_radius_km)
    r = float(radius_km)
    if not settings.min_radius_km <= r <= settings.max_radius_km:
        raise ValueError(
            f"radius_km must be between {settings.min_radius_km:g} and {settings.max_radius_km:g}"
        )
    return r
