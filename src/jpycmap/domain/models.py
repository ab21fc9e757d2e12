"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- listings read from the store (`Shop`, `OnlineMerchant`)
- derived browse views (`NearbyShop`)
- insert payloads written by the registration wizards (`ShopRow`, `MerchantRow`)
- the signed-in caller (`AuthIdentity`)

Field names follow the store's column names so rows validate without mapping code.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from jpycmap.core.geo import GeoPoint

ListingStatus = Literal["pending", "approved", "rejected"]


class Coordinate(BaseModel):
    """A geographic point in decimal degrees."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    def to_point(self) -> GeoPoint:
        return GeoPoint(lat=self.lat, lng=self.lng)


class Shop(BaseModel):
    """A physical shop that accepts JPYC."""

    id: str
    name: str
    address: str
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    jpyc_networks: list[str] | None = None
    payment_methods: list[str] | None = None
    url: str | None = None
    tags: list[str] | None = None
    status: ListingStatus = "pending"
    created_by: str | None = None
    upvotes: int = Field(0, ge=0)
    downvotes: int = Field(0, ge=0)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def location(self) -> GeoPoint:
        return GeoPoint(lat=self.lat, lng=self.lng)


class OnlineMerchant(BaseModel):
    """An online service (EC site, game, subscription, ...) that accepts JPYC."""

    id: str
    name: str
    description: str | None = None
    service_type: str | None = None
    url: str
    platforms: list[str] | None = None
    jpyc_use_case: str | None = None
    country: str | None = None
    tags: list[str] | None = None
    status: ListingStatus = "pending"
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class NearbyShop(BaseModel):
    """A shop annotated with its distance from the search origin."""

    shop: Shop
    distance_km: float = Field(..., ge=0)


class AuthIdentity(BaseModel):
    """The signed-in caller, as issued by the external auth service."""

    user_id: str
    access_token: str | None = None
    email: str | None = None


class ShopRow(BaseModel):
    """Insert payload for the `shops` table."""

    name: str
    address: str
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    jpyc_networks: list[str]
    payment_methods: list[str]
    url: str | None = None
    tags: list[str]
    status: Literal["pending"] = "pending"
    created_by: str
    upvotes: Literal[0] = 0
    downvotes: Literal[0] = 0


class MerchantRow(BaseModel):
    """Insert payload for the `online_merchants` table."""

    name: str
    url: str
    description: str | None = None
    service_type: str
    country: str | None = None
    jpyc_use_case: str
    platforms: list[str]
    tags: list[str] | None = None
    status: Literal["pending"] = "pending"
    created_by: str
