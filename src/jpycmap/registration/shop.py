"""
Shop registration wizard.

Step 1 collects the basics (name, address, category, map pin), step 2 the JPYC details
(use cases, networks, payment method, URL), step 3 shows `summary()` and submits.
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

from jpycmap.core.geo import TOKYO_STATION, GeoPoint
from jpycmap.core.geolocation import GeolocationSource, locate
from jpycmap.domain.models import AuthIdentity, ShopRow
from jpycmap.registration import messages
from jpycmap.registration.choice import Choice, Custom, choices_from_form, submitted_values
from jpycmap.registration.submission import ListingWriter
from jpycmap.registration.wizard import RegistrationWizard


class ShopDraft(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # STEP 1
    name: str = ""
    address: str = ""
    category: str = ""
    lat: float = Field(TOKYO_STATION.lat, ge=-90, le=90)
    lng: float = Field(TOKYO_STATION.lng, ge=-180, le=180)
    # STEP 2
    jpyc_use_cases: list[Choice] = Field(default_factory=list)
    networks: list[Choice] = Field(default_factory=list)
    # Network text typed while "その他" is unticked: counts for step 2, never submitted.
    network_other: str = ""
    payment_method: str = ""
    url: str = ""

    @classmethod
    def from_form(cls, data: Mapping[str, Any]) -> "ShopDraft":
        """Build a draft from raw form fields.

        The use-case free text is its own input, so it becomes a `Custom` entry on its own.
        The network free text becomes the `Custom` entry when "その他" is ticked in `networks`;
        otherwise it is kept in `network_other`.
        """
        fields = dict(data)
        use_cases = choices_from_form(fields.pop("jpyc_use_cases", None) or [])
        use_case_other = str(fields.pop("jpyc_use_case_other", "") or "")
        if use_case_other.strip():
            use_cases.append(Custom(text=use_case_other))
        raw_networks = fields.pop("networks", None) or []
        network_other = str(fields.pop("network_other", "") or "")
        networks = choices_from_form(raw_networks, network_other)
        if any(isinstance(c, Custom) for c in networks):
            network_other = ""
        return cls.model_validate(
            {**fields, "jpyc_use_cases": use_cases, "networks": networks, "network_other": network_other}
        )


def shaped_use_cases(draft: ShopDraft) -> list[str]:
    return submitted_values(draft.jpyc_use_cases)


class ShopRegistration(RegistrationWizard[ShopDraft]):
    table = "shops"

    def __init__(
        self,
        store: ListingWriter | None = None,
        *,
        table: str | None = None,
        fallback: GeoPoint = TOKYO_STATION,
    ):
        self._fallback = fallback
        super().__init__(store, table=table)

    def empty_draft(self) -> ShopDraft:
        return ShopDraft(lat=self._fallback.lat, lng=self._fallback.lng)

    def validate_basic(self, draft: ShopDraft) -> str | None:
        if not draft.name.strip():
            return messages.SHOP_NAME_REQUIRED
        if not draft.address.strip():
            return messages.SHOP_ADDRESS_REQUIRED
        if not draft.category:
            return messages.SHOP_CATEGORY_REQUIRED
        return None

    def validate_domain(self, draft: ShopDraft) -> str | None:
        if not any(not c.is_blank() for c in draft.jpyc_use_cases):
            return messages.SHOP_USE_CASE_REQUIRED
        # A ticked "その他" counts as a selection even before its text is filled in.
        if not draft.networks and not draft.network_other.strip():
            return messages.SHOP_NETWORK_REQUIRED
        if not draft.payment_method:
            return messages.SHOP_PAYMENT_METHOD_REQUIRED
        return None

    def build_row(self, draft: ShopDraft, identity: AuthIdentity) -> ShopRow:
        return ShopRow(
            name=draft.name.strip(),
            address=draft.address.strip(),
            lat=draft.lat,
            lng=draft.lng,
            jpyc_networks=submitted_values(draft.networks),
            payment_methods=[draft.payment_method],
            url=draft.url.strip() or None,
            tags=[draft.category],
            created_by=identity.user_id,
        )

    def summary(self) -> list[tuple[str, str]]:
        d = self.draft
        return [
            ("店舗名", d.name.strip()),
            ("住所", d.address.strip()),
            ("カテゴリ", d.category),
            ("位置", f"{d.lat:.6f}, {d.lng:.6f}"),
            ("JPYCの使い方", ", ".join(shaped_use_cases(d))),
            ("対応ネットワーク", ", ".join(submitted_values(d.networks))),
            ("支払い方法", d.payment_method),
            ("URL", d.url.strip() or "-"),
        ]

    def set_location(self, lat: float, lng: float) -> None:
        """Move the map pin."""
        self.update(lat=lat, lng=lng)

    async def use_current_location(self, source: GeolocationSource | None) -> GeoPoint:
        """Move the pin to the caller's position; on failure the pin stays where it is."""
        self._require_editable("use_current_location")
        generation = self._generation
        current = GeoPoint(lat=self.draft.lat, lng=self.draft.lng)
        point = await locate(source, fallback=current)
        if generation == self._generation and point != current:
            self.set_location(point.lat, point.lng)
        return point
