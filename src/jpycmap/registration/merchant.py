"""
Online merchant registration wizard.

Step 1: name, URL, description, service type (with "その他" text), country.
Step 2: JPYC use case (with "その他" text), platforms (with "その他" text), tags.
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

from jpycmap.domain.models import AuthIdentity, MerchantRow
from jpycmap.registration import messages
from jpycmap.registration.choice import (
    Choice,
    Custom,
    choice_from_form,
    choices_from_form,
    submitted_values,
)
from jpycmap.registration.wizard import RegistrationWizard


class MerchantDraft(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # STEP 1
    name: str = ""
    url: str = ""
    description: str = ""
    service_type: Choice | None = None
    country: str = ""
    # STEP 2
    jpyc_use_case: Choice | None = None
    platforms: list[Choice] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    custom_tag: str = ""

    @classmethod
    def from_form(cls, data: Mapping[str, Any]) -> "MerchantDraft":
        """Build a draft from raw form fields ("その他" plus `*_other` companions)."""
        fields = dict(data)
        service_type = choice_from_form(
            str(fields.pop("service_type", "") or ""), str(fields.pop("service_type_other", "") or "")
        )
        use_case = choice_from_form(
            str(fields.pop("jpyc_use_case", "") or ""), str(fields.pop("jpyc_use_case_other", "") or "")
        )
        platforms = choices_from_form(
            fields.pop("platforms", None) or [], str(fields.pop("platform_other", "") or "")
        )
        return cls.model_validate(
            {**fields, "service_type": service_type, "jpyc_use_case": use_case, "platforms": platforms}
        )


def resolved_use_case(draft: MerchantDraft) -> str:
    if draft.jpyc_use_case is None:
        return ""
    return draft.jpyc_use_case.submitted_value() or ""


def shaped_description(draft: MerchantDraft) -> str | None:
    """Description with the "その他" service-type text appended as a labelled note."""
    description = draft.description.strip()
    if isinstance(draft.service_type, Custom) and not draft.service_type.is_blank():
        note = f"{messages.SERVICE_TYPE_NOTE_LABEL}{draft.service_type.text.strip()}"
        description = f"{description}\n\n{note}" if description else note
    return description or None


class MerchantRegistration(RegistrationWizard[MerchantDraft]):
    table = "online_merchants"

    def empty_draft(self) -> MerchantDraft:
        return MerchantDraft()

    def validate_basic(self, draft: MerchantDraft) -> str | None:
        if not draft.name.strip():
            return messages.MERCHANT_NAME_REQUIRED
        if not draft.url.strip():
            return messages.MERCHANT_URL_REQUIRED
        if draft.service_type is None:
            return messages.MERCHANT_SERVICE_TYPE_REQUIRED
        return None

    def validate_domain(self, draft: MerchantDraft) -> str | None:
        if not resolved_use_case(draft):
            return messages.MERCHANT_USE_CASE_REQUIRED
        if not draft.platforms:
            return messages.MERCHANT_PLATFORM_REQUIRED
        return None

    def build_row(self, draft: MerchantDraft, identity: AuthIdentity) -> MerchantRow:
        return MerchantRow(
            name=draft.name.strip(),
            url=draft.url.strip(),
            description=shaped_description(draft),
            service_type=draft.service_type.label(),
            country=draft.country.strip() or None,
            jpyc_use_case=resolved_use_case(draft),
            platforms=submitted_values(draft.platforms),
            tags=list(draft.tags) or None,
            created_by=identity.user_id,
        )

    def summary(self) -> list[tuple[str, str]]:
        d = self.draft
        return [
            ("サービス名", d.name.strip()),
            ("URL", d.url.strip()),
            ("サービス種別", d.service_type.label() if d.service_type else "-"),
            ("説明", shaped_description(d) or "-"),
            ("国・地域", d.country.strip() or "-"),
            ("JPYCの使い道", resolved_use_case(d) or "-"),
            ("プラットフォーム", ", ".join(submitted_values(d.platforms))),
            ("タグ", ", ".join(d.tags) or "-"),
        ]

    # -- tags -----------------------------------------------------------

    def add_tag(self, text: str | None = None) -> bool:
        """Add a custom tag (from `text` or the `custom_tag` buffer).

        Blank and duplicate tags are ignored. The buffer is cleared only after a tag was added from it.
        """
        self._require_editable("add_tag")
        from_buffer = text is None
        tag = (self.draft.custom_tag if from_buffer else text).strip()
        if not tag or tag in self.draft.tags:
            return False
        changes: dict[str, Any] = {"tags": [*self.draft.tags, tag]}
        if from_buffer:
            changes["custom_tag"] = ""
        self.update(**changes)
        return True

    def remove_tag(self, tag: str) -> bool:
        self._require_editable("remove_tag")
        if tag not in self.draft.tags:
            return False
        self.update(tags=[t for t in self.draft.tags if t != tag])
        return True

    def toggle_tag(self, tag: str) -> None:
        """Tick/untick a suggested tag."""
        if tag in self.draft.tags:
            self.remove_tag(tag)
        else:
            self.add_tag(tag)

