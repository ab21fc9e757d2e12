import asyncio

import pytest

from jpycmap.domain.models import AuthIdentity
from jpycmap.registration import messages
from jpycmap.registration.choice import Custom, Selected, submitted_values
from jpycmap.registration.merchant import MerchantDraft, MerchantRegistration
from jpycmap.registration.wizard import IllegalTransition, WizardState

IDENTITY = AuthIdentity(user_id="user-9", access_token="jwt-9")


class RecordingStore:
    def __init__(self):
        self.calls = []

    async def insert(self, table, row, *, access_token=None):
        self.calls.append((table, row, access_token))


def _submit_form(form: dict) -> dict:
    store = RecordingStore()
    wizard = MerchantRegistration(store)
    draft = MerchantDraft.from_form(form)
    wizard.update(**draft.model_dump())
    assert wizard.advance(), wizard.error
    assert wizard.advance(), wizard.error
    wizard.confirm()
    assert asyncio.run(wizard.submit(IDENTITY))
    assert len(store.calls) == 1
    table, row, token = store.calls[0]
    assert table == "online_merchants"
    assert token == "jwt-9"
    return row


BASE_FORM = {
    "name": "Pixel Quest",
    "url": "https://pixel.example",
    "description": "ブラウザゲーム",
    "service_type": "ゲーム",
    "country": "日本",
    "jpyc_use_case": "決済",
    "platforms": ["Web"],
}


def test_platform_free_text_replaces_the_other_label():
    row = _submit_form({**BASE_FORM, "platforms": ["その他"], "platform_other": "Discord Bot"})
    assert "Discord Bot" in row["platforms"]
    assert "その他" not in row["platforms"]


def test_row_shape_for_a_plain_submission():
    row = _submit_form(BASE_FORM)
    assert row == {
        "name": "Pixel Quest",
        "url": "https://pixel.example",
        "description": "ブラウザゲーム",
        "service_type": "ゲーム",
        "country": "日本",
        "jpyc_use_case": "決済",
        "platforms": ["Web"],
        "tags": None,
        "status": "pending",
        "created_by": "user-9",
    }


def test_other_service_type_is_noted_in_the_description():
    row = _submit_form({**BASE_FORM, "service_type": "その他", "service_type_other": "クラファン"})
    assert row["service_type"] == "その他"
    assert row["description"] == f"ブラウザゲーム\n\n{messages.SERVICE_TYPE_NOTE_LABEL}クラファン"


def test_other_service_type_note_without_description():
    row = _submit_form(
        {**BASE_FORM, "description": "", "service_type": "その他", "service_type_other": "クラファン"}
    )
    assert row["description"] == f"{messages.SERVICE_TYPE_NOTE_LABEL}クラファン"


def test_other_use_case_submits_the_free_text():
    row = _submit_form({**BASE_FORM, "jpyc_use_case": "その他", "jpyc_use_case_other": " 寄付金 "})
    assert row["jpyc_use_case"] == "寄付金"


def test_step_one_validation_order():
    wizard = MerchantRegistration()
    wizard.advance()
    assert wizard.error == messages.MERCHANT_NAME_REQUIRED
    wizard.update(name="Shop")
    wizard.advance()
    assert wizard.error == messages.MERCHANT_URL_REQUIRED
    wizard.update(url="https://shop.example")
    wizard.advance()
    assert wizard.error == messages.MERCHANT_SERVICE_TYPE_REQUIRED
    wizard.update(service_type=Selected(value="EC"))
    assert wizard.advance()


def test_step_two_requires_use_case_text_and_a_platform():
    wizard = MerchantRegistration()
    wizard.update(name="Shop", url="https://shop.example", service_type=Selected(value="EC"))
    wizard.advance()

    wizard.update(jpyc_use_case=Custom(text="   "))
    assert wizard.advance() is False
    assert wizard.error == messages.MERCHANT_USE_CASE_REQUIRED

    wizard.update(jpyc_use_case=Custom(text="ポイント"))
    wizard.advance()
    assert wizard.error == messages.MERCHANT_PLATFORM_REQUIRED

    wizard.update(platforms=[Selected(value="Web")])
    assert wizard.advance()
    assert wizard.state is WizardState.STEP_3_CONFIRM


def test_add_tag_ignores_blank_and_duplicates():
    wizard = MerchantRegistration()
    assert wizard.add_tag("ゲーム")
    assert not wizard.add_tag("ゲーム")
    assert not wizard.add_tag("   ")
    assert wizard.add_tag(" NFT ")
    assert wizard.draft.tags == ["ゲーム", "NFT"]


def test_add_tag_from_buffer_clears_it_only_when_added():
    wizard = MerchantRegistration()
    wizard.update(custom_tag="Web3")
    assert wizard.add_tag()
    assert wizard.draft.tags == ["Web3"]
    assert wizard.draft.custom_tag == ""

    wizard.update(custom_tag="Web3")
    assert not wizard.add_tag()
    assert wizard.draft.custom_tag == "Web3"


def test_remove_and_toggle_tags():
    wizard = MerchantRegistration()
    wizard.toggle_tag("寄付")
    wizard.toggle_tag("教育")
    wizard.toggle_tag("寄付")
    assert wizard.draft.tags == ["教育"]
    assert not wizard.remove_tag("missing")
    assert wizard.remove_tag("教育")
    assert wizard.draft.tags == []


def test_tags_are_submitted_in_insertion_order():
    store = RecordingStore()
    wizard = MerchantRegistration(store)
    wizard.update(**MerchantDraft.from_form(BASE_FORM).model_dump())
    wizard.advance()
    wizard.add_tag("エンタメ")
    wizard.add_tag("ゲーム")
    wizard.advance()
    wizard.confirm()
    asyncio.run(wizard.submit(IDENTITY))
    assert store.calls[0][1]["tags"] == ["エンタメ", "ゲーム"]


def test_tag_editing_is_rejected_once_submitted():
    wizard = MerchantRegistration(RecordingStore())
    wizard.update(**MerchantDraft.from_form(BASE_FORM).model_dump())
    wizard.advance()
    wizard.advance()
    wizard.confirm()
    asyncio.run(wizard.submit(IDENTITY))
    with pytest.raises(IllegalTransition):
        wizard.add_tag("late")


def test_summary_shows_other_label_and_note():
    wizard = MerchantRegistration()
    wizard.update(
        **MerchantDraft.from_form(
            {**BASE_FORM, "service_type": "その他", "service_type_other": "クラファン"}
        ).model_dump()
    )
    summary = dict(wizard.summary())
    assert summary["サービス種別"] == "その他"
    assert summary["説明"].endswith("クラファン")
    assert summary["タグ"] == "-"


def test_submitted_values_put_offered_options_before_custom_text():
    choices = [Custom(text="Discord Bot"), Selected(value="Web"), Custom(text=" ")]
    assert submitted_values(choices) == ["Web", "Discord Bot"]


def test_draft_rejects_unknown_fields():
    wizard = MerchantRegistration()
    with pytest.raises(ValueError):
        wizard.update(nickname="x")
