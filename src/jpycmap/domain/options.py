"""
Selectable options offered by the registration forms.

The labels are stored verbatim in the listing rows, so they stay in Japanese.
`OTHER` is the "その他" entry: choosing it reveals a free-text companion field.
"""

from __future__ import annotations

OTHER = "その他"

SHOP_CATEGORIES = ["カフェ", "レストラン", "バー", "ショップ", "イベントスペース", OTHER]
SHOP_JPYC_USE_CASES = ["店頭決済", "チケット・イベント代", "物販", "投げ銭 / チップ"]
SHOP_NETWORKS = ["Polygon", "Ethereum", OTHER]
SHOP_PAYMENT_METHODS = ["ウォレット送金", "QRコード決済", "店舗側専用アプリ"]

MERCHANT_SERVICE_TYPES = ["EC", "サブスク", "NFT", "ゲーム", "寄付", OTHER]
MERCHANT_JPYC_USE_CASES = ["決済", "チャージ", "投げ銭", "NFT購入", "会費", OTHER]
MERCHANT_PLATFORMS = ["Web", "スマホアプリ", "Discord", "メタバース", OTHER]
MERCHANT_TAG_SUGGESTIONS = [
    "ショッピング",
    "ゲーム",
    "NFT",
    "DeFi",
    "メタバース",
    "寄付",
    "サブスク",
    "教育",
    "エンタメ",
    "金融",
]


def all_options() -> dict[str, dict[str, list[str]]]:
    """Return every option list, grouped by form (used by the API for form rendering)."""
    return {
        "shop": {
            "categories": list(SHOP_CATEGORIES),
            "jpyc_use_cases": list(SHOP_JPYC_USE_CASES),
            "networks": list(SHOP_NETWORKS),
            "payment_methods": list(SHOP_PAYMENT_METHODS),
        },
        "merchant": {
            "service_types": list(MERCHANT_SERVICE_TYPES),
            "jpyc_use_cases": list(MERCHANT_JPYC_USE_CASES),
            "platforms": list(MERCHANT_PLATFORMS),
            "tag_suggestions": list(MERCHANT_TAG_SUGGESTIONS),
        },
    }
