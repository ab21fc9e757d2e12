"""User-facing wizard messages (shown verbatim in the Japanese UI)."""

from __future__ import annotations

# Shop step 1
SHOP_NAME_REQUIRED = "店舗名を入力してください"
SHOP_ADDRESS_REQUIRED = "住所を入力してください"
SHOP_CATEGORY_REQUIRED = "カテゴリを選択してください"

# Shop step 2
SHOP_USE_CASE_REQUIRED = "JPYCの使い方を1つ以上選択してください"
SHOP_NETWORK_REQUIRED = "対応ネットワークを1つ以上選択してください"
SHOP_PAYMENT_METHOD_REQUIRED = "支払い方法を選択してください"

# Merchant step 1
MERCHANT_NAME_REQUIRED = "サービス名を入力してください"
MERCHANT_URL_REQUIRED = "URLを入力してください"
MERCHANT_SERVICE_TYPE_REQUIRED = "サービス種別を選択してください"

# Merchant step 2
MERCHANT_USE_CASE_REQUIRED = "JPYCの使い道を選択または入力してください"
MERCHANT_PLATFORM_REQUIRED = "プラットフォームを1つ以上選択してください"

# Submit preconditions
CONFIRMATION_REQUIRED = "確認チェックを入れてください"
LOGIN_REQUIRED = "ログインが必要です"
STORE_NOT_CONFIGURED = "データストアが設定されていません"

SUBMIT_FAILED = "登録に失敗しました。もう一度お試しください。"

# Appended to the description when the service type is "その他".
SERVICE_TYPE_NOTE_LABEL = "【サービス種別補足】"
