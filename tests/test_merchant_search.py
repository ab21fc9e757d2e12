from jpycmap.directory.search import ALL_SERVICE_TYPES, filter_merchants, service_type_options
from jpycmap.domain.models import OnlineMerchant


def _merchants() -> list[OnlineMerchant]:
    return [
        OnlineMerchant(
            id="1",
            name="CryptoMall",
            description="JPYCで買い物ができるECサイト",
            service_type="EC",
            url="https://example.com/1",
            tags=["ショッピング"],
            status="approved",
        ),
        OnlineMerchant(
            id="2",
            name="Pixel Quest",
            description=None,
            service_type="ゲーム",
            url="https://example.com/2",
            tags=["Game", "エンタメ"],
            status="approved",
        ),
        OnlineMerchant(
            id="3",
            name="Open Donation",
            description="Support open source",
            service_type=None,
            url="https://example.com/3",
            tags=None,
            status="approved",
        ),
        OnlineMerchant(
            id="4",
            name="Mall of NFTs",
            description=None,
            service_type="EC",
            url="https://example.com/4",
            status="approved",
        ),
    ]


def test_empty_query_and_all_returns_input_unchanged():
    merchants = _merchants()
    assert filter_merchants(merchants, "", ALL_SERVICE_TYPES) == merchants


def test_query_matches_name_case_insensitively():
    out = filter_merchants(_merchants(), "mall")
    assert [m.id for m in out] == ["1", "4"]


def test_query_matches_description_and_tags():
    assert [m.id for m in filter_merchants(_merchants(), "OPEN SOURCE")] == ["3"]
    assert [m.id for m in filter_merchants(_merchants(), "game")] == ["2"]
    assert [m.id for m in filter_merchants(_merchants(), "ECサイト")] == ["1"]


def test_missing_description_and_tags_do_not_match_or_fail():
    assert filter_merchants(_merchants(), "nothing-like-this") == []


def test_service_type_filter_is_exact_and_combines_with_query():
    assert [m.id for m in filter_merchants(_merchants(), "", "EC")] == ["1", "4"]
    assert [m.id for m in filter_merchants(_merchants(), "nft", "EC")] == ["4"]
    assert filter_merchants(_merchants(), "", "ec") == []


def test_service_type_options_are_distinct_non_empty_in_first_seen_order():
    assert service_type_options(_merchants()) == ["EC", "ゲーム"]
    assert service_type_options([]) == []
