"""排序、分组与搜索均在内存中处理序列化后的用语。"""

from app.packages.glossary.services.search_service import group_by_discipline, search_terms, sort_for_display


def _term(en, kr="", *, discipline="General", status="approved", description="", abbreviation=None):
    abbreviations = {"General": "Gen", "Piping": "Piping", "HVAC": "HVAC", "Cell": "Cell"}
    return {
        "id": en,
        "en": en,
        "kr": kr,
        "description": description,
        "discipline": discipline,
        "abbreviation": abbreviation or abbreviations[discipline],
        "status": status,
    }


def test_public_view_orders_by_discipline_then_english():
    terms = [
        _term("valve", discipline="Piping"),
        _term("Anode", discipline="Cell"),
        _term("Zone"),
        _term("Check Valve", discipline="Piping"),
    ]
    ordered = [term["en"] for term in sort_for_display(terms)]
    assert ordered == ["Zone", "Check Valve", "valve", "Anode"]


def test_admin_view_puts_pending_first():
    terms = [
        _term("Boiler", discipline="HVAC"),
        _term("Pump", discipline="Piping", status="pending"),
        _term("Anchor", status="pending"),
        _term("Access"),
    ]
    ordered = [term["en"] for term in sort_for_display(terms, admin_view=True)]
    assert ordered == ["Anchor", "Pump", "Access", "Boiler"]


def test_grouping_follows_fixed_order_and_omits_empty_disciplines():
    terms = [
        _term("Anode", discipline="Cell"),
        _term("valve", discipline="Piping"),
        _term("Elbow", discipline="Piping"),
    ]
    groups = group_by_discipline(terms)

    assert [group["discipline"] for group in groups] == ["Piping", "Cell"]
    assert groups[0]["count"] == 2
    assert groups[0]["korean_name"] == "배관"
    assert [term["en"] for term in groups[0]["terms"]] == ["Elbow", "valve"]


def test_search_matches_english_korean_and_description_case_insensitively():
    terms = [
        _term("Heat Exchanger", "열교환기", discipline="Piping"),
        _term("Damper", "댐퍼", discipline="HVAC", description="Controls AIRFLOW"),
        _term("Anode", "음극", discipline="Cell"),
    ]
    assert [term["en"] for term in search_terms(terms, "EXCHANGER")] == ["Heat Exchanger"]
    assert [term["en"] for term in search_terms(terms, "음극")] == ["Anode"]
    assert [term["en"] for term in search_terms(terms, "airflow")] == ["Damper"]


def test_blank_keyword_behaviour_differs_between_header_and_admin_filter():
    terms = [_term("Anode", discipline="Cell")]
    assert search_terms(terms, "   ") == []
    assert search_terms(terms, None, include_abbreviation=True) == terms


def test_abbreviation_is_searched_only_by_admin_filter():
    terms = [_term("Damper", discipline="HVAC"), _term("Anode", discipline="Cell")]
    assert search_terms(terms, "hvac") == []
    assert [term["en"] for term in search_terms(terms, "hvac", include_abbreviation=True)] == ["Damper"]
