from app.packages.glossary.utils.text_formatting import (
    format_description,
    format_english_term,
    format_korean_term,
)


def test_regular_words_are_capitalised():
    assert format_english_term("heat exchanger") == "Heat Exchanger"
    assert format_english_term("  gate   vALVE ") == "Gate Valve"


def test_abbreviations_keep_their_case():
    assert format_english_term("HVAC duct") == "HVAC Duct"
    assert format_english_term("I&C panel") == "I&C Panel"
    assert format_english_term("PowerPoint slide") == "PowerPoint Slide"


def test_separator_followed_by_lowercase_is_uppercased_inside_abbreviation():
    assert format_english_term("AB-cd") == "AB-Cd"


def test_empty_input_is_returned_unchanged():
    assert format_english_term("") == ""


def test_korean_and_description_are_trimmed():
    assert format_korean_term("  열교환기 ") == "열교환기"
    assert format_description("\t설명\n") == "설명"
    assert format_description(None) == ""
