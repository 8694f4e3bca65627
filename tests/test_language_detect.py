"""Tests for heuristic title language detection."""

import pytest

from tubemeta.language_detect import DetectionResult, detect_language


def test_detect_cyrillic():
    """Single non-Latin script is detected with high confidence."""
    assert detect_language("Привет мир") == DetectionResult(lang="ru", confidence=0.9)


def test_detect_plain_english():
    """Test that plain Latin text defaults to English."""
    assert detect_language("Hello world") == DetectionResult(lang="en", confidence=0.5)


@pytest.mark.parametrize("text", ["", "   ", "\n\t", None, 42])
def test_detect_empty_or_invalid(text):
    """Test detection of blank or non-string input."""
    result = detect_language(text)
    assert result.lang is None
    assert result.confidence == 0


@pytest.mark.parametrize(
    "text,lang",
    [
        ("مرحبا بالعالم", "ar"),
        ("שלום עולם", "he"),
        ("こんにちは世界", "ja"),
        ("안녕하세요", "ja"),
        ("नमस्ते दुनिया", "hi"),
        ("สวัสดีชาวโลก", "th"),
        ("Γειά σου Κόσμε", "el"),
    ],
)
def test_detect_single_scripts(text, lang):
    """Test each supported non-Latin script."""
    assert detect_language(text) == DetectionResult(lang=lang, confidence=0.9)


def test_latin_mixed_with_one_script_is_still_single_script():
    """Latin characters do not count as a competing script."""
    assert detect_language("Minecraft: Привет") == DetectionResult("ru", 0.9)


def test_mixed_scripts_last_checked_wins():
    """Cyrillic is checked before Greek, so Greek wins the tie."""
    result = detect_language("Привет Κόσμε")
    assert result == DetectionResult(lang="el", confidence=0.5)

    result = detect_language("Привет こんにちは")
    assert result == DetectionResult(lang="ja", confidence=0.5)


@pytest.mark.parametrize(
    "text,lang,confidence",
    [
        ("Jak zrobić pizzę", "pl", 0.7),
        ("To nie jest film", "pl", 0.7),
        ("Der große Test", "de", 0.7),
        ("Das ist gut", "de", 0.7),
        ("Voyage dans les Alpes", "fr", 0.6),
        ("Fiesta del verano", "es", 0.6),
        ("Mañana", "es", 0.6),
        ("Gli amici di Roma", "it", 0.6),
        ("Lição de casa", "pt", 0.6),
    ],
)
def test_latin_keyword_rules(text, lang, confidence):
    """Test diacritic and stop-word rules for Latin languages."""
    assert detect_language(text) == DetectionResult(lang=lang, confidence=confidence)


def test_latin_rules_first_match_wins():
    """'la' is both French and Spanish; French is checked first."""
    assert detect_language("La casa").lang == "fr"

    # ó is shared with Spanish but Polish is checked first
    assert detect_language("Canción") == DetectionResult("pl", 0.7)


def test_keywords_need_word_boundaries():
    """'ist' inside another word is not German."""
    assert detect_language("Playlist review") == DetectionResult("en", 0.5)


def test_digits_only_default_to_english():
    """Test that digits fall through to English."""
    assert detect_language("2024") == DetectionResult("en", 0.5)
