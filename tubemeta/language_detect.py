"""Heuristic language detection for video titles.

Script ranges decide non-Latin titles; Latin titles go through a short list of
diacritic and stop-word rules. This is a gate for the title restorer, not a
language identifier.
"""

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class DetectionResult:
    """Detected language code (ISO 639-1) and confidence (0-1)."""

    lang: str | None
    confidence: float


NO_DETECTION = DetectionResult(lang=None, confidence=0.0)

# Latin ([A-Za-z]) has no representative language and falls through to the
# keyword rules. Check order matters: with mixed scripts the last match wins.
_SCRIPTS: list[tuple[str, re.Pattern[str]]] = [
    ("ru", re.compile(r"[\u0400-\u04FF]")),  # Cyrillic
    ("ar", re.compile(r"[\u0600-\u06FF]")),
    ("he", re.compile(r"[\u0590-\u05FF]")),
    ("ja", re.compile(r"[\u3040-\u30FF\u4E00-\u9FFF\uAC00-\uD7AF]")),  # CJK
    ("hi", re.compile(r"[\u0900-\u097F]")),  # Devanagari
    ("th", re.compile(r"[\u0E00-\u0E7F]")),
    ("el", re.compile(r"[\u0370-\u03FF]")),  # Greek
]

# (lang, confidence, diacritics, stop words); first match wins
_LATIN_RULES: list[tuple[str, float, str | None, tuple[str, ...]]] = [
    ("pl", 0.7, "óąćęłńśźż", ("jest", "nie", "tak", "dla", "się", "ale")),
    ("de", 0.7, "ßäöü", ("und", "der", "die", "das", "ist", "nicht")),
    ("fr", 0.6, None, ("le", "la", "les", "un", "une", "des", "est", "dans", "pour")),
    ("es", 0.6, "áéíñóú", ("el", "la", "los", "las", "es", "un", "una", "del")),
    ("it", 0.6, None, ("il", "lo", "la", "gli", "le", "un", "uno", "una", "è", "di", "per")),
    ("pt", 0.6, "ãõ", ("o", "a", "os", "as", "um", "uma", "é", "de", "para", "não")),
]


def _compile_rule(diacritics: str | None, words: tuple[str, ...]) -> re.Pattern[str]:
    word_pattern = r"\b(?:" + "|".join(re.escape(w) for w in words) + r")\b"
    if diacritics:
        return re.compile(f"[{diacritics}]|{word_pattern}")
    return re.compile(word_pattern)


_COMPILED_RULES = [
    (lang, confidence, _compile_rule(diacritics, words))
    for lang, confidence, diacritics, words in _LATIN_RULES
]


def detect_language(text: str | None) -> DetectionResult:
    """Detect the language of a title using script and keyword heuristics.

    Args:
        text: Text to analyze

    Returns:
        DetectionResult; ``lang`` is None only for empty input
    """
    if not isinstance(text, str) or not text.strip():
        return NO_DETECTION

    trimmed = text.strip()

    matched = [lang for lang, pattern in _SCRIPTS if pattern.search(trimmed)]

    if len(matched) == 1:
        return DetectionResult(lang=matched[0], confidence=0.9)

    if len(matched) > 1:
        # Known imprecision: not confidence-ranked, just the last script checked
        return DetectionResult(lang=matched[-1], confidence=0.5)

    lower = trimmed.lower()
    for lang, confidence, pattern in _COMPILED_RULES:
        if pattern.search(lower):
            return DetectionResult(lang=lang, confidence=confidence)

    # Latin text (or digits/symbols only) defaults to English
    return DetectionResult(lang="en", confidence=0.5)
