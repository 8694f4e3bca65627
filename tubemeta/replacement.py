"""Decide whether an oEmbed title should replace the displayed title."""

from dataclasses import dataclass

from rapidfuzz.distance import Levenshtein

# Titles more similar than this are treated as the same title
SIMILARITY_THRESHOLD = 0.9


@dataclass(frozen=True)
class ReplacementDecision:
    """Result of comparing the displayed title with the oEmbed title."""

    should_replace: bool
    reason: str


def string_similarity(first: str | None, second: str | None) -> float:
    """Levenshtein similarity of two titles, ignoring case (0-1).

    Computed as ``(max_len - edit_distance) / max_len``. Strings that only
    differ in case score 0.99 so they never count as identical.
    """
    if not first or not second:
        return 0.0
    if first == second:
        return 1.0

    first_lower = first.lower()
    second_lower = second.lower()
    if first_lower == second_lower:
        return 0.99

    max_len = max(len(first_lower), len(second_lower))
    distance = Levenshtein.distance(first_lower, second_lower)
    return (max_len - distance) / max_len


def decide_replacement(
    current_title: str,
    oembed_title: str | None,
    current_lang: str | None = None,
    current_lang_confidence: float = 0.0,
    oembed_lang: str | None = None,
    oembed_lang_confidence: float = 0.0,
) -> ReplacementDecision:
    """Decide whether to replace the current title with the oEmbed title.

    Args:
        current_title: Title served by the upstream API
        oembed_title: Canonical title from oEmbed, if any
        current_lang: Detected language of the current title
        current_lang_confidence: Confidence of ``current_lang``
        oembed_lang: Detected language of the oEmbed title
        oembed_lang_confidence: Confidence of ``oembed_lang``

    Returns:
        ReplacementDecision with a human-readable reason
    """
    if not oembed_title:
        return ReplacementDecision(False, "no oEmbed title")

    if current_title == oembed_title:
        return ReplacementDecision(False, "titles identical")

    if not oembed_title.strip():
        return ReplacementDecision(False, "oEmbed title empty")

    similarity = string_similarity(current_title, oembed_title)
    if similarity > SIMILARITY_THRESHOLD:
        return ReplacementDecision(
            False, f"titles already similar ({similarity * 100:.1f}%)"
        )

    if current_lang and oembed_lang and current_lang != oembed_lang:
        return ReplacementDecision(
            True, f"language mismatch: {current_lang} vs {oembed_lang}"
        )

    # Same or unknown language: auto-generated variants still differ in text
    if (current_title or "").lower() != oembed_title.lower():
        return ReplacementDecision(True, "titles differ (case-insensitive)")

    return ReplacementDecision(False, "no clear difference")
