"""Language code helpers for audio track display."""

import logging

import langcodes

logger = logging.getLogger(__name__)

UNDETERMINED = "und"


def base_language(language_code: str | None) -> str:
    """Lowercased primary subtag, e.g. "pt-BR" -> "pt"; "und" when missing."""
    if not language_code:
        return UNDETERMINED
    return language_code.split("-")[0].lower()


def language_code_short(language_code: str | None) -> str:
    """Two-letter uppercase badge for a language code, e.g. "en-US" -> "EN"."""
    if not language_code or language_code == UNDETERMINED:
        return "??"
    return language_code.split("-")[0].upper()[:2]


def language_name(language_code: str | None, display_language: str = "en") -> str:
    """Full language name in ``display_language``, falling back to the code."""
    if not language_code or language_code == UNDETERMINED:
        return "Unknown"

    try:
        return langcodes.Language.get(language_code).display_name(display_language)
    except (ValueError, LookupError) as e:
        logger.warning(f"Failed to get language name for {language_code}: {e}")
        return language_code
