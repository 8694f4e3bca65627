"""Machine translation fallback for titles whose oEmbed lookup is blocked.

Disabled by default for privacy. No provider is wired up yet, so even an
enabled fallback returns None once the safety checks pass.
"""

import logging
from dataclasses import dataclass

from .config import settings

logger = logging.getLogger(__name__)

# Both sides must be detected at least this confidently before translating
MT_CONFIDENCE_THRESHOLD = 0.6


@dataclass(frozen=True)
class TranslationSettings:
    """User-facing switches for the translation fallback."""

    enable_title_mt_fallback: bool = settings.enable_title_mt_fallback
    translation_provider_url: str = settings.translation_provider_url


async def maybe_translate_title(
    text: str,
    source_lang: str | None = None,
    source_lang_confidence: float = 0.0,
    target_lang: str | None = None,
    target_lang_confidence: float = 0.0,
    translation_settings: TranslationSettings | None = None,
) -> str | None:
    """Translate a title if the fallback is enabled and the input is safe to translate.

    Returns:
        Translated title, or None when translation was skipped
    """
    if translation_settings is None:
        translation_settings = TranslationSettings()

    if not translation_settings.enable_title_mt_fallback:
        logger.debug("MT fallback disabled, skipping translation")
        return None

    if not translation_settings.translation_provider_url:
        logger.debug("MT fallback enabled but no provider URL configured, skipping")
        return None

    if not (source_lang and target_lang and source_lang != target_lang):
        logger.debug("MT skipped: source and target languages are the same or undetected")
        return None

    if (
        source_lang_confidence < MT_CONFIDENCE_THRESHOLD
        or target_lang_confidence < MT_CONFIDENCE_THRESHOLD
    ):
        logger.debug(
            f"MT skipped: confidence too low (source={source_lang_confidence:.2f}, "
            f"target={target_lang_confidence:.2f}, threshold={MT_CONFIDENCE_THRESHOLD})"
        )
        return None

    logger.info(f"MT fallback not implemented, keeping title {text!r}")
    return None
