"""Restore original-language titles on list items.

Upstream APIs sometimes serve machine-translated titles. The restorer compares
each list item's title with the uploader's canonical oEmbed title and swaps it
back when the two look like different languages or clearly different text.
"""

import asyncio
import logging
from collections.abc import Iterable

from .config import settings
from .language_detect import NO_DETECTION, detect_language
from .models import VideoItem
from .oembed_client import OEmbedTitleSource
from .replacement import decide_replacement
from .translation import TranslationSettings, maybe_translate_title

logger = logging.getLogger(__name__)


class TitleRestorer:
    """Orchestrates language detection, oEmbed lookups and replacement decisions."""

    def __init__(
        self,
        source: OEmbedTitleSource,
        batch_size: int = settings.batch_size,
        batch_delay_seconds: float = settings.batch_delay_seconds,
        known_multi_audio: Iterable[str] | None = None,
        probe_video_ids: Iterable[str] | None = None,
    ):
        """Initialize title restorer.

        Args:
            source: oEmbed title source (owns the title caches)
            batch_size: Items processed concurrently per group
            batch_delay_seconds: Pause between groups
            known_multi_audio: Video IDs known to carry several audio tracks
            probe_video_ids: Video IDs whose decisions are logged at INFO level
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.source = source
        self.batch_size = batch_size
        self.batch_delay_seconds = batch_delay_seconds
        self._known_multi_audio: set[str] = set(known_multi_audio or ())
        self._probe_video_ids: set[str] = set(
            settings.probe_video_ids if probe_video_ids is None else probe_video_ids
        )

    def mark_multi_audio(self, video_id: str) -> None:
        self._known_multi_audio.add(video_id)

    def is_known_multi_audio(self, video_id: str) -> bool:
        return video_id in self._known_multi_audio

    def _log_decision(
        self, video_id: str, source_context: str, decision: str, reason: str
    ) -> None:
        level = logging.INFO if video_id in self._probe_video_ids else logging.DEBUG
        logger.log(
            level, f"{video_id} ({source_context}): decision={decision} reason={reason}"
        )

    async def process_item(
        self,
        item: VideoItem,
        is_list_context: bool = True,
        source_context: str = "unknown",
        translation_settings: TranslationSettings | None = None,
    ) -> VideoItem:
        """Restore the original title of a single list item.

        Args:
            item: Video item from the upstream API
            is_list_context: Only list items are processed
            source_context: Where the list came from (e.g. "subs", "search")
            translation_settings: Settings for the translation fallback

        Returns:
            A new item marked as fixed, or ``item`` itself when skipped
        """
        if not is_list_context:
            return item

        current_title = item.title
        video_id = item.video_id
        if not current_title or not video_id:
            return item

        if item.title_lang_fixed:
            self._log_decision(video_id, source_context, "SKIP", "already processed")
            return item

        if item.is_multi_audio or self.is_known_multi_audio(video_id):
            return await self._process_multi_audio(item, source_context)

        current_lang = detect_language(current_title)
        result = await self.source.fetch(video_id)
        oembed_title = result.title

        if result.blocked:
            translated = await maybe_translate_title(
                current_title,
                source_lang=current_lang.lang,
                source_lang_confidence=current_lang.confidence,
                translation_settings=translation_settings,
            )
            if translated:
                self._log_decision(
                    video_id, source_context, "MT_FALLBACK", f"oEmbed status {result.status}"
                )
                return self._restored(item, translated)

            self._log_decision(
                video_id,
                source_context,
                "OEMBED_BLOCKED_NO_MT",
                f"oEmbed status {result.status} via {result.path.value}",
            )
            return item.model_copy(update={"title_lang_fixed": True})

        oembed_lang = detect_language(oembed_title) if oembed_title else NO_DETECTION
        logger.debug(
            f"{video_id} languages: current={current_lang.lang}({current_lang.confidence:.2f}), "
            f"oEmbed={oembed_lang.lang}({oembed_lang.confidence:.2f})"
        )

        decision = decide_replacement(
            current_title,
            oembed_title,
            current_lang=current_lang.lang,
            current_lang_confidence=current_lang.confidence,
            oembed_lang=oembed_lang.lang,
            oembed_lang_confidence=oembed_lang.confidence,
        )

        if decision.should_replace:
            self._log_decision(video_id, source_context, "REPLACE", decision.reason)
            return self._restored(item, oembed_title)

        self._log_decision(video_id, source_context, "KEEP", decision.reason)
        return item.model_copy(update={"title_lang_fixed": True})

    async def _process_multi_audio(
        self, item: VideoItem, source_context: str
    ) -> VideoItem:
        # Dubbed tracks are told apart by track, not title: apply oEmbed directly
        result = await self.source.fetch(item.video_id)

        if result.ok and result.title:
            self._log_decision(
                item.video_id, source_context, "MULTI_AUDIO_RESTORED", "oEmbed title applied"
            )
            return self._restored(item, result.title)

        self._log_decision(
            item.video_id,
            source_context,
            "MULTI_AUDIO_KEEP",
            result.error or "oEmbed lookup failed",
        )
        return item.model_copy(update={"title_lang_fixed": True})

    @staticmethod
    def _restored(item: VideoItem, title: str) -> VideoItem:
        return item.model_copy(
            update={
                "title": title,
                "original_title": item.title,
                "title_restored": True,
                "title_lang_fixed": True,
            }
        )

    async def process_batch(
        self,
        items: list[VideoItem],
        is_list_context: bool = True,
        source_context: str = "unknown",
        translation_settings: TranslationSettings | None = None,
    ) -> list[VideoItem]:
        """Process items in fixed-size concurrent groups, preserving order.

        Args:
            items: Video items in display order
            is_list_context: Only list items are processed
            source_context: Where the list came from (e.g. "subs", "search")
            translation_settings: Settings for the translation fallback

        Returns:
            Processed items in the same order as ``items``
        """
        if not isinstance(items, list) or not items:
            return items

        video_count = sum(1 for v in items if v.type == "video" and v.video_id)
        channel_count = sum(1 for v in items if v.type == "channel")
        playlist_count = sum(1 for v in items if v.type == "playlist")
        logger.info(
            f"Title batch start ({source_context}): {len(items)} items "
            f"({video_count} videos, {channel_count} channels, {playlist_count} playlists)"
        )

        results: list[VideoItem] = []
        for start in range(0, len(items), self.batch_size):
            group = items[start : start + self.batch_size]
            # gather returns results index-aligned with the group
            group_results = await asyncio.gather(
                *(
                    self.process_item(
                        item,
                        is_list_context=is_list_context,
                        source_context=source_context,
                        translation_settings=translation_settings,
                    )
                    for item in group
                )
            )
            results.extend(group_results)

            if start + self.batch_size < len(items):
                await asyncio.sleep(self.batch_delay_seconds)

        restored_count = sum(1 for v in results if v.title_restored)
        processed_count = sum(1 for v in results if v.type == "video" and v.video_id)
        skipped_count = sum(
            1
            for v in results
            if v.title_lang_fixed and not v.title_restored and v.type == "video"
        )
        non_video_count = sum(1 for v in results if v.type != "video")
        logger.info(
            f"Title batch complete ({source_context}): {restored_count}/{processed_count} "
            f"videos restored, {skipped_count} skipped, "
            f"{non_video_count} non-videos passed through"
        )

        return results
