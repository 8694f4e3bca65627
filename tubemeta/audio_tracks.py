"""Merge audio track metadata reported by several backends.

Each backend (MWEB, WEB, DASH) reports its own view of a video's audio tracks.
The same language often shows up more than once, sometimes without a playable
URL. Aggregation keeps one track per language and orders the result:

1. original audio track(s)
2. the system-language track
3. everything else, alphabetically by display name
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from .languages import base_language, language_name
from .models import AudioTrackDescriptor, RawAudioTrack, TrackSource
from .preferences import AudioTrackPreferences

logger = logging.getLogger(__name__)

RawAudioMetadata = Mapping[TrackSource | str, Iterable[Mapping[str, Any]] | None]


def _source_entries(
    raw_by_source: RawAudioMetadata, source: TrackSource
) -> Iterable[Mapping[str, Any]]:
    entries = raw_by_source.get(source)
    if entries is None:
        entries = raw_by_source.get(source.payload_key)
    if entries is None:
        return []
    if isinstance(entries, (str, bytes, Mapping)):
        logger.warning(f"Ignoring {source.value} audio metadata: expected a list of tracks")
        return []
    return entries


def _to_descriptor(raw: RawAudioTrack, source: TrackSource) -> AudioTrackDescriptor:
    format_id = str(raw.format_id) if raw.format_id is not None else None
    if raw.id:
        track_id = raw.id
    elif format_id:
        track_id = f"{raw.language_code}-{format_id}"
    else:
        track_id = f"{raw.language_code}-{source.payload_key}"

    return AudioTrackDescriptor(
        id=track_id,
        language_code=raw.language_code,
        language_name=raw.language_name or language_name(raw.language_code),
        url=raw.url or None,
        is_original=raw.is_original,
        bitrate=raw.bitrate,
        format_id=format_id,
        source=source,
    )


def collect_tracks(raw_by_source: RawAudioMetadata | None) -> list[AudioTrackDescriptor]:
    """Flatten every backend's tracks, in TrackSource order, tagged with their origin."""
    if not raw_by_source:
        return []

    known_keys = {s for s in TrackSource} | {s.payload_key for s in TrackSource}
    for key in raw_by_source:
        if key not in known_keys:
            logger.warning(f"Ignoring audio metadata from unknown source {key!r}")

    tracks = []
    for source in TrackSource:
        entries = list(_source_entries(raw_by_source, source))
        logger.debug(f"Processing {source.value} tracks: {len(entries)}")

        for index, entry in enumerate(entries):
            try:
                raw = RawAudioTrack.model_validate(entry)
            except ValidationError as e:
                logger.warning(
                    f"Skipping invalid {source.value} track #{index + 1}: "
                    f"{e.error_count()} validation error(s)"
                )
                continue

            tracks.append(_to_descriptor(raw, source))

    logger.debug(f"Total audio tracks collected: {len(tracks)}")
    return tracks


def deduplicate_tracks(
    tracks: Iterable[AudioTrackDescriptor],
) -> list[AudioTrackDescriptor]:
    """Keep one track per language code.

    The first track seen wins unless a later one has a URL and the kept one
    does not.
    """
    by_language: dict[str, AudioTrackDescriptor] = {}

    for track in tracks:
        existing = by_language.get(track.language_code)
        if existing is None:
            by_language[track.language_code] = track
        elif track.has_url and not existing.has_url:
            logger.debug(
                f"Replaced {track.language_code} track "
                f"({existing.source.value} -> {track.source.value}): has URL"
            )
            by_language[track.language_code] = track
        else:
            logger.debug(
                f"Skipped duplicate {track.language_code} track from {track.source.value}"
            )

    return list(by_language.values())


def _alphabetical_key(track: AudioTrackDescriptor) -> tuple[str, str]:
    return (track.language_name.casefold(), track.language_code)


def sort_tracks_by_priority(
    tracks: Iterable[AudioTrackDescriptor], system_language: str | None = "en"
) -> list[AudioTrackDescriptor]:
    """Order tracks: original, then system language, then the rest alphabetically.

    Ties inside every bucket are broken by display name and then language code,
    so the order never depends on which backend reported a track first.
    """
    system_code = base_language(system_language) if system_language else "en"

    original_tracks = []
    system_language_tracks = []
    other_tracks = []

    for track in tracks:
        if track.is_original:
            original_tracks.append(track)
        elif base_language(track.language_code) == system_code:
            system_language_tracks.append(track)
        else:
            other_tracks.append(track)

    original_tracks.sort(key=_alphabetical_key)
    system_language_tracks.sort(key=_alphabetical_key)
    other_tracks.sort(key=_alphabetical_key)

    return original_tracks + system_language_tracks + other_tracks


def aggregate_audio_tracks(
    raw_by_source: RawAudioMetadata | None, system_language: str | None = "en"
) -> list[AudioTrackDescriptor]:
    """Collect, deduplicate and order audio tracks from every backend.

    Args:
        raw_by_source: Raw track lists keyed by TrackSource or its payload key
            ("mweb", "web", "dash")
        system_language: Preferred UI language code (e.g. "en", "pl-PL")

    Returns:
        One descriptor per language, in display order
    """
    collected = collect_tracks(raw_by_source)
    deduplicated = deduplicate_tracks(collected)
    sorted_tracks = sort_tracks_by_priority(deduplicated, system_language)

    logger.debug(
        "Final audio track order: "
        + ", ".join(
            f"{t.language_code}({t.source.value}{', original' if t.is_original else ''})"
            for t in sorted_tracks
        )
    )
    return sorted_tracks


def find_best_audio_track(
    tracks: list[AudioTrackDescriptor],
    video_id: str | None = None,
    preferences: AudioTrackPreferences | None = None,
    system_language: str | None = "en",
) -> AudioTrackDescriptor | None:
    """Pick the track to start with.

    Order: saved per-video preference, original track, system language track,
    first track.
    """
    if not tracks:
        return None

    if preferences is not None and video_id:
        saved = preferences.load(video_id)
        if saved:
            for track in tracks:
                if base_language(track.language_code) == saved.lower():
                    logger.debug(f"Using saved audio preference for {video_id}: {saved}")
                    return track

    for track in tracks:
        if track.is_original:
            return track

    system_code = base_language(system_language) if system_language else "en"
    for track in tracks:
        if base_language(track.language_code) == system_code:
            return track

    return tracks[0]
