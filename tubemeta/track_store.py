"""Audio track selection state for the currently loaded video."""

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .audio_tracks import RawAudioMetadata, aggregate_audio_tracks, find_best_audio_track
from .languages import base_language
from .models import AudioTrackDescriptor
from .preferences import AudioTrackPreferences

logger = logging.getLogger(__name__)

AUDIO_TRACK_SWITCH_REQUESTED = "audioTrackSwitchRequested"
NO_URL_MESSAGE = "This audio track cannot be played (no URL available)"


class SwitchReason(str, Enum):
    """Why a switch request did not change the selection."""

    MISSING_ID = "missing-id"
    NO_TRACKS = "no-tracks"
    TRACK_NOT_FOUND = "track-not-found"
    NO_URL = "no-url"
    ALREADY_SELECTED = "already-selected"


@dataclass(frozen=True)
class SwitchResult:
    success: bool
    reason: SwitchReason | None = None
    track: AudioTrackDescriptor | None = None


@dataclass
class TrackSelectionState:
    tracks: list[AudioTrackDescriptor] = field(default_factory=list)
    current_video_id: str | None = None
    selected_audio_track_id: str | None = None


def _log_notice(message: str) -> None:
    logger.warning(f"User notice: {message}")


class TrackSelectionStore:
    """Owns the aggregated tracks of one video and the user's selection.

    Commands run to completion without awaiting, so readers never see a
    half-applied update.
    """

    def __init__(
        self,
        preferences: AudioTrackPreferences | None = None,
        notify: Callable[[str], None] = _log_notice,
    ):
        self.preferences = preferences
        self.notify = notify
        self.state = TrackSelectionState()
        self._listeners: dict[str, list[Callable[[dict[str, Any]], None]]] = defaultdict(list)
        self._system_language = "en"

    @property
    def tracks(self) -> list[AudioTrackDescriptor]:
        return self.state.tracks

    @property
    def current_video_id(self) -> str | None:
        return self.state.current_video_id

    @property
    def selected_audio_track_id(self) -> str | None:
        return self.state.selected_audio_track_id

    @property
    def selected_track(self) -> AudioTrackDescriptor | None:
        track_id = self.state.selected_audio_track_id
        if not track_id:
            return None
        return self._find(track_id)

    def _find(self, track_id: str) -> AudioTrackDescriptor | None:
        for track in self.state.tracks:
            if track.id == track_id:
                return track
        return None

    def load(
        self,
        video_id: str,
        raw_by_source: RawAudioMetadata | None,
        system_language: str = "en",
    ) -> list[AudioTrackDescriptor]:
        """Replace the track list for ``video_id`` and reset the selection."""
        logger.info(f"Loading audio tracks for {video_id} (system language {system_language})")

        tracks = aggregate_audio_tracks(raw_by_source, system_language)
        self.state = TrackSelectionState(tracks=tracks, current_video_id=video_id)
        self._system_language = system_language

        logger.info(f"Loaded {len(tracks)} audio tracks for {video_id}")
        return tracks

    def clear(self) -> None:
        logger.debug("Clearing audio tracks")
        self.state = TrackSelectionState()

    def best_track(self) -> AudioTrackDescriptor | None:
        """Track to start playback with, honouring the saved preference."""
        return find_best_audio_track(
            self.state.tracks,
            self.state.current_video_id,
            self.preferences,
            self._system_language,
        )

    def request_switch(self, track_id: str | None) -> SwitchResult:
        """Select a track by ID. Never raises; the outcome is in the result."""
        logger.debug(
            f"Audio switch requested: {track_id} "
            f"(video {self.state.current_video_id}, {len(self.state.tracks)} tracks)"
        )

        if not track_id:
            logger.warning("Audio switch rejected: missing track ID")
            return SwitchResult(False, SwitchReason.MISSING_ID)

        if not self.state.tracks:
            logger.warning("Audio switch rejected: no tracks loaded")
            return SwitchResult(False, SwitchReason.NO_TRACKS)

        track = self._find(track_id)
        if track is None:
            logger.warning(f"Audio switch rejected: track {track_id} not found")
            return SwitchResult(False, SwitchReason.TRACK_NOT_FOUND)

        if not track.has_url:
            logger.warning(f"Cannot switch to {track.language_name}: no URL available")
            try:
                self.notify(NO_URL_MESSAGE)
            except Exception:
                logger.exception("Failed to show no-URL notice")
            return SwitchResult(False, SwitchReason.NO_URL, track)

        if self.state.selected_audio_track_id == track_id:
            logger.debug(f"Audio track {track_id} already selected")
            return SwitchResult(False, SwitchReason.ALREADY_SELECTED, track)

        self.state.selected_audio_track_id = track_id
        logger.info(
            f"Audio switch: language={track.language_code} source={track.source.value} "
            f"bitrate={track.bitrate}"
        )

        if self.preferences is not None and self.state.current_video_id:
            self.preferences.save(
                self.state.current_video_id, base_language(track.language_code)
            )

        return SwitchResult(True, track=track)

    def on(self, event: str, callback: Callable[[dict[str, Any]], None]) -> None:
        """Register a listener for store events."""
        self._listeners[event].append(callback)

    def emit(self, event: str, payload: dict[str, Any]) -> None:
        for callback in list(self._listeners.get(event, ())):
            try:
                callback(payload)
            except Exception:
                logger.exception(f"Listener for {event} failed")

    def request_unloaded_track(self, audio_track_id: str, language: str) -> None:
        """Ask UI layers to fetch a track that is not loaded yet."""
        logger.info(f"Requesting unloaded audio track {audio_track_id} ({language})")
        self.emit(
            AUDIO_TRACK_SWITCH_REQUESTED,
            {"audioTrackId": audio_track_id, "language": language},
        )
