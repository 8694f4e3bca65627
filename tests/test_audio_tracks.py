"""Tests for audio track aggregation."""

import pytest

from tubemeta.audio_tracks import (
    aggregate_audio_tracks,
    collect_tracks,
    deduplicate_tracks,
    find_best_audio_track,
    sort_tracks_by_priority,
)
from tubemeta.models import AudioTrackDescriptor, TrackSource


def track(language_code, source=TrackSource.WEB, url=None, is_original=False, **kwargs):
    return AudioTrackDescriptor(
        id=kwargs.pop("id", f"{language_code}-{source.payload_key}"),
        language_code=language_code,
        language_name=kwargs.pop("language_name", language_code),
        url=url,
        is_original=is_original,
        source=source,
        **kwargs,
    )


@pytest.fixture
def en_everywhere():
    return {
        "mweb": [{"languageCode": "en", "formatId": "140"}],
        "web": [{"languageCode": "en", "formatId": "251"}],
        "dash": [{"languageCode": "en", "formatId": "140", "url": "https://cdn.example/en.m4a"}],
    }


def test_url_bearing_duplicate_wins(en_everywhere):
    """Test that the only copy with a URL survives deduplication."""
    tracks = aggregate_audio_tracks(en_everywhere)

    assert len(tracks) == 1
    assert tracks[0].source == TrackSource.DASH
    assert tracks[0].url == "https://cdn.example/en.m4a"


def test_url_bearing_duplicate_wins_regardless_of_key_order(en_everywhere):
    """Test that payload key order does not change the surviving copy."""
    reordered = dict(reversed(list(en_everywhere.items())))

    tracks = aggregate_audio_tracks(reordered)

    assert len(tracks) == 1
    assert tracks[0].source == TrackSource.DASH


def test_first_seen_wins_when_both_have_urls():
    """Test that the first copy wins when every copy is playable."""
    tracks = deduplicate_tracks(
        [
            track("en", TrackSource.MWEB, url="https://a"),
            track("en", TrackSource.DASH, url="https://b"),
        ]
    )

    assert [t.source for t in tracks] == [TrackSource.MWEB]


def test_ordering_original_system_then_alphabetical():
    """Test original, system language, then alphabetical ordering."""
    raw = {
        "web": [
            {"languageCode": "es", "url": "https://cdn.example/es"},
            {"languageCode": "en", "url": "https://cdn.example/en"},
            {"languageCode": "fr", "url": "https://cdn.example/fr"},
            {"languageCode": "de", "url": "https://cdn.example/de", "isOriginal": True},
        ]
    }

    tracks = aggregate_audio_tracks(raw, system_language="fr")

    assert [t.language_code for t in tracks] == ["de", "fr", "en", "es"]


def test_system_language_matches_on_base_subtag():
    """Test that a regional system language matches its base code."""
    tracks = sort_tracks_by_priority(
        [track("en"), track("pl"), track("de")], system_language="pl-PL"
    )

    assert [t.language_code for t in tracks] == ["pl", "de", "en"]


def test_language_names_filled_in():
    """Test display names from langcodes when the payload has none."""
    tracks = aggregate_audio_tracks(
        {
            "dash": [
                {"languageCode": "de"},
                {"languageCode": "ja", "languageName": "Japanese (dubbed)"},
            ]
        }
    )

    names = {t.language_code: t.language_name for t in tracks}
    assert names == {"de": "German", "ja": "Japanese (dubbed)"}


def test_track_id_fallbacks():
    """Test track IDs derived from format ID and source."""
    tracks = collect_tracks(
        {
            "mweb": [{"languageCode": "en", "id": "explicit"}],
            "web": [{"languageCode": "fr", "formatId": 251}],
            "dash": [{"languageCode": "es"}],
        }
    )

    assert [t.id for t in tracks] == ["explicit", "fr-251", "es-dash"]
    assert tracks[1].format_id == "251"


def test_invalid_entries_skipped():
    """Test that malformed track entries are skipped."""
    tracks = collect_tracks(
        {
            "web": [
                {"languageCode": ""},
                {"formatId": "140"},
                "not a track",
                {"languageCode": "en", "url": "https://cdn.example/en"},
            ]
        }
    )

    assert [t.language_code for t in tracks] == ["en"]


def test_unknown_sources_and_bad_payloads_ignored():
    """Test that unknown sources and non-list payloads are ignored."""
    tracks = collect_tracks(
        {
            "hls": [{"languageCode": "en"}],
            "web": {"languageCode": "en"},
            "dash": [{"languageCode": "de"}],
        }
    )

    assert [(t.language_code, t.source) for t in tracks] == [("de", TrackSource.DASH)]


def test_enum_keys_accepted():
    """Test metadata keyed by TrackSource members."""
    tracks = collect_tracks({TrackSource.MWEB: [{"languageCode": "en"}]})

    assert tracks[0].source == TrackSource.MWEB


@pytest.mark.parametrize("raw", [None, {}, {"web": None}])
def test_empty_metadata(raw):
    """Test aggregation with no metadata."""
    assert aggregate_audio_tracks(raw) == []


class TestFindBestAudioTrack:
    def test_empty(self):
        """Test picking from an empty track list."""
        assert find_best_audio_track([]) is None

    def test_saved_preference_first(self, temp_preferences):
        """Test that a saved preference beats the original track."""
        tracks = [track("de", is_original=True), track("en"), track("fr")]
        temp_preferences.save("abc123", "fr")

        best = find_best_audio_track(tracks, "abc123", temp_preferences)

        assert best.language_code == "fr"

    def test_saved_preference_matches_regional_code(self, temp_preferences):
        """Test that a saved base code matches a regional track."""
        tracks = [track("de", is_original=True), track("pt-BR")]
        temp_preferences.save("abc123", "pt")

        best = find_best_audio_track(tracks, "abc123", temp_preferences)

        assert best.language_code == "pt-BR"

    def test_unavailable_preference_falls_back_to_original(self, temp_preferences):
        """Test fallback to the original track when the preference is missing."""
        tracks = [track("en"), track("de", is_original=True)]
        temp_preferences.save("abc123", "ja")

        best = find_best_audio_track(tracks, "abc123", temp_preferences)

        assert best.language_code == "de"

    def test_system_language_then_first(self):
        """Test system language match, then the first track."""
        tracks = [track("es"), track("fr")]

        assert find_best_audio_track(tracks, system_language="fr").language_code == "fr"
        assert find_best_audio_track(tracks, system_language="ja").language_code == "es"
