"""Pydantic models for tubemeta data structures."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class FetchPath(str, Enum):
    """Where a title fetch result came from."""

    CACHE = "cache"
    HOST_BRIDGE = "host-bridge"
    DIRECT = "direct"


class TitleFetchResult(BaseModel):
    """Outcome of a single oEmbed title lookup."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ok: bool
    title: str | None = None
    status: int | None = None
    blocked: bool = False
    from_cache: bool = False
    path: FetchPath
    error: str | None = None


class VideoItem(BaseModel):
    """List item as delivered by the upstream API.

    Unknown upstream fields are preserved. The pipeline-owned flags use the
    underscore-prefixed wire names on input and output.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    video_id: str | None = Field(default=None, alias="videoId")
    title: str | None = None
    type: str | None = None

    title_lang_fixed: bool = Field(default=False, alias="_titleLangFixed")
    original_title: str | None = Field(default=None, alias="_originalTitle")
    title_restored: bool = Field(default=False, alias="_titleRestored")
    is_multi_audio: bool = Field(default=False, alias="_isMultiAudio")


class TrackSource(str, Enum):
    """Backends that report audio tracks, in aggregation order."""

    MWEB = "MWEB"
    WEB = "WEB"
    DASH = "DASH"

    @property
    def payload_key(self) -> str:
        return self.value.lower()


class RawAudioTrack(BaseModel):
    """Audio track entry as reported by one backend."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    language_code: str = Field(alias="languageCode", min_length=1)
    format_id: str | int | None = Field(default=None, alias="formatId")
    id: str | None = None
    url: str | None = None
    language_name: str | None = Field(default=None, alias="languageName")
    is_original: bool = Field(default=False, alias="isOriginal")
    bitrate: int | None = None


class AudioTrackDescriptor(BaseModel):
    """Deduplicated audio track, as exposed to selection components."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    language_code: str
    language_name: str
    url: str | None = None
    is_original: bool = False
    bitrate: int | None = None
    format_id: str | None = None
    source: TrackSource

    @property
    def has_url(self) -> bool:
        return bool(self.url)
