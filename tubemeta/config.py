from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Configuration settings for tubemeta."""

    # oEmbed title source
    oembed_url_template: str = Field(
        default="https://www.youtube.com/oembed?url=https://www.youtube.com/watch?v={video_id}&format=json",
        description="oEmbed endpoint, formatted with the URL-encoded video ID",
    )
    oembed_timeout_ms: int = Field(
        default=2000, description="Timeout for direct oEmbed requests in milliseconds"
    )
    user_agent: str = Field(
        default="tubemeta/1.0 Title Restorer",
        description="User-Agent header sent on direct oEmbed requests",
    )

    # Title caches
    title_cache_size: int = Field(
        default=200, description="Maximum number of cached oEmbed titles"
    )
    negative_cache_ttl_seconds: int = Field(
        default=600, description="How long a failed oEmbed lookup suppresses retries"
    )

    # Batch processing
    batch_size: int = Field(
        default=10, description="Number of items processed concurrently per group"
    )
    batch_delay_seconds: float = Field(
        default=0.1, description="Pause between consecutive groups in seconds"
    )

    # Machine translation fallback (not implemented upstream, off by default)
    enable_title_mt_fallback: bool = Field(
        default=False, description="Allow the translation fallback for blocked titles"
    )
    translation_provider_url: str = Field(
        default="", description="Translation provider endpoint for the MT fallback"
    )

    # Audio track preferences
    preferences_db_path: str = Field(
        default="tubemeta.db", description="Path to SQLite database for preferences"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    probe_video_ids: list[str] = Field(
        default_factory=list,
        description="Video IDs whose title decisions are logged at INFO level",
    )

    class Config:
        env_prefix = "TUBEMETA_"
        case_sensitive = False


settings = Settings()
