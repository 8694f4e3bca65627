"""Command-line entry point for tubemeta."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError

from .config import settings
from .languages import language_code_short
from .models import VideoItem
from .oembed_client import OEmbedTitleSource
from .preferences import AudioTrackPreferences
from .title_cache import TitleCache
from .title_restorer import TitleRestorer
from .track_store import TrackSelectionStore

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def load_json(path: str) -> Any:
    """Read a JSON document from a file, or stdin for "-"."""
    if path == "-":
        return json.load(sys.stdin)
    return json.loads(Path(path).read_text(encoding="utf-8"))


async def restore_titles(
    raw_items: list[dict[str, Any]],
    source_context: str = "cli",
    timeout_ms: int = settings.oembed_timeout_ms,
) -> list[dict[str, Any]]:
    """Run the title restorer over raw list items and return them as dicts."""
    items = [VideoItem.model_validate(raw) for raw in raw_items]

    async with httpx.AsyncClient(
        headers={"User-Agent": settings.user_agent},
        follow_redirects=True,
    ) as client:
        source = OEmbedTitleSource(
            client, TitleCache(), default_timeout_ms=timeout_ms
        )
        restorer = TitleRestorer(source)
        results = await restorer.process_batch(items, source_context=source_context)

    return [item.model_dump(by_alias=True, exclude_unset=True) for item in results]


def aggregate_tracks(
    metadata: dict[str, Any],
    video_id: str,
    system_language: str = "en",
    preferences_db: str | None = None,
) -> dict[str, Any]:
    """Aggregate raw audio metadata and report the ordered tracks and default pick."""
    preferences = AudioTrackPreferences(preferences_db) if preferences_db else None
    store = TrackSelectionStore(preferences=preferences)
    tracks = store.load(video_id, metadata, system_language)
    best = store.best_track()

    return {
        "videoId": video_id,
        "tracks": [
            {
                **track.model_dump(mode="json"),
                "short_code": language_code_short(track.language_code),
            }
            for track in tracks
        ],
        "defaultTrackId": best.id if best else None,
    }


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Reconcile video titles and audio tracks from several sources"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    titles_parser = subparsers.add_parser(
        "titles", help="Restore original-language titles for a JSON list of items"
    )
    titles_parser.add_argument("items", help="JSON file with a list of items (- for stdin)")
    titles_parser.add_argument(
        "--source",
        type=str,
        default="cli",
        help="Source context used in logs (default: cli)",
    )
    titles_parser.add_argument(
        "--timeout-ms",
        type=int,
        default=settings.oembed_timeout_ms,
        help=f"oEmbed request timeout in ms (default: {settings.oembed_timeout_ms})",
    )

    tracks_parser = subparsers.add_parser(
        "tracks", help="Aggregate audio tracks from mweb/web/dash metadata"
    )
    tracks_parser.add_argument("metadata", help="JSON file with mweb/web/dash arrays (- for stdin)")
    tracks_parser.add_argument("--video-id", required=True, help="Video ID")
    tracks_parser.add_argument(
        "--system-language",
        type=str,
        default="en",
        help="System language code (default: en)",
    )
    tracks_parser.add_argument(
        "--preferences-db",
        type=str,
        default=None,
        help="SQLite database with saved audio preferences (default: none)",
    )

    args = parser.parse_args()

    try:
        if args.command == "titles":
            raw_items = load_json(args.items)
            if not isinstance(raw_items, list):
                logger.error("Items file must contain a JSON list")
                sys.exit(1)
            output = asyncio.run(
                restore_titles(raw_items, args.source, args.timeout_ms)
            )
        else:
            metadata = load_json(args.metadata)
            if not isinstance(metadata, dict):
                logger.error("Metadata file must contain a JSON object")
                sys.exit(1)
            output = aggregate_tracks(
                metadata, args.video_id, args.system_language, args.preferences_db
            )
    except (OSError, json.JSONDecodeError, ValidationError):
        logger.exception("Failed to read input:")
        sys.exit(1)

    json.dump(output, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")


if __name__ == "__main__":
    main()
