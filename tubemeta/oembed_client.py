"""oEmbed title source with positive and negative caching."""

import logging
from collections.abc import Mapping
from typing import Any, Protocol
from urllib.parse import quote

import httpx

from .config import settings
from .models import FetchPath, TitleFetchResult
from .title_cache import TitleCache

logger = logging.getLogger(__name__)

BLOCKED_STATUSES = frozenset({401, 403})


class HostTitleBridge(Protocol):
    """Privileged host-process channel for oEmbed lookups.

    Returns a mapping shaped like ``{ok, title, status, message|error|statusText}``.
    """

    async def fetch_oembed(self, video_id: str) -> Mapping[str, Any]: ...


def _is_blocked(status: int | None) -> bool:
    return status in BLOCKED_STATUSES


def _has_title(title: Any) -> bool:
    return isinstance(title, str) and bool(title.strip())


class OEmbedTitleSource:
    """Fetches canonical video titles from an oEmbed endpoint.

    Exactly one network attempt is made per cache miss, through the host bridge
    when one is configured and directly over HTTP otherwise. Failures are
    returned as results, never raised.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        cache: TitleCache | None = None,
        bridge: HostTitleBridge | None = None,
        url_template: str = settings.oembed_url_template,
        default_timeout_ms: int = settings.oembed_timeout_ms,
    ):
        self.client = client
        self.cache = cache if cache is not None else TitleCache()
        self.bridge = bridge
        self.url_template = url_template
        self.default_timeout_ms = default_timeout_ms

    @property
    def network_path(self) -> FetchPath:
        return FetchPath.HOST_BRIDGE if self.bridge is not None else FetchPath.DIRECT

    def build_url(self, video_id: str) -> str:
        return self.url_template.format(video_id=quote(video_id, safe=""))

    async def fetch(
        self, video_id: Any, timeout_ms: int | None = None
    ) -> TitleFetchResult:
        """Fetch the canonical title for a video.

        Args:
            video_id: Video ID; anything other than a non-blank string is rejected
            timeout_ms: Deadline for the direct HTTP path in milliseconds

        Returns:
            TitleFetchResult describing the outcome
        """
        if not isinstance(video_id, str) or not video_id.strip():
            return TitleFetchResult(
                ok=False, path=self.network_path, error="invalid-argument"
            )

        video_id = video_id.strip()

        cached_title = self.cache.positive.get(video_id)
        if cached_title is not None:
            logger.debug(f"oEmbed cache hit for {video_id} (positive)")
            return TitleFetchResult(
                ok=True,
                title=cached_title,
                status=200,
                from_cache=True,
                path=FetchPath.CACHE,
            )

        negative = self.cache.negative.get(video_id)
        if negative is not None:
            logger.debug(
                f"oEmbed cache hit for {video_id} (negative): "
                f"status {negative.status if negative.status is not None else 'unknown'}"
            )
            return TitleFetchResult(
                ok=False,
                status=negative.status,
                blocked=_is_blocked(negative.status),
                from_cache=True,
                path=FetchPath.CACHE,
                error=negative.error,
            )

        if self.bridge is not None:
            return await self._fetch_via_bridge(video_id)

        if timeout_ms is None:
            timeout_ms = self.default_timeout_ms
        return await self._fetch_direct(video_id, timeout_ms)

    async def _fetch_via_bridge(self, video_id: str) -> TitleFetchResult:
        path = FetchPath.HOST_BRIDGE
        try:
            response = await self.bridge.fetch_oembed(video_id)
        except Exception as e:
            message = str(e) or "unknown error"
            logger.warning(f"oEmbed fetch via host bridge error for {video_id}: {message}")
            self.cache.store_failure(video_id, None, message)
            return TitleFetchResult(ok=False, path=path, error=message)

        if not isinstance(response, Mapping):
            # Unexpected shapes count as a failed lookup without a status
            response = {}
        raw_status = response.get("status")
        status = (
            raw_status
            if isinstance(raw_status, int) and not isinstance(raw_status, bool)
            else None
        )
        title = response.get("title")

        if response.get("ok") and _has_title(title):
            self.cache.store_title(video_id, title)
            logger.debug(f"oEmbed fetched via host bridge for {video_id}: {title!r}")
            return TitleFetchResult(ok=True, title=title, status=status, path=path)

        message = response.get("message") or response.get("error")
        if message is None and isinstance(response.get("statusText"), str):
            message = response["statusText"]

        return self._record_failure(
            video_id, status, str(message) if message is not None else None, path
        )

    async def _fetch_direct(self, video_id: str, timeout_ms: int) -> TitleFetchResult:
        path = FetchPath.DIRECT
        url = self.build_url(video_id)

        try:
            response = await self.client.get(
                url,
                headers={"Accept": "application/json"},
                timeout=timeout_ms / 1000,
            )
        except httpx.TimeoutException:
            logger.warning(f"oEmbed fetch timeout for {video_id} after {timeout_ms}ms")
            self.cache.store_failure(video_id, None, "timeout")
            return TitleFetchResult(ok=False, path=path, error="timeout")
        except httpx.HTTPError as e:
            message = str(e) or "unknown error"
            logger.warning(f"oEmbed fetch error for {video_id}: {message}")
            self.cache.store_failure(video_id, None, message)
            return TitleFetchResult(ok=False, path=path, error=message)

        status = response.status_code

        if not response.is_success:
            return self._record_failure(
                video_id, status, response.reason_phrase or None, path
            )

        try:
            data = response.json()
        except ValueError as e:
            message = f"invalid JSON: {e}"
            logger.warning(f"oEmbed response for {video_id} is not JSON: {e}")
            self.cache.store_failure(video_id, None, message)
            return TitleFetchResult(ok=False, path=path, error=message)

        title = data.get("title") if isinstance(data, dict) else None
        if _has_title(title):
            self.cache.store_title(video_id, title)
            logger.debug(f"oEmbed fetched directly for {video_id}: {title!r}")
            return TitleFetchResult(ok=True, title=title, status=status, path=path)

        logger.warning(f"oEmbed returned empty title for {video_id}: status {status}")
        self.cache.store_failure(video_id, status, "missing-title")
        return TitleFetchResult(ok=False, status=status, path=path, error="missing-title")

    def _record_failure(
        self,
        video_id: str,
        status: int | None,
        message: str | None,
        path: FetchPath,
    ) -> TitleFetchResult:
        blocked = _is_blocked(status)
        self.cache.store_failure(video_id, status, message)

        status_text = status if status is not None else "unknown"
        if blocked:
            logger.warning(f"oEmbed blocked via {path.value} for {video_id}: status {status_text}")
        else:
            detail = f" ({message})" if message else ""
            logger.warning(
                f"oEmbed fetch via {path.value} failed for {video_id}: status {status_text}{detail}"
            )

        return TitleFetchResult(
            ok=False, status=status, blocked=blocked, path=path, error=message
        )
