"""
Media URL Resolver.

Best-effort lookup of display metadata for external artwork links. The
platform is detected from the URL; DeviantArt links are resolved through the
public oEmbed endpoint, other social platforms are returned as-is, and any
other URL is treated as a direct image link.

Successful resolutions (those that yield an image or thumbnail URL) are kept
in a ``cachetools.TTLCache``. The cache is per-process and unsynchronized;
a lost update only costs one extra lookup.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, Optional
from urllib.parse import quote, urlparse

import httpx
from cachetools import TTLCache

from usogui_db.core.logging_config import get_logger
from usogui_db.core.models.io.media import MediaResolution
from usogui_db.core.monitoring import log_media_resolution
from usogui_db.server.core.config import settings

logger = get_logger(__name__)

DEVIANTART_OEMBED_URL = "https://backend.deviantart.com/oembed"


def detect_platform(url: str) -> str:
    """Classify a URL by lowercase substring match."""
    lowered = url.lower()
    if "deviantart.com" in lowered:
        return "deviantart"
    if "pixiv.net" in lowered:
        return "pixiv"
    host = (urlparse(lowered).hostname or "").removeprefix("www.")
    # "x.com" is a substring of unrelated hosts, so match it on the host only
    if "twitter.com" in lowered or host == "x.com":
        return "twitter"
    if "instagram.com" in lowered:
        return "instagram"
    return "direct"


def _optional_int(value: Any) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


class MediaUrlResolver:
    """Resolve external media URLs to display metadata.

    Args:
        timeout: Outbound request timeout in seconds
        user_agent: User-Agent sent to oEmbed providers
        cache_ttl: Seconds a successful resolution stays cached
        cache_size: Maximum number of cached resolutions
        client_factory: Builds the ``httpx.AsyncClient`` used per lookup
        timer: Clock used by the cache (injectable for tests)
    """

    def __init__(
        self,
        timeout: float,
        user_agent: str,
        cache_ttl: int,
        cache_size: int = 1024,
        client_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._cache: TTLCache = TTLCache(maxsize=cache_size, ttl=cache_ttl, timer=timer)
        self._client_factory = client_factory or self._default_client

    def _default_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, headers={"User-Agent": self.user_agent})

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def clear_cache(self) -> None:
        self._cache.clear()

    async def resolve(self, url: str) -> MediaResolution:
        """Resolve ``url``; never raises for remote or parsing failures."""
        cached = self._cache.get(url)
        if cached is not None:
            log_media_resolution(url, cached.platform, cached=True)
            return cached

        start = time.perf_counter()
        platform = detect_platform(url)
        try:
            if platform == "deviantart":
                resolution = await self._resolve_deviantart(url)
            elif platform == "direct":
                resolution = MediaResolution(original_url=url, platform="direct", direct_image_url=url)
            else:
                resolution = MediaResolution(original_url=url, platform=platform)
        except Exception as e:
            logger.warning(
                f"Media URL resolution failed for {url}: {e}",
                extra={"url": url, "platform": platform, "error": str(e)},
            )
            resolution = MediaResolution(original_url=url, platform="unknown")

        duration_ms = (time.perf_counter() - start) * 1000
        log_media_resolution(url, resolution.platform, cached=False, duration_ms=duration_ms)

        if resolution.has_image:
            self._cache[url] = resolution
        return resolution

    async def _resolve_deviantart(self, url: str) -> MediaResolution:
        oembed_url = f"{DEVIANTART_OEMBED_URL}?url={quote(url, safe='')}"
        try:
            async with self._client_factory() as client:
                response = await client.get(oembed_url)
                response.raise_for_status()
                data: Dict[str, Any] = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.info(f"DeviantArt oEmbed lookup failed for {url}: {e}")
            return MediaResolution(original_url=url, platform="deviantart")

        return MediaResolution(
            original_url=url,
            platform="deviantart",
            direct_image_url=data.get("url"),
            thumbnail_url=data.get("thumbnail_url"),
            title=data.get("title"),
            author=data.get("author_name"),
            width=_optional_int(data.get("width")),
            height=_optional_int(data.get("height")),
            metadata={
                "author_url": data.get("author_url"),
                "publish_date": data.get("pubdate"),
                "tags": data.get("tags"),
                "thumbnails": {
                    "small": data.get("thumbnail_url_150"),
                    "medium": data.get("thumbnail_url"),
                    "large": data.get("thumbnail_url_200h"),
                },
            },
        )


_resolver: Optional[MediaUrlResolver] = None


def get_media_resolver() -> MediaUrlResolver:
    """Process-wide resolver instance (FastAPI dependency)."""
    global _resolver
    if _resolver is None:
        config = settings.media_resolver
        _resolver = MediaUrlResolver(
            timeout=config.timeout,
            user_agent=config.user_agent,
            cache_ttl=config.cache_ttl,
            cache_size=config.cache_size,
        )
    return _resolver
