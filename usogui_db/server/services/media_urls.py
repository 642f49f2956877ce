"""
Media URL normalization and validation.

Submitted media links are canonicalized before they are stored so the unique
URL constraint catches duplicates written in different forms (``youtu.be``
short links, ``x.com`` vs ``twitter.com``, mobile hosts, ...).
"""

from __future__ import annotations

import re
from typing import Callable, List, Optional
from urllib.parse import parse_qs, urlparse, urlunparse

from usogui_db.core.models.domain import MediaType

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp")

_YOUTUBE_HOSTS = {"youtube.com", "www.youtube.com", "m.youtube.com"}
_PIXIV_ARTWORK = re.compile(r"/(?:[a-z]{2}/)?artworks/(\d+)")


class MediaUrlError(ValueError):
    """Raised when a URL is not acceptable for the requested media type."""


def _parse(url: str):
    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    return parsed


def _host(parsed) -> str:
    return (parsed.hostname or "").lower()


def _with_host(parsed, host: str) -> str:
    netloc = host if parsed.port is None else f"{host}:{parsed.port}"
    return urlunparse(("https", netloc, parsed.path, parsed.params, parsed.query, parsed.fragment))


# =====================================================================
# Normalizers
# =====================================================================


def youtube_video_id(url: str) -> Optional[str]:
    """Extract the video id from any supported YouTube URL form."""
    parsed = _parse(url)
    if parsed is None:
        return None
    host = _host(parsed)
    if host == "youtu.be":
        video_id = parsed.path.lstrip("/").split("/")[0]
        return video_id or None
    if host in _YOUTUBE_HOSTS:
        if parsed.path == "/watch":
            values = parse_qs(parsed.query).get("v")
            return values[0] if values and values[0] else None
        match = re.match(r"^/embed/([^/?#]+)", parsed.path)
        if match:
            return match.group(1)
    return None


def normalize_youtube(url: str) -> str:
    video_id = youtube_video_id(url)
    if video_id is None:
        return url
    return f"https://www.youtube.com/watch?v={video_id}"


def normalize_twitter(url: str) -> str:
    parsed = _parse(url)
    if parsed is None or _host(parsed) not in ("x.com", "www.x.com", "mobile.x.com"):
        return url
    return _with_host(parsed, "twitter.com")


def normalize_pixiv(url: str) -> str:
    parsed = _parse(url)
    if parsed is None or not _host(parsed).endswith("pixiv.net"):
        return url
    match = _PIXIV_ARTWORK.search(parsed.path)
    artwork_id = match.group(1) if match else None
    if artwork_id is None:
        illust = parse_qs(parsed.query).get("illust_id")
        artwork_id = illust[0] if illust and illust[0].isdigit() else None
    if artwork_id is None:
        return url
    return f"https://www.pixiv.net/artworks/{artwork_id}"


def normalize_instagram(url: str) -> str:
    parsed = _parse(url)
    if parsed is None or _host(parsed) != "instagram.com":
        return url
    return _with_host(parsed, "www.instagram.com")


def normalize_tiktok(url: str) -> str:
    parsed = _parse(url)
    if parsed is None:
        return url
    host = _host(parsed)
    # Short links on vm.tiktok.com only resolve on that host
    if host == "vm.tiktok.com" or host not in ("tiktok.com", "m.tiktok.com"):
        return url
    return _with_host(parsed, "www.tiktok.com")


def normalize_imgur(url: str) -> str:
    parsed = _parse(url)
    if parsed is None:
        return url
    host = _host(parsed)
    # i.imgur.com serves the raw image files
    if host == "i.imgur.com" or host not in ("imgur.com", "m.imgur.com"):
        return url
    return _with_host(parsed, "www.imgur.com")


def normalize_soundcloud(url: str) -> str:
    parsed = _parse(url)
    if parsed is None or _host(parsed) not in ("soundcloud.com", "m.soundcloud.com"):
        return url
    return _with_host(parsed, "www.soundcloud.com")


IMAGE_NORMALIZERS: List[Callable[[str], str]] = [
    normalize_twitter,
    normalize_pixiv,
    normalize_instagram,
    normalize_imgur,
]


def normalize_media_url(url: str, media_type: MediaType) -> str:
    """Canonicalize ``url`` for ``media_type``.

    Videos go through the TikTok or YouTube normalizer, audio through
    SoundCloud, and images through the first normalizer that changes the URL.
    Unparseable URLs are returned stripped but otherwise unchanged.
    """
    url = url.strip()
    if _parse(url) is None:
        return url
    if media_type == MediaType.video:
        if "tiktok.com" in url.lower():
            return normalize_tiktok(url)
        return normalize_youtube(url)
    if media_type == MediaType.audio:
        return normalize_soundcloud(url)
    for normalizer in IMAGE_NORMALIZERS:
        normalized = normalizer(url)
        if normalized != url:
            return normalized
    return url


# =====================================================================
# Validation
# =====================================================================


def _validate_video(parsed) -> None:
    host = _host(parsed)
    if host == "youtu.be":
        if not parsed.path.strip("/"):
            raise MediaUrlError("YouTube short link must include a video id")
        return
    if host in _YOUTUBE_HOSTS:
        if youtube_video_id(urlunparse(parsed)) is None:
            raise MediaUrlError("YouTube URL must include a video id (watch?v= or /embed/)")
        return
    raise MediaUrlError("URL must be from YouTube")


def _validate_image(parsed) -> None:
    host = _host(parsed)
    path = parsed.path or ""
    if host.endswith("deviantart.com"):
        if len(path) <= 1:
            raise MediaUrlError("DeviantArt URL must point to an artwork")
        return
    if host.endswith("pixiv.net"):
        if "/artworks/" not in path and "illust_id=" not in (parsed.query or ""):
            raise MediaUrlError("Pixiv URL must point to an artwork")
        return
    if host in ("twitter.com", "www.twitter.com", "mobile.twitter.com", "x.com", "www.x.com"):
        if len([segment for segment in path.split("/") if segment]) < 3:
            raise MediaUrlError("Twitter/X URL must point to a post")
        return
    if host in ("instagram.com", "www.instagram.com"):
        if not (path.startswith("/p/") or path.startswith("/reel/")):
            raise MediaUrlError("Instagram URL must point to a post or reel")
        return
    if path.lower().endswith(IMAGE_EXTENSIONS):
        return
    raise MediaUrlError("URL must be from DeviantArt, Pixiv, Twitter/X, Instagram or a direct image link")


def validate_media_url(url: str, media_type: MediaType) -> None:
    """Check that ``url`` is acceptable for ``media_type``.

    Raises:
        MediaUrlError: With a human-readable reason
    """
    parsed = _parse(url)
    if parsed is None:
        raise MediaUrlError("URL must be an absolute http(s) URL")
    if media_type == MediaType.video:
        _validate_video(parsed)
    elif media_type == MediaType.image:
        _validate_image(parsed)
    elif len(parsed.path or "") <= 1:
        raise MediaUrlError("Audio URL must point to a track")
