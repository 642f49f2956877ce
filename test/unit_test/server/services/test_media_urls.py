"""Unit tests for media URL normalization and validation."""

import pytest

from usogui_db.core.models.domain import MediaType
from usogui_db.server.services.media_urls import (
    MediaUrlError,
    normalize_media_url,
    validate_media_url,
    youtube_video_id,
)


class TestNormalize:
    @pytest.mark.parametrize(
        "url, media_type, expected",
        [
            ("https://youtu.be/abc123", MediaType.video, "https://www.youtube.com/watch?v=abc123"),
            ("https://m.youtube.com/watch?v=abc123&t=5", MediaType.video, "https://www.youtube.com/watch?v=abc123"),
            ("https://www.youtube.com/embed/abc123", MediaType.video, "https://www.youtube.com/watch?v=abc123"),
            ("https://tiktok.com/@fan/video/1", MediaType.video, "https://www.tiktok.com/@fan/video/1"),
            ("https://vm.tiktok.com/ZMabc/", MediaType.video, "https://vm.tiktok.com/ZMabc/"),
            ("https://x.com/fan/status/1", MediaType.image, "https://twitter.com/fan/status/1"),
            ("https://www.pixiv.net/en/artworks/42", MediaType.image, "https://www.pixiv.net/artworks/42"),
            (
                "https://www.pixiv.net/member_illust.php?illust_id=42",
                MediaType.image,
                "https://www.pixiv.net/artworks/42",
            ),
            ("https://instagram.com/p/xyz/", MediaType.image, "https://www.instagram.com/p/xyz/"),
            ("https://imgur.com/gallery/a", MediaType.image, "https://www.imgur.com/gallery/a"),
            ("https://i.imgur.com/a.png", MediaType.image, "https://i.imgur.com/a.png"),
            ("https://soundcloud.com/fan/track", MediaType.audio, "https://www.soundcloud.com/fan/track"),
            ("  https://cdn.usogui-fans.net/a.png  ", MediaType.image, "https://cdn.usogui-fans.net/a.png"),
            ("not a url", MediaType.image, "not a url"),
        ],
    )
    def test_normalize(self, url, media_type, expected):
        assert normalize_media_url(url, media_type) == expected

    def test_youtube_id_missing(self):
        assert youtube_video_id("https://www.youtube.com/watch") is None
        assert youtube_video_id("https://youtu.be/") is None


class TestValidate:
    @pytest.mark.parametrize(
        "url, media_type",
        [
            ("https://www.youtube.com/watch?v=abc", MediaType.video),
            ("https://youtu.be/abc", MediaType.video),
            ("https://www.deviantart.com/fan/art/baku-1", MediaType.image),
            ("https://www.pixiv.net/artworks/42", MediaType.image),
            ("https://twitter.com/fan/status/1", MediaType.image),
            ("https://www.instagram.com/reel/xyz/", MediaType.image),
            ("https://cdn.usogui-fans.net/baku.WEBP", MediaType.image),
            ("https://www.soundcloud.com/fan/track", MediaType.audio),
        ],
    )
    def test_accepts(self, url, media_type):
        validate_media_url(url, media_type)

    @pytest.mark.parametrize(
        "url, media_type, message",
        [
            ("ftp://files.usogui-fans.net/a.png", MediaType.image, "URL must be an absolute http(s) URL"),
            ("https://youtu.be/", MediaType.video, "YouTube short link must include a video id"),
            ("https://www.youtube.com/channel/x", MediaType.video, "YouTube URL must include a video id"),
            ("https://www.deviantart.com/", MediaType.image, "DeviantArt URL must point to an artwork"),
            ("https://www.pixiv.net/users/1", MediaType.image, "Pixiv URL must point to an artwork"),
            ("https://twitter.com/fan", MediaType.image, "Twitter/X URL must point to a post"),
            ("https://soundcloud.com/", MediaType.audio, "Audio URL must point to a track"),
        ],
    )
    def test_rejects(self, url, media_type, message):
        with pytest.raises(MediaUrlError, match=message.replace("(", r"\(").replace(")", r"\)")):
            validate_media_url(url, media_type)
