"""Unit tests for spoiler progress resolution."""

import pytest

from usogui_db.core.database.entities.events import Event
from usogui_db.core.database.entities.users import User
from usogui_db.server.services.spoilers import can_view_event, is_visible, resolve_progress


class TestResolveProgress:
    def test_explicit_value_wins(self):
        user = User(username="kaji", email="kaji@usogui-fans.net", password_hash="x", user_progress=50)
        assert resolve_progress(10, user) == 10

    def test_falls_back_to_user(self):
        user = User(username="kaji", email="kaji@usogui-fans.net", password_hash="x", user_progress=50)
        assert resolve_progress(None, user) == 50

    def test_anonymous_is_ungated(self):
        assert resolve_progress(None, None) is None


class TestVisibility:
    @pytest.mark.parametrize(
        "gating_chapter, progress, expected",
        [(10, 50, True), (50, 50, True), (51, 50, False), (None, 50, True), (400, None, True)],
    )
    def test_is_visible(self, gating_chapter, progress, expected):
        assert is_visible(gating_chapter, progress) is expected

    def test_event_uses_spoiler_chapter_first(self):
        event = Event(title="Reveal", description="-", chapter_number=10, spoiler_chapter=80)
        assert not can_view_event(event, 50)
        event.spoiler_chapter = None
        assert can_view_event(event, 50)
