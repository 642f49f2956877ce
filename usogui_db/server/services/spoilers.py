"""
Spoiler gating.

Content past a reader's progress is hidden. The effective progress for a
request is resolved in order:

1. the ``user_progress`` query parameter, when given;
2. the authenticated user's stored progress;
3. no gating at all for anonymous readers who did not pass a value.

The SQL side of the gate is ``QueryBuilder.apply_spoiler_gate``; the helpers
here cover resolution and in-memory checks.
"""

from __future__ import annotations

from typing import Optional

from usogui_db.core.database.entities.events import Event
from usogui_db.core.database.entities.users import User


def resolve_progress(explicit: Optional[int], user: Optional[User]) -> Optional[int]:
    """Return the chapter progress that gates the current request."""
    if explicit is not None:
        return explicit
    if user is not None:
        return user.user_progress
    return None


def is_visible(gating_chapter: Optional[int], progress: Optional[int]) -> bool:
    """True when content gated at ``gating_chapter`` may be shown."""
    if progress is None or gating_chapter is None:
        return True
    return gating_chapter <= progress


def can_view_event(event: Event, progress: Optional[int]) -> bool:
    """True when ``event`` is visible to a reader at ``progress``."""
    return is_visible(event.gating_chapter, progress)
