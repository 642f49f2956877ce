"""
Community guide entity models.

Guides move through a moderation workflow (pending → published/rejected) and
keep a denormalized ``like_count`` that mirrors the rows in ``guide_likes``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from usogui_db.core.models.domain import GuideStatus

from ..base import Base, utc_now


class GuideBase(Base):
    """Base fields for a guide."""

    title: str = Field(max_length=255, index=True)
    description: str = Field(max_length=1000)
    content: str = Field(description="Guide body (Markdown)")
    arc_id: Optional[int] = Field(default=None, foreign_key="arcs.id", ondelete="SET NULL")


class Guide(GuideBase, table=True):
    """A user-written guide.

    Table: guides
    """

    __tablename__ = "guides"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    status: GuideStatus = Field(default=GuideStatus.pending, index=True)
    view_count: int = Field(default=0)
    like_count: int = Field(default=0)
    author_id: int = Field(foreign_key="users.id", ondelete="CASCADE", index=True)
    rejection_reason: Optional[str] = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})


class GuideLike(Base, table=True):
    """A user's like on a guide.

    Table: guide_likes
    """

    __tablename__ = "guide_likes"
    __table_args__ = (
        UniqueConstraint("user_id", "guide_id", name="uq_guide_likes_user_guide"),
        {"extend_existing": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", ondelete="CASCADE")
    guide_id: int = Field(foreign_key="guides.id", ondelete="CASCADE", index=True)
    created_at: datetime = Field(default_factory=utc_now)


class GuideTagLink(Base, table=True):
    """Tags attached to a guide.

    Table: guide_tags
    """

    __tablename__ = "guide_tags"
    __table_args__ = ({"extend_existing": True},)

    guide_id: int = Field(foreign_key="guides.id", ondelete="CASCADE", primary_key=True)
    tag_id: int = Field(foreign_key="tags.id", ondelete="CASCADE", primary_key=True)


class GuideCharacterLink(Base, table=True):
    """Characters a guide is about.

    Table: guide_characters
    """

    __tablename__ = "guide_characters"
    __table_args__ = ({"extend_existing": True},)

    guide_id: int = Field(foreign_key="guides.id", ondelete="CASCADE", primary_key=True)
    character_id: int = Field(foreign_key="characters.id", ondelete="CASCADE", primary_key=True)


class GuideGambleLink(Base, table=True):
    """Gambles a guide covers.

    Table: guide_gambles
    """

    __tablename__ = "guide_gambles"
    __table_args__ = ({"extend_existing": True},)

    guide_id: int = Field(foreign_key="guides.id", ondelete="CASCADE", primary_key=True)
    gamble_id: int = Field(foreign_key="gambles.id", ondelete="CASCADE", primary_key=True)
