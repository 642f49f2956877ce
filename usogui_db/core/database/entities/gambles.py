"""
Gamble entity models.

This module contains the gamble table and its satellites:

- ``gamble_participants``: characters taking part in the gamble
- ``gamble_teams`` / ``gamble_team_members``: the sides of the gamble
- ``gamble_rounds``: per-round outcomes
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from usogui_db.core.models.domain import GambleTeamRole

from ..base import Base, utc_now


class GambleBase(Base):
    """Base fields for a gamble."""

    name: str = Field(max_length=255, index=True)
    description: Optional[str] = Field(default=None)
    rules: str = Field(description="Rules of the gamble")
    win_condition: Optional[str] = Field(default=None)
    explanation: Optional[str] = Field(default=None, description="How the gamble was actually won")
    chapter_id: Optional[int] = Field(
        default=None, foreign_key="chapters.id", ondelete="SET NULL", description="Chapter where the gamble starts"
    )


class Gamble(GambleBase, table=True):
    """A gamble played in the story.

    Table: gambles
    """

    __tablename__ = "gambles"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})


class GambleParticipantLink(Base, table=True):
    """Characters participating in a gamble.

    Table: gamble_participants
    """

    __tablename__ = "gamble_participants"
    __table_args__ = ({"extend_existing": True},)

    gamble_id: int = Field(foreign_key="gambles.id", ondelete="CASCADE", primary_key=True)
    character_id: int = Field(foreign_key="characters.id", ondelete="CASCADE", primary_key=True)


class GambleTeam(Base, table=True):
    """A side in a gamble, optionally backing a specific gambler.

    Table: gamble_teams
    """

    __tablename__ = "gamble_teams"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    gamble_id: int = Field(foreign_key="gambles.id", ondelete="CASCADE", index=True)
    name: Optional[str] = Field(default=None, max_length=255)
    supported_gambler_id: Optional[int] = Field(default=None, foreign_key="characters.id", ondelete="SET NULL")
    display_order: int = Field(default=0)


class GambleTeamMember(Base, table=True):
    """A character's place in a gamble team.

    Table: gamble_team_members
    """

    __tablename__ = "gamble_team_members"
    __table_args__ = (
        UniqueConstraint("team_id", "character_id", name="uq_gamble_team_members_pair"),
        {"extend_existing": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    team_id: int = Field(foreign_key="gamble_teams.id", ondelete="CASCADE", index=True)
    character_id: int = Field(foreign_key="characters.id", ondelete="CASCADE")
    role: GambleTeamRole = Field(default=GambleTeamRole.member)
    display_order: int = Field(default=0)


class GambleRound(Base, table=True):
    """Outcome of one round of a gamble.

    Table: gamble_rounds
    """

    __tablename__ = "gamble_rounds"
    __table_args__ = (
        UniqueConstraint("gamble_id", "round_number", name="uq_gamble_rounds_number"),
        {"extend_existing": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    gamble_id: int = Field(foreign_key="gambles.id", ondelete="CASCADE", index=True)
    round_number: int = Field(ge=1)
    winner_team_id: Optional[int] = Field(default=None, foreign_key="gamble_teams.id", ondelete="SET NULL")
    outcome: Optional[str] = Field(default=None)
    reward: Optional[str] = Field(default=None)
    penalty: Optional[str] = Field(default=None)
