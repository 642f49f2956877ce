"""Gamble I/O models: gambles, teams, team members and rounds."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from usogui_db.core.models.domain import GambleTeamRole


class GambleRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    rules: str
    win_condition: Optional[str] = None
    explanation: Optional[str] = None
    chapter_id: Optional[int] = None
    participant_ids: List[int] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class GambleCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    rules: str = Field(min_length=1)
    win_condition: Optional[str] = None
    explanation: Optional[str] = None
    chapter_id: Optional[int] = None
    participant_ids: List[int] = Field(default_factory=list)


class GambleUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    rules: Optional[str] = None
    win_condition: Optional[str] = None
    explanation: Optional[str] = None
    chapter_id: Optional[int] = None
    participant_ids: Optional[List[int]] = None


class TeamMemberCreate(BaseModel):
    character_id: int
    role: GambleTeamRole = GambleTeamRole.member
    display_order: int = 0


class TeamMemberRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    character_id: int
    role: GambleTeamRole
    display_order: int


class TeamCreate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=255)
    supported_gambler_id: Optional[int] = None
    display_order: int = 0
    members: List[TeamMemberCreate] = Field(default_factory=list)


class TeamRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    gamble_id: int
    name: Optional[str] = None
    supported_gambler_id: Optional[int] = None
    display_order: int
    members: List[TeamMemberRead] = Field(default_factory=list)


class RoundCreate(BaseModel):
    round_number: int = Field(ge=1)
    winner_team_id: Optional[int] = None
    outcome: Optional[str] = None
    reward: Optional[str] = None
    penalty: Optional[str] = None


class RoundRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    gamble_id: int
    round_number: int
    winner_team_id: Optional[int] = None
    outcome: Optional[str] = None
    reward: Optional[str] = None
    penalty: Optional[str] = None


class GambleDetail(GambleRead):
    """A gamble with its teams and rounds."""

    teams: List[TeamRead] = Field(default_factory=list)
    rounds: List[RoundRead] = Field(default_factory=list)
