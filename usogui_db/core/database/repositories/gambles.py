"""
Gamble repository.

Manages gambles together with their participants, teams (with members) and
rounds.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.gambles import Gamble, GambleParticipantLink, GambleRound, GambleTeam, GambleTeamMember
from .base import QueryBuilder, SQLModelRepository
from .links import LinkSet


class GambleRepository(SQLModelRepository[Gamble]):
    """Repository for gambles, their teams and rounds."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Gamble)
        self.participants = LinkSet(session, GambleParticipantLink, "gamble_id", "character_id")

    async def search(
        self,
        *,
        query: Optional[str] = None,
        character_id: Optional[int] = None,
        chapter_id: Optional[int] = None,
        limit: int,
        offset: int,
    ) -> Tuple[List[Gamble], int]:
        """List gambles, filtered by name/rules text, participant and chapter."""
        stmt = select(Gamble).order_by(Gamble.id)
        stmt = QueryBuilder.apply_filters(stmt, Gamble, {"chapter_id": chapter_id})
        stmt = QueryBuilder.apply_search(stmt, [Gamble.name, Gamble.rules, Gamble.description], query)
        if character_id is not None:
            stmt = stmt.join(GambleParticipantLink, GambleParticipantLink.gamble_id == Gamble.id).where(
                GambleParticipantLink.character_id == character_id
            )
        return await self.fetch_page(stmt, limit, offset)

    # ------------------------------------------------------------------
    # Teams
    # ------------------------------------------------------------------

    async def list_teams(self, gamble_id: int) -> List[Tuple[GambleTeam, List[GambleTeamMember]]]:
        """Teams of a gamble with their members, both in display order."""
        result = await self.session.execute(
            select(GambleTeam)
            .where(GambleTeam.gamble_id == gamble_id)
            .order_by(GambleTeam.display_order, GambleTeam.id)
        )
        teams = list(result.scalars().all())
        members = await self._members_by_team([team.id for team in teams])
        return [(team, members.get(team.id, [])) for team in teams]

    async def _members_by_team(self, team_ids: Sequence[int]) -> Dict[int, List[GambleTeamMember]]:
        grouped: Dict[int, List[GambleTeamMember]] = {team_id: [] for team_id in team_ids}
        if not team_ids:
            return grouped
        result = await self.session.execute(
            select(GambleTeamMember)
            .where(GambleTeamMember.team_id.in_(list(team_ids)))
            .order_by(GambleTeamMember.display_order, GambleTeamMember.id)
        )
        for member in result.scalars().all():
            grouped[member.team_id].append(member)
        return grouped

    async def get_team(self, gamble_id: int, team_id: int) -> Optional[GambleTeam]:
        result = await self.session.execute(
            select(GambleTeam).where(GambleTeam.id == team_id, GambleTeam.gamble_id == gamble_id)
        )
        return result.scalars().first()

    async def create_team(
        self, team: GambleTeam, members: Sequence[GambleTeamMember]
    ) -> Tuple[GambleTeam, List[GambleTeamMember]]:
        """Persist a team and its members in one transaction."""
        self.session.add(team)
        await self.session.flush()
        for member in members:
            member.team_id = team.id
            self.session.add(member)
        await self.session.commit()
        await self.session.refresh(team)
        grouped = await self._members_by_team([team.id])
        return team, grouped[team.id]

    async def delete_team(self, team: GambleTeam) -> None:
        result = await self.session.execute(select(GambleTeamMember).where(GambleTeamMember.team_id == team.id))
        for member in result.scalars().all():
            await self.session.delete(member)
        await self.session.delete(team)
        await self.session.commit()

    # ------------------------------------------------------------------
    # Rounds
    # ------------------------------------------------------------------

    async def list_rounds(self, gamble_id: int) -> List[GambleRound]:
        result = await self.session.execute(
            select(GambleRound).where(GambleRound.gamble_id == gamble_id).order_by(GambleRound.round_number)
        )
        return list(result.scalars().all())

    async def get_round_by_number(self, gamble_id: int, round_number: int) -> Optional[GambleRound]:
        result = await self.session.execute(
            select(GambleRound).where(GambleRound.gamble_id == gamble_id, GambleRound.round_number == round_number)
        )
        return result.scalars().first()

    async def create_round(self, round_: GambleRound) -> GambleRound:
        self.session.add(round_)
        await self.session.commit()
        await self.session.refresh(round_)
        return round_
