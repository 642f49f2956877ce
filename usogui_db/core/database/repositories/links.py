"""
Join-table helpers.

Many-to-many links (event characters, guide tags, gamble participants, ...)
are plain two-column tables. ``LinkSet`` reads and replaces the set of ids
linked to one owner row.
"""

from __future__ import annotations

from typing import Dict, List, Sequence, Type

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select


class LinkSet:
    """Accessor for one side of a join table.

    Args:
        session: Async database session
        model: Join table entity
        owner_key: Column naming the owner row (e.g. ``event_id``)
        target_key: Column naming the linked row (e.g. ``character_id``)
    """

    def __init__(self, session: AsyncSession, model: Type[SQLModel], owner_key: str, target_key: str) -> None:
        self.session = session
        self.model = model
        self.owner_column = getattr(model, owner_key)
        self.target_column = getattr(model, target_key)
        self.owner_key = owner_key
        self.target_key = target_key

    async def get(self, owner_id: int) -> List[int]:
        stmt = select(self.target_column).where(self.owner_column == owner_id).order_by(self.target_column)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_many(self, owner_ids: Sequence[int]) -> Dict[int, List[int]]:
        """Linked ids for several owners at once, keyed by owner id."""
        links: Dict[int, List[int]] = {owner_id: [] for owner_id in owner_ids}
        if not owner_ids:
            return links
        stmt = (
            select(self.owner_column, self.target_column)
            .where(self.owner_column.in_(list(owner_ids)))
            .order_by(self.target_column)
        )
        result = await self.session.execute(stmt)
        for owner_id, target_id in result.all():
            links[owner_id].append(target_id)
        return links

    async def replace(self, owner_id: int, target_ids: Sequence[int], *, commit: bool = True) -> List[int]:
        """Replace the linked ids of ``owner_id`` with ``target_ids`` (duplicates dropped)."""
        unique_ids = list(dict.fromkeys(target_ids))
        await self.session.execute(delete(self.model).where(self.owner_column == owner_id))
        for target_id in unique_ids:
            self.session.add(self.model(**{self.owner_key: owner_id, self.target_key: target_id}))
        if commit:
            await self.session.commit()
        return unique_ids
