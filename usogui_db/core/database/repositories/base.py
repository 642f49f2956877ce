"""
Base repository interfaces and utilities.

This module provides the foundational repository patterns and interfaces
used across all repository implementations in the centralized database layer.
Built with async SQLAlchemy sessions and SQLModel entities.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from ..base import utc_now

# Generic type for SQLModel entities
EntityType = TypeVar("EntityType", bound=SQLModel)


class AsyncBaseRepository(ABC, Generic[EntityType]):
    """Base async repository interface with common CRUD operations using SQLModel."""

    def __init__(self, session: AsyncSession, model: Type[EntityType]) -> None:
        """Initialize repository with async database session and SQLModel entity class.

        Args:
            session: Async SQLModel Session for database operations
            model: SQLModel entity class for this repository
        """
        self.session = session
        self.model = model

    @abstractmethod
    async def create(self, entity: EntityType) -> EntityType:
        """Create a new entity record.

        Args:
            entity: SQLModel instance to persist

        Returns:
            Persisted entity with generated fields populated
        """

    @abstractmethod
    async def get_by_id(self, entity_id: int) -> Optional[EntityType]:
        """Get entity by its primary identifier.

        Args:
            entity_id: Primary key value

        Returns:
            Entity instance or None if not found
        """

    @abstractmethod
    async def update(self, entity: EntityType) -> EntityType:
        """Update an existing entity record.

        Args:
            entity: SQLModel instance with updated fields

        Returns:
            Updated entity instance
        """

    @abstractmethod
    async def delete(self, entity_id: int) -> bool:
        """Delete entity by its primary identifier.

        Args:
            entity_id: Primary key value

        Returns:
            True if deleted, False if not found
        """

    @abstractmethod
    async def list(
        self, limit: Optional[int] = None, offset: Optional[int] = None, filters: Optional[Dict[str, Any]] = None
    ) -> List[EntityType]:
        """List entities with optional pagination and filtering.

        Args:
            limit: Maximum number of records to return
            offset: Number of records to skip
            filters: Dictionary of field filters

        Returns:
            List of entity instances
        """


class QueryBuilder:
    """Utility class for building SQLModel-based database queries."""

    @staticmethod
    def apply_filters(stmt, model: Type[EntityType], filters: Dict[str, Any]):
        """Apply equality filters to a SQLModel select statement.

        Keys that are not attributes of ``model`` and ``None`` values are ignored.

        Args:
            stmt: SQLModel select statement
            model: SQLModel entity class
            filters: Dictionary of field filters

        Returns:
            Modified select statement with filters applied
        """
        for key, value in filters.items():
            if value is not None and hasattr(model, key):
                stmt = stmt.where(getattr(model, key) == value)
        return stmt

    @staticmethod
    def apply_search(stmt, columns: Sequence[Any], term: Optional[str]):
        """Apply a case-insensitive substring match across ``columns``.

        Args:
            stmt: SQLModel select statement
            columns: Columns to match against (OR-ed together)
            term: Search term; blank terms leave the statement untouched

        Returns:
            Modified select statement
        """
        if not term or not term.strip():
            return stmt
        pattern = f"%{term.strip()}%"
        return stmt.where(or_(*(column.ilike(pattern) for column in columns)))

    @staticmethod
    def apply_spoiler_gate(stmt, column, progress: Optional[int]):
        """Hide rows whose gating chapter lies beyond the reader's progress.

        Rows with no gating chapter are always visible; without a progress
        value nothing is hidden.

        Args:
            stmt: SQLModel select statement
            column: Column holding the gating chapter number
            progress: Highest chapter the reader has finished

        Returns:
            Modified select statement
        """
        if progress is None:
            return stmt
        return stmt.where(or_(column.is_(None), column <= progress))

    @staticmethod
    def apply_pagination(stmt, limit: Optional[int], offset: Optional[int]):
        """Apply pagination to a SQLModel select statement.

        Args:
            stmt: SQLModel select statement
            limit: Maximum number of records
            offset: Number of records to skip

        Returns:
            Modified select statement with pagination applied
        """
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset is not None:
            stmt = stmt.offset(offset)
        return stmt


class SQLModelRepository(AsyncBaseRepository[EntityType]):
    """Concrete async CRUD repository shared by every entity repository.

    Subclasses only pass their entity class and add domain queries.
    """

    default_order: Optional[str] = "id"

    async def create(self, entity: EntityType) -> EntityType:
        self.session.add(entity)
        await self.session.commit()
        await self.session.refresh(entity)
        return entity

    async def get_by_id(self, entity_id: int) -> Optional[EntityType]:
        stmt = select(self.model).where(self.model.id == entity_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update(self, entity: EntityType) -> EntityType:
        if hasattr(entity, "updated_at"):
            entity.updated_at = utc_now()
        self.session.add(entity)
        await self.session.commit()
        await self.session.refresh(entity)
        return entity

    async def apply_changes(self, entity: EntityType, changes: Dict[str, Any]) -> EntityType:
        """Set ``changes`` on ``entity`` and persist it.

        Args:
            entity: Loaded entity instance
            changes: Field values, typically ``model_dump(exclude_unset=True)``

        Returns:
            Updated entity instance
        """
        for key, value in changes.items():
            setattr(entity, key, value)
        return await self.update(entity)

    async def delete(self, entity_id: int) -> bool:
        entity = await self.get_by_id(entity_id)
        if entity:
            await self.session.delete(entity)
            await self.session.commit()
            return True
        return False

    async def list(
        self, limit: Optional[int] = None, offset: Optional[int] = None, filters: Optional[Dict[str, Any]] = None
    ) -> List[EntityType]:
        stmt = self._ordered(select(self.model))
        if filters:
            stmt = QueryBuilder.apply_filters(stmt, self.model, filters)
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """Count entities matching equality ``filters``."""
        stmt = select(self.model)
        if filters:
            stmt = QueryBuilder.apply_filters(stmt, self.model, filters)
        return await self.count_statement(stmt)

    async def exists(self, entity_id: int) -> bool:
        stmt = select(self.model.id).where(self.model.id == entity_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def get_many(self, ids: Sequence[int]) -> List[EntityType]:
        """Load the entities whose id is in ``ids``; missing ids are skipped."""
        if not ids:
            return []
        stmt = self._ordered(select(self.model).where(self.model.id.in_(list(ids))))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def missing_ids(self, ids: Sequence[int]) -> List[int]:
        """Return the subset of ``ids`` that has no row."""
        found = {entity.id for entity in await self.get_many(ids)}
        return [entity_id for entity_id in dict.fromkeys(ids) if entity_id not in found]

    async def count_statement(self, stmt) -> int:
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        result = await self.session.execute(count_stmt)
        return int(result.scalar_one())

    async def fetch_page(self, stmt, limit: int, offset: int) -> Tuple[List[Any], int]:
        """Execute ``stmt`` for one page and count the full result set.

        Args:
            stmt: Filtered and ordered select statement
            limit: Page size
            offset: Rows to skip

        Returns:
            Tuple of (page items, total matching rows)
        """
        total = await self.count_statement(stmt)
        result = await self.session.execute(QueryBuilder.apply_pagination(stmt, limit, offset))
        return list(result.scalars().all()), total

    def _ordered(self, stmt):
        if self.default_order and hasattr(self.model, self.default_order):
            stmt = stmt.order_by(getattr(self.model, self.default_order))
        return stmt
