"""
Translation entity models.

Each translatable entity has its own translation table. Every row holds the
translated text fields of one entity in one language and is unique on
``(entity_id, language)``. ``TRANSLATION_TABLES`` maps the entity kind to its
table, the parent table and the translated field names.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional, Tuple, Type

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from usogui_db.core.models.domain import Language, TranslatableEntity

from ..base import Base, utc_now
from .arcs import Arc
from .chapters import Chapter
from .characters import Character
from .events import Event
from .factions import Faction
from .gambles import Gamble
from .series import Series
from .tags import Tag


class TranslationBase(Base):
    """Columns shared by every translation table."""

    id: Optional[int] = Field(default=None, primary_key=True)
    language: Language = Field(description="Language of the translated text")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})


def _unique_per_language(table: str) -> tuple:
    return (
        UniqueConstraint("entity_id", "language", name=f"uq_{table}_entity_language"),
        {"extend_existing": True},
    )


class ChapterTranslation(TranslationBase, table=True):
    """Table: chapter_translations"""

    __tablename__ = "chapter_translations"
    __table_args__ = _unique_per_language("chapter_translations")

    entity_id: int = Field(foreign_key="chapters.id", ondelete="CASCADE", index=True)
    title: Optional[str] = Field(default=None, max_length=255)
    summary: Optional[str] = Field(default=None)


class CharacterTranslation(TranslationBase, table=True):
    """Table: character_translations"""

    __tablename__ = "character_translations"
    __table_args__ = _unique_per_language("character_translations")

    entity_id: int = Field(foreign_key="characters.id", ondelete="CASCADE", index=True)
    name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None)


class ArcTranslation(TranslationBase, table=True):
    """Table: arc_translations"""

    __tablename__ = "arc_translations"
    __table_args__ = _unique_per_language("arc_translations")

    entity_id: int = Field(foreign_key="arcs.id", ondelete="CASCADE", index=True)
    name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None)


class FactionTranslation(TranslationBase, table=True):
    """Table: faction_translations"""

    __tablename__ = "faction_translations"
    __table_args__ = _unique_per_language("faction_translations")

    entity_id: int = Field(foreign_key="factions.id", ondelete="CASCADE", index=True)
    name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None)


class SeriesTranslation(TranslationBase, table=True):
    """Table: series_translations"""

    __tablename__ = "series_translations"
    __table_args__ = _unique_per_language("series_translations")

    entity_id: int = Field(foreign_key="series.id", ondelete="CASCADE", index=True)
    name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None)


class EventTranslation(TranslationBase, table=True):
    """Table: event_translations"""

    __tablename__ = "event_translations"
    __table_args__ = _unique_per_language("event_translations")

    entity_id: int = Field(foreign_key="events.id", ondelete="CASCADE", index=True)
    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None)


class TagTranslation(TranslationBase, table=True):
    """Table: tag_translations"""

    __tablename__ = "tag_translations"
    __table_args__ = _unique_per_language("tag_translations")

    entity_id: int = Field(foreign_key="tags.id", ondelete="CASCADE", index=True)
    name: Optional[str] = Field(default=None, max_length=50)


class GambleTranslation(TranslationBase, table=True):
    """Table: gamble_translations"""

    __tablename__ = "gamble_translations"
    __table_args__ = _unique_per_language("gamble_translations")

    entity_id: int = Field(foreign_key="gambles.id", ondelete="CASCADE", index=True)
    name: Optional[str] = Field(default=None, max_length=255)
    rules: Optional[str] = Field(default=None)
    win_condition: Optional[str] = Field(default=None)


@dataclass(frozen=True)
class TranslationTable:
    """Binding between an entity kind, its table and its translation table."""

    model: Type[TranslationBase]
    parent: Type[Base]
    fields: Tuple[str, ...]


TRANSLATION_TABLES: Dict[TranslatableEntity, TranslationTable] = {
    TranslatableEntity.chapter: TranslationTable(ChapterTranslation, Chapter, ("title", "summary")),
    TranslatableEntity.character: TranslationTable(CharacterTranslation, Character, ("name", "description")),
    TranslatableEntity.arc: TranslationTable(ArcTranslation, Arc, ("name", "description")),
    TranslatableEntity.faction: TranslationTable(FactionTranslation, Faction, ("name", "description")),
    TranslatableEntity.series: TranslationTable(SeriesTranslation, Series, ("name", "description")),
    TranslatableEntity.event: TranslationTable(EventTranslation, Event, ("title", "description")),
    TranslatableEntity.tag: TranslationTable(TagTranslation, Tag, ("name",)),
    TranslatableEntity.gamble: TranslationTable(GambleTranslation, Gamble, ("name", "rules", "win_condition")),
}
