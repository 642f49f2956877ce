"""
Repository layer for centralized database access.

Each repository wraps an ``AsyncSession`` and one entity class. Shared CRUD
behaviour lives in ``base.SQLModelRepository``; the modules add the domain
queries used by the API.
"""

from .annotations import AnnotationRepository
from .arcs import ArcRepository
from .base import AsyncBaseRepository, QueryBuilder, SQLModelRepository
from .catalogue import ChapterRepository, SeriesRepository, TagRepository, VolumeRepository
from .characters import CharacterRepository
from .events import EventRepository
from .factions import FactionRepository
from .gambles import GambleRepository
from .guides import GuideRepository
from .links import LinkSet
from .media import MediaRepository
from .quotes import QuoteRepository
from .relationships import RelationshipRepository
from .translations import TranslationRepository
from .users import UserRepository

__all__ = [
    "AnnotationRepository",
    "ArcRepository",
    "AsyncBaseRepository",
    "ChapterRepository",
    "CharacterRepository",
    "EventRepository",
    "FactionRepository",
    "GambleRepository",
    "GuideRepository",
    "LinkSet",
    "MediaRepository",
    "QueryBuilder",
    "QuoteRepository",
    "RelationshipRepository",
    "SQLModelRepository",
    "SeriesRepository",
    "TagRepository",
    "TranslationRepository",
    "UserRepository",
]
