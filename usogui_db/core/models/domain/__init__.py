"""Domain models and enums for the Usogui DB core package.

These types are shared between the SQLModel entities, the API I/O schemas and
the service layer so that every layer agrees on the same vocabulary.
"""

from .enums import (
    AnnotationOwnerType,
    AnnotationStatus,
    EventType,
    GambleTeamRole,
    GuideStatus,
    Language,
    MediaOwnerType,
    MediaPurpose,
    MediaStatus,
    MediaType,
    RelationshipType,
    SearchType,
    TranslatableEntity,
    UserRole,
)

__all__ = [
    "AnnotationOwnerType",
    "AnnotationStatus",
    "EventType",
    "GambleTeamRole",
    "GuideStatus",
    "Language",
    "MediaOwnerType",
    "MediaPurpose",
    "MediaStatus",
    "MediaType",
    "RelationshipType",
    "SearchType",
    "TranslatableEntity",
    "UserRole",
]
