"""Domain enums shared by entities, I/O schemas and services."""

from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """
    Account role.

    Moderators and admins may mutate the catalogue and moderate submissions;
    only admins manage other accounts.
    """

    user = "user"
    moderator = "moderator"
    admin = "admin"


class EventType(str, Enum):
    """Kind of story event."""

    arc = "arc"
    character_reveal = "character_reveal"
    plot_twist = "plot_twist"
    death = "death"
    backstory = "backstory"
    plot = "plot"
    other = "other"


class GuideStatus(str, Enum):
    """Publication lifecycle of a community guide."""

    draft = "draft"
    pending = "pending"  # Awaiting moderator review.
    published = "published"
    rejected = "rejected"


class MediaType(str, Enum):
    """Kind of linked media."""

    image = "image"
    video = "video"
    audio = "audio"


class MediaStatus(str, Enum):
    """Moderation status of a media submission."""

    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class MediaPurpose(str, Enum):
    """Where a media item is meant to be displayed."""

    gallery = "gallery"
    entity_display = "entity_display"  # Candidate thumbnail for its owner.


class MediaOwnerType(str, Enum):
    """Entity kinds that can own media."""

    character = "character"
    arc = "arc"
    event = "event"
    gamble = "gamble"
    faction = "faction"
    volume = "volume"
    user = "user"
    guide = "guide"


class GambleTeamRole(str, Enum):
    """Role of a character inside a gamble team."""

    leader = "leader"
    member = "member"
    supporter = "supporter"
    observer = "observer"


class Language(str, Enum):
    """Languages translations can be written in."""

    en = "en"
    ja = "ja"


class TranslatableEntity(str, Enum):
    """Entity kinds that carry per-language translation tables."""

    chapter = "chapter"
    character = "character"
    event = "event"
    arc = "arc"
    faction = "faction"
    tag = "tag"
    gamble = "gamble"
    series = "series"


class SearchType(str, Enum):
    """Content types accepted by the search endpoint."""

    all = "all"
    chapters = "chapters"
    characters = "characters"
    events = "events"
    arcs = "arcs"
    gambles = "gambles"
    factions = "factions"


class RelationshipType(str, Enum):
    """How one character relates to another, seen from the source character."""

    ally = "ally"
    rival = "rival"
    mentor = "mentor"
    subordinate = "subordinate"
    family = "family"
    partner = "partner"
    enemy = "enemy"
    acquaintance = "acquaintance"


class AnnotationStatus(str, Enum):
    """Moderation status of a reader annotation."""

    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class AnnotationOwnerType(str, Enum):
    """Entity kinds readers can annotate."""

    character = "character"
    gamble = "gamble"
    arc = "arc"
