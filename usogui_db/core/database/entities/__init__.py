"""
Database entity models.

This package contains all database entity models organized by business domain.
Each module represents either:

1. A single database table and its related logic
2. A business domain that spans multiple related tables

Modules:
- users: Accounts, credentials and reading progress
- series / volumes / chapters / arcs: Publication structure
- characters / factions: Cast and faction memberships
- relationships: Directed character relationships
- events: Story events and their character/tag links
- gambles: Gambles with participants, teams and rounds
- guides: Community guides, likes and their links
- quotes: Character quotes
- media: Moderated external media
- annotations: Moderated reader annotations
- tags: Free-form labels
- translations: Per-entity translation tables
"""

from . import (
    annotations,
    arcs,
    chapters,
    characters,
    events,
    factions,
    gambles,
    guides,
    media,
    quotes,
    relationships,
    series,
    tags,
    translations,
    users,
    volumes,
)

__all__ = [
    "annotations",
    "arcs",
    "chapters",
    "characters",
    "events",
    "factions",
    "gambles",
    "guides",
    "media",
    "quotes",
    "relationships",
    "series",
    "tags",
    "translations",
    "users",
    "volumes",
]
