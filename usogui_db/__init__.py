"""Usogui DB.

This package implements the backend of a fan-maintained database for the
Usogui manga: characters, arcs, chapters, gambles, events, factions, quotes,
guides and media, together with the accounts that contribute them.

High-level architecture
-----------------------

- ``usogui_db.core``:

  - SQLModel entities and async repositories for every table.
  - Pydantic I/O schemas shared by the API layer.
  - Logging and optional Logfire monitoring.

- ``usogui_db.server``:

  - The FastAPI application, its routers and dependencies.
  - Service helpers for authentication, spoiler gating, translations,
    search and media URL handling.

Typical workflow
----------------

1. Readers browse public endpoints, optionally passing their reading progress
   so spoilers past that chapter stay hidden.
2. Registered users submit guides, quotes and media.
3. Moderators approve or reject submissions and maintain the catalogue.
"""
