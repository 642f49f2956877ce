"""
I/O models for API requests and responses.

This package contains Pydantic-based I/O schemas that define the contract
between API endpoints and clients. These models are separate from database
entities to allow independent evolution of API contracts.

Modules:
- common: Pagination envelope and plain messages
- users: Accounts, authentication and reading progress
- catalogue: Series, volumes, chapters, arcs, factions and tags
- characters: Characters and faction memberships
- relationships: Directed character relationships
- events / gambles / guides / quotes / media: Content and submissions
- annotations: Reader annotations and their moderation
- translations: Translation rows and coverage statistics
- search: Search results and suggestions
"""

from .common import MessageResponse, Page

__all__ = ["MessageResponse", "Page"]
