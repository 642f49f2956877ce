"""Initial schema and seed data for Usogui DB

Revision ID: 20261019_000000
Revises: None
Create Date: 2026-10-19 00:00:00.000000

Creates every table of the fan database and seeds the default data:
- Accounts (users)
- Catalogue (series, volumes, chapters, arcs, tags)
- Cast (characters, factions, character_factions)
- Story (events, gambles with participants/teams/rounds)
- Community content (guides with likes and links, quotes, media)
- One translation table per translatable entity
- The Usogui series and the default guide tags

Revision format: YYYYMMDD_HHMMSS_description

"""

from datetime import datetime, timezone
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261019_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum("user", "moderator", "admin", name="userrole")
event_type = sa.Enum(
    "arc", "character_reveal", "plot_twist", "death", "backstory", "plot", "other", name="eventtype"
)
guide_status = sa.Enum("draft", "pending", "published", "rejected", name="guidestatus")
media_type = sa.Enum("image", "video", "audio", name="mediatype")
media_status = sa.Enum("pending", "approved", "rejected", name="mediastatus")
media_purpose = sa.Enum("gallery", "entity_display", name="mediapurpose")
media_owner_type = sa.Enum(
    "character", "arc", "event", "gamble", "faction", "volume", "user", "guide", name="mediaownertype"
)
gamble_team_role = sa.Enum("leader", "member", "supporter", "observer", name="gambleteamrole")
language = sa.Enum("en", "ja", name="language")

ENUM_TYPES = (
    user_role,
    event_type,
    guide_status,
    media_type,
    media_status,
    media_purpose,
    media_owner_type,
    gamble_team_role,
    language,
)

# (table, parent table, translated columns)
TRANSLATION_TABLES = (
    ("chapter_translations", "chapters", (("title", sa.String(255)), ("summary", sa.Text()))),
    ("character_translations", "characters", (("name", sa.String(255)), ("description", sa.Text()))),
    ("arc_translations", "arcs", (("name", sa.String(255)), ("description", sa.Text()))),
    ("faction_translations", "factions", (("name", sa.String(255)), ("description", sa.Text()))),
    ("series_translations", "series", (("name", sa.String(255)), ("description", sa.Text()))),
    ("event_translations", "events", (("title", sa.String(255)), ("description", sa.Text()))),
    ("tag_translations", "tags", (("name", sa.String(50)),)),
    (
        "gamble_translations",
        "gambles",
        (("name", sa.String(255)), ("rules", sa.Text()), ("win_condition", sa.Text())),
    ),
)


def _timestamps(updated: bool = True) -> list:
    columns = [sa.Column("created_at", sa.DateTime(), nullable=False)]
    if updated:
        columns.append(sa.Column("updated_at", sa.DateTime(), nullable=False))
    return columns


def upgrade() -> None:
    """Create all tables and seed initial data."""

    # Accounts
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("role", user_role, nullable=False),
        sa.Column("is_email_verified", sa.Boolean(), nullable=False),
        sa.Column("user_progress", sa.Integer(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("email_verification_token", sa.String(), nullable=True),
        sa.Column("password_reset_token", sa.String(), nullable=True),
        sa.Column("password_reset_expires", sa.DateTime(), nullable=True),
        sa.Column("refresh_token", sa.String(), nullable=True),
        sa.Column("refresh_token_expires_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_email_verification_token", "users", ["email_verification_token"])
    op.create_index("ix_users_password_reset_token", "users", ["password_reset_token"])
    op.create_index("ix_users_refresh_token", "users", ["refresh_token"])

    # Catalogue
    op.create_table(
        "series",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_table(
        "volumes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("number", sa.Integer(), nullable=False),
        sa.Column("start_chapter", sa.Integer(), nullable=False),
        sa.Column("end_chapter", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("end_chapter >= start_chapter", name="ck_volumes_chapter_range"),
    )
    op.create_index("ix_volumes_number", "volumes", ["number"], unique=True)
    op.create_table(
        "chapters",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("number", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("volume_id", sa.Integer(), nullable=True),
        sa.Column("series_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["volume_id"], ["volumes.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["series_id"], ["series.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_chapters_number", "chapters", ["number"], unique=True)
    op.create_index("ix_chapters_volume_id", "chapters", ["volume_id"])
    op.create_table(
        "arcs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_chapter", sa.Integer(), nullable=True),
        sa.Column("end_chapter", sa.Integer(), nullable=True),
        sa.Column("series_id", sa.Integer(), nullable=True),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["series_id"], ["series.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["parent_id"], ["arcs.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_arcs_name", "arcs", ["name"])
    op.create_table(
        "tags",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tags_name", "tags", ["name"], unique=True)

    # Cast
    op.create_table(
        "characters",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("first_appearance_chapter", sa.Integer(), nullable=True),
        sa.Column("occupation", sa.String(255), nullable=True),
        sa.Column("alternate_names", sa.JSON(), nullable=False),
        sa.Column("notable_roles", sa.JSON(), nullable=False),
        sa.Column("notable_games", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_characters_name", "characters", ["name"])
    op.create_table(
        "factions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_factions_name", "factions", ["name"], unique=True)
    op.create_table(
        "character_factions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("character_id", sa.Integer(), nullable=False),
        sa.Column("faction_id", sa.Integer(), nullable=False),
        sa.Column("role", sa.String(255), nullable=True),
        sa.Column("start_chapter", sa.Integer(), nullable=True),
        sa.Column("end_chapter", sa.Integer(), nullable=True),
        sa.Column("spoiler_chapter", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["character_id"], ["characters.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["faction_id"], ["factions.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("character_id", "faction_id", name="uq_character_factions_pair"),
    )
    op.create_index("ix_character_factions_character_id", "character_factions", ["character_id"])
    op.create_index("ix_character_factions_faction_id", "character_factions", ["faction_id"])

    # Gambles
    op.create_table(
        "gambles",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("rules", sa.Text(), nullable=False),
        sa.Column("win_condition", sa.Text(), nullable=True),
        sa.Column("explanation", sa.Text(), nullable=True),
        sa.Column("chapter_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["chapter_id"], ["chapters.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_gambles_name", "gambles", ["name"])
    op.create_table(
        "gamble_participants",
        sa.Column("gamble_id", sa.Integer(), nullable=False),
        sa.Column("character_id", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("gamble_id", "character_id"),
        sa.ForeignKeyConstraint(["gamble_id"], ["gambles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["character_id"], ["characters.id"], ondelete="CASCADE"),
    )
    op.create_table(
        "gamble_teams",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("gamble_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("supported_gambler_id", sa.Integer(), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["gamble_id"], ["gambles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["supported_gambler_id"], ["characters.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_gamble_teams_gamble_id", "gamble_teams", ["gamble_id"])
    op.create_table(
        "gamble_team_members",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("team_id", sa.Integer(), nullable=False),
        sa.Column("character_id", sa.Integer(), nullable=False),
        sa.Column("role", gamble_team_role, nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["team_id"], ["gamble_teams.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["character_id"], ["characters.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("team_id", "character_id", name="uq_gamble_team_members_pair"),
    )
    op.create_index("ix_gamble_team_members_team_id", "gamble_team_members", ["team_id"])
    op.create_table(
        "gamble_rounds",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("gamble_id", sa.Integer(), nullable=False),
        sa.Column("round_number", sa.Integer(), nullable=False),
        sa.Column("winner_team_id", sa.Integer(), nullable=True),
        sa.Column("outcome", sa.Text(), nullable=True),
        sa.Column("reward", sa.Text(), nullable=True),
        sa.Column("penalty", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["gamble_id"], ["gambles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["winner_team_id"], ["gamble_teams.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("gamble_id", "round_number", name="uq_gamble_rounds_number"),
    )
    op.create_index("ix_gamble_rounds_gamble_id", "gamble_rounds", ["gamble_id"])

    # Events
    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("type", event_type, nullable=False),
        sa.Column("chapter_number", sa.Integer(), nullable=False),
        sa.Column("spoiler_chapter", sa.Integer(), nullable=True),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.Column("arc_id", sa.Integer(), nullable=True),
        sa.Column("gamble_id", sa.Integer(), nullable=True),
        sa.Column("created_by_id", sa.Integer(), nullable=True),
        sa.Column("page_numbers", sa.JSON(), nullable=False),
        sa.Column("chapter_references", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["arc_id"], ["arcs.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["gamble_id"], ["gambles.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_events_title", "events", ["title"])
    op.create_index("ix_events_chapter_number", "events", ["chapter_number"])
    op.create_index("ix_events_arc_id", "events", ["arc_id"])
    op.create_index("ix_events_gamble_id", "events", ["gamble_id"])
    op.create_table(
        "event_characters",
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("character_id", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("event_id", "character_id"),
        sa.ForeignKeyConstraint(["event_id"], ["events.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["character_id"], ["characters.id"], ondelete="CASCADE"),
    )
    op.create_table(
        "event_tags",
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("tag_id", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("event_id", "tag_id"),
        sa.ForeignKeyConstraint(["event_id"], ["events.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tag_id"], ["tags.id"], ondelete="CASCADE"),
    )

    # Community content
    op.create_table(
        "guides",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.String(1000), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("arc_id", sa.Integer(), nullable=True),
        sa.Column("status", guide_status, nullable=False),
        sa.Column("view_count", sa.Integer(), nullable=False),
        sa.Column("like_count", sa.Integer(), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.Column("rejection_reason", sa.String(500), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["arc_id"], ["arcs.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_guides_title", "guides", ["title"])
    op.create_index("ix_guides_status", "guides", ["status"])
    op.create_index("ix_guides_author_id", "guides", ["author_id"])
    op.create_table(
        "guide_likes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("guide_id", sa.Integer(), nullable=False),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["guide_id"], ["guides.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "guide_id", name="uq_guide_likes_user_guide"),
    )
    op.create_index("ix_guide_likes_guide_id", "guide_likes", ["guide_id"])
    for table, column, target in (
        ("guide_tags", "tag_id", "tags"),
        ("guide_characters", "character_id", "characters"),
        ("guide_gambles", "gamble_id", "gambles"),
    ):
        op.create_table(
            table,
            sa.Column("guide_id", sa.Integer(), nullable=False),
            sa.Column(column, sa.Integer(), nullable=False),
            sa.PrimaryKeyConstraint("guide_id", column),
            sa.ForeignKeyConstraint(["guide_id"], ["guides.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint([column], [f"{target}.id"], ondelete="CASCADE"),
        )
    op.create_table(
        "quotes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("chapter_number", sa.Integer(), nullable=False),
        sa.Column("page_number", sa.Integer(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("character_id", sa.Integer(), nullable=False),
        sa.Column("submitted_by_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["character_id"], ["characters.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["submitted_by_id"], ["users.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_quotes_chapter_number", "quotes", ["chapter_number"])
    op.create_index("ix_quotes_character_id", "quotes", ["character_id"])
    op.create_table(
        "media",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("url", sa.String(2000), nullable=False),
        sa.Column("type", media_type, nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("owner_type", media_owner_type, nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("chapter_number", sa.Integer(), nullable=True),
        sa.Column("purpose", media_purpose, nullable=False),
        sa.Column("status", media_status, nullable=False),
        sa.Column("rejection_reason", sa.String(500), nullable=True),
        sa.Column("submitted_by_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["submitted_by_id"], ["users.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("url"),
    )
    op.create_index("ix_media_status", "media", ["status"])
    op.create_index("ix_media_owner", "media", ["owner_type", "owner_id"])

    # Translations
    for table, parent, columns in TRANSLATION_TABLES:
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("entity_id", sa.Integer(), nullable=False),
            sa.Column("language", language, nullable=False),
            *(sa.Column(name, type_, nullable=True) for name, type_ in columns),
            *_timestamps(),
            sa.PrimaryKeyConstraint("id"),
            sa.ForeignKeyConstraint(["entity_id"], [f"{parent}.id"], ondelete="CASCADE"),
            sa.UniqueConstraint("entity_id", "language", name=f"uq_{table}_entity_language"),
        )
        op.create_index(f"ix_{table}_entity_id", table, ["entity_id"])

    # Seed the series and the default guide tags
    now = datetime.now(timezone.utc).replace(tzinfo=None)

    series_table = sa.table(
        "series",
        sa.column("name", sa.String),
        sa.column("order", sa.Integer),
        sa.column("description", sa.Text),
        sa.column("created_at", sa.DateTime),
        sa.column("updated_at", sa.DateTime),
    )
    op.bulk_insert(
        series_table,
        [
            {
                "name": "Usogui",
                "order": 1,
                "description": "In a world where gambling is life...",
                "created_at": now,
                "updated_at": now,
            }
        ],
    )

    tags_table = sa.table(
        "tags",
        sa.column("name", sa.String),
        sa.column("description", sa.Text),
        sa.column("created_at", sa.DateTime),
    )
    op.bulk_insert(
        tags_table,
        [
            {
                "name": "Gamble Breakdown",
                "description": "Analysis of gambling mechanics, rules, and strategies",
                "created_at": now,
            },
            {
                "name": "Character Study",
                "description": "Deep dives into character psychology and motivations",
                "created_at": now,
            },
            {
                "name": "Plot Analysis",
                "description": "Story structure, arcs, foreshadowing, and twists",
                "created_at": now,
            },
        ],
    )


def downgrade() -> None:
    """Drop all tables created in upgrade."""
    for table, _, _ in reversed(TRANSLATION_TABLES):
        op.drop_table(table)
    op.drop_table("media")
    op.drop_table("quotes")
    op.drop_table("guide_gambles")
    op.drop_table("guide_characters")
    op.drop_table("guide_tags")
    op.drop_table("guide_likes")
    op.drop_table("guides")
    op.drop_table("event_tags")
    op.drop_table("event_characters")
    op.drop_table("events")
    op.drop_table("gamble_rounds")
    op.drop_table("gamble_team_members")
    op.drop_table("gamble_teams")
    op.drop_table("gamble_participants")
    op.drop_table("gambles")
    op.drop_table("character_factions")
    op.drop_table("factions")
    op.drop_table("characters")
    op.drop_table("tags")
    op.drop_table("arcs")
    op.drop_table("chapters")
    op.drop_table("volumes")
    op.drop_table("series")
    op.drop_table("users")

    # Drop the enum types
    bind = op.get_bind()
    for enum_type in ENUM_TYPES:
        enum_type.drop(bind, checkfirst=True)
