"""Character relationships and reader annotations

Revision ID: 20261019_120000
Revises: 20261019_000000
Create Date: 2026-10-19 12:00:00.000000

Adds:
- character_relationships: directed, spoiler-gated links between characters
- annotations: moderated reader notes on characters, gambles and arcs

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261019_120000"
down_revision: Union[str, None] = "20261019_000000"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

relationship_type = sa.Enum(
    "ally",
    "rival",
    "mentor",
    "subordinate",
    "family",
    "partner",
    "enemy",
    "acquaintance",
    name="relationshiptype",
)
annotation_status = sa.Enum("pending", "approved", "rejected", name="annotationstatus")
annotation_owner_type = sa.Enum("character", "gamble", "arc", name="annotationownertype")

ENUM_TYPES = (relationship_type, annotation_status, annotation_owner_type)


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    """Create the relationship and annotation tables."""
    op.create_table(
        "character_relationships",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("source_character_id", sa.Integer(), nullable=False),
        sa.Column("target_character_id", sa.Integer(), nullable=False),
        sa.Column("relationship_type", relationship_type, nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_chapter", sa.Integer(), nullable=False),
        sa.Column("end_chapter", sa.Integer(), nullable=True),
        sa.Column("spoiler_chapter", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["source_character_id"], ["characters.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["target_character_id"], ["characters.id"], ondelete="CASCADE"),
        sa.UniqueConstraint(
            "source_character_id",
            "target_character_id",
            "start_chapter",
            name="uq_character_relationships_pair_start",
        ),
    )
    op.create_index(
        "ix_character_relationships_source_character_id", "character_relationships", ["source_character_id"]
    )
    op.create_index(
        "ix_character_relationships_target_character_id", "character_relationships", ["target_character_id"]
    )
    op.create_index("ix_character_relationships_spoiler_chapter", "character_relationships", ["spoiler_chapter"])

    op.create_table(
        "annotations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("owner_type", annotation_owner_type, nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("source_url", sa.String(2000), nullable=True),
        sa.Column("chapter_reference", sa.Integer(), nullable=True),
        sa.Column("is_spoiler", sa.Boolean(), nullable=False),
        sa.Column("spoiler_chapter", sa.Integer(), nullable=True),
        sa.Column("status", annotation_status, nullable=False),
        sa.Column("rejection_reason", sa.String(500), nullable=True),
        sa.Column("author_id", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_annotations_owner", "annotations", ["owner_type", "owner_id"])
    op.create_index("ix_annotations_status", "annotations", ["status"])
    op.create_index("ix_annotations_chapter_reference", "annotations", ["chapter_reference"])
    op.create_index("ix_annotations_author_id", "annotations", ["author_id"])


def downgrade() -> None:
    """Drop the tables and enum types created in upgrade."""
    op.drop_table("annotations")
    op.drop_table("character_relationships")

    bind = op.get_bind()
    for enum_type in ENUM_TYPES:
        enum_type.drop(bind, checkfirst=True)
