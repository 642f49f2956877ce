"""End-to-end tests for the Alembic migration script.

Tests verify that the migrations:
1. Generates PostgreSQL DDL offline, enum types included
2. Creates every table the entity models declare
3. Seeds the Usogui series and the default guide tags
4. Can be downgraded and upgraded again
"""

from sqlalchemy import inspect, text

from alembic import command
from usogui_db.core.database import Base, entities  # noqa: F401

REQUIRED_INDEXES = [
    "ix_users_username",
    "ix_chapters_number",
    "ix_events_chapter_number",
    "ix_guides_status",
    "ix_media_owner",
    "ix_character_translations_entity_id",
    "ix_character_relationships_source_character_id",
    "ix_annotations_owner",
]


class TestMigrationDryRun:
    """Test the migration in offline (SQL generation) mode."""

    def test_generates_tables_and_seed_inserts(self, offline_config, sql_buffer):
        command.upgrade(offline_config, "head", sql=True)
        sql = sql_buffer.getvalue()

        for table in Base.metadata.tables:
            assert f"CREATE TABLE {table}" in sql, f"Table {table} not created in migration"
        assert "INSERT INTO series" in sql
        assert "'Gamble Breakdown'" in sql

    def test_creates_enum_types_and_indexes(self, offline_config, sql_buffer):
        command.upgrade(offline_config, "head", sql=True)
        sql = sql_buffer.getvalue()

        assert "CREATE TYPE userrole AS ENUM ('user', 'moderator', 'admin')" in sql
        assert "CREATE TYPE mediastatus" in sql
        assert "CREATE TYPE annotationstatus" in sql
        assert "CREATE TYPE relationshiptype" in sql
        for index in REQUIRED_INDEXES:
            assert f"CREATE INDEX {index}" in sql or f"CREATE UNIQUE INDEX {index}" in sql


class TestMigrationOnline:
    """Test the migration against a real SQLite database file."""

    def test_upgrade_creates_model_tables(self, online_config, sync_engine):
        command.upgrade(online_config, "head")

        tables = set(inspect(sync_engine).get_table_names())
        assert tables - {"alembic_version"} == set(Base.metadata.tables)

    def test_upgrade_seeds_default_data(self, online_config, sync_engine):
        command.upgrade(online_config, "head")

        with sync_engine.connect() as connection:
            series = connection.execute(text("SELECT name FROM series")).scalars().all()
            tags = connection.execute(text("SELECT name FROM tags ORDER BY name")).scalars().all()

        assert series == ["Usogui"]
        assert tags == ["Character Study", "Gamble Breakdown", "Plot Analysis"]

    def test_downgrade_then_upgrade(self, online_config, sync_engine):
        command.upgrade(online_config, "head")
        command.downgrade(online_config, "base")

        assert set(inspect(sync_engine).get_table_names()) <= {"alembic_version"}

        command.upgrade(online_config, "head")
        with sync_engine.connect() as connection:
            version = connection.execute(text("SELECT version_num FROM alembic_version")).scalar_one()
        assert version == "20261019_120000"

    def test_downgrade_one_revision_keeps_initial_schema(self, online_config, sync_engine):
        command.upgrade(online_config, "head")
        command.downgrade(online_config, "20261019_000000")

        tables = set(inspect(sync_engine).get_table_names())
        assert "characters" in tables
        assert not {"character_relationships", "annotations"} & tables
