"""
Runs the Alembic migrations against a temporary SQLite file and checks the
resulting schema matches the ORM models.
"""

from pathlib import Path

import sqlalchemy as sa
from alembic import command
from alembic.config import Config

from brainbolt.database.base import metadata
from brainbolt.database import models  # noqa: F401

ROOT = Path(__file__).resolve().parent.parent


def alembic_config(database_path):
    config = Config(str(ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(ROOT / "alembic"))
    config.attributes["database_url"] = f"sqlite+aiosqlite:///{database_path}"
    config.attributes["configure_logger"] = False
    return config


def test_upgrade_creates_model_tables(tmp_path):
    database_path = tmp_path / "migrated.db"

    command.upgrade(alembic_config(database_path), "head")

    engine = sa.create_engine(f"sqlite:///{database_path}")
    try:
        inspector = sa.inspect(engine)
        tables = set(inspector.get_table_names())
        assert set(metadata.tables) <= tables

        for name, table in metadata.tables.items():
            migrated = {column["name"] for column in inspector.get_columns(name)}
            assert migrated == {column.name for column in table.columns}, name

        unique = inspector.get_unique_constraints("answer_log")
        assert any(c["column_names"] == ["user_id", "session_id", "question_id"] for c in unique)
    finally:
        engine.dispose()


def test_downgrade_removes_tables(tmp_path):
    database_path = tmp_path / "migrated.db"
    config = alembic_config(database_path)

    command.upgrade(config, "head")
    command.downgrade(config, "base")

    engine = sa.create_engine(f"sqlite:///{database_path}")
    try:
        assert set(sa.inspect(engine).get_table_names()) <= {"alembic_version"}
    finally:
        engine.dispose()
