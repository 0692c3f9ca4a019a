# tests/test_migrations.py
"""Check that the Alembic history builds the same schema as the models."""

from pathlib import Path

from sqlalchemy import create_engine, inspect

from parley_stage.db.session import Base
from parley_stage.scripts.migrate import run_upgrade_head


def test_upgrade_head_creates_board_tables(tmp_path: Path) -> None:
    url = f"sqlite:///{tmp_path / 'board.db'}"

    run_upgrade_head(url)

    engine = create_engine(url)
    try:
        inspector = inspect(engine)
        assert set(inspector.get_table_names()) >= {"identity", "post", "alembic_version"}
        for table in Base.metadata.sorted_tables:
            migrated = {column["name"] for column in inspector.get_columns(table.name)}
            assert migrated == set(table.columns.keys())
        indexes = {index["name"] for index in inspector.get_indexes("post")}
        assert {"ix_post_root_id", "ix_post_author_address"} <= indexes
    finally:
        engine.dispose()
