"""
Tests for engine construction and schema setup.
"""

from sqlalchemy import inspect, text
from sqlalchemy.exc import IntegrityError

import pytest

from techassist.db.database import build_engine, init_db
from techassist.db.models import Chunk


def test_tables_created(db_engine):
    tables = set(inspect(db_engine).get_table_names())
    assert {"documents", "chunks", "query_logs"} <= tables


def test_sqlite_foreign_keys_enforced(db_engine, db_session):
    with db_engine.connect() as conn:
        assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1

    db_session.add(Chunk(id="orphan", document_id="missing-doc", chunk_index=0, text="x"))
    with pytest.raises(IntegrityError):
        db_session.commit()


def test_init_db_reports_unreachable_database(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path}/no/such/dir/app.db")
    try:
        assert init_db(engine) is False
    finally:
        engine.dispose()
