# tests/core/ledger/test_database.py
"""Tests for ledger database connection management."""

from datetime import UTC, datetime
from pathlib import Path

import pytest
from sqlalchemy import inspect, text


class TestDatabaseConnection:
    """Database connection and initialization."""

    def test_connect_creates_tables(self, tmp_path: Path) -> None:
        from textchain.core.ledger.database import LedgerDB

        db = LedgerDB(f"sqlite:///{tmp_path / 'ledger.db'}")

        tables = inspect(db.engine).get_table_names()

        assert "transformations" in tables
        assert "transformation_steps" in tables
        assert "transformation_runs" in tables
        assert "transformation_step_runs" in tables
        db.close()

    def test_sqlite_wal_mode(self, tmp_path: Path) -> None:
        from textchain.core.ledger.database import LedgerDB

        db = LedgerDB(f"sqlite:///{tmp_path / 'ledger.db'}")

        with db.engine.connect() as conn:
            assert conn.execute(text("PRAGMA journal_mode")).scalar() == "wal"
        db.close()

    def test_sqlite_foreign_keys_and_busy_timeout(self, tmp_path: Path) -> None:
        from textchain.core.ledger.database import LedgerDB

        db = LedgerDB(f"sqlite:///{tmp_path / 'ledger.db'}")

        with db.engine.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1
            assert conn.execute(text("PRAGMA busy_timeout")).scalar() == 5000
        db.close()

    def test_context_manager_closes(self, tmp_path: Path) -> None:
        from textchain.core.ledger.database import LedgerDB

        with LedgerDB(f"sqlite:///{tmp_path / 'ledger.db'}") as db:
            assert db.engine is not None

        with pytest.raises(RuntimeError, match="not initialized"):
            _ = db.engine


class TestFactories:
    def test_in_memory_factory(self) -> None:
        from textchain.core.ledger.database import LedgerDB

        db = LedgerDB.in_memory()

        assert "transformation_runs" in inspect(db.engine).get_table_names()
        db.close()

    def test_in_memory_shared_across_threads(self) -> None:
        """Every thread sees the same in-memory database."""
        import threading

        from textchain.core.ledger.database import LedgerDB
        from textchain.core.ledger.recorder import RunRecorder

        db = LedgerDB.in_memory()
        recorder = RunRecorder(db)
        run = recorder.begin_run("tr-1", "hello")
        seen: list[object] = []

        thread = threading.Thread(target=lambda: seen.append(recorder.get_run(run.run_id)))
        thread.start()
        thread.join()

        assert seen[0] is not None
        db.close()

    def test_from_url_creates_tables(self, tmp_path: Path) -> None:
        from textchain.core.ledger.database import LedgerDB

        db = LedgerDB.from_url(f"sqlite:///{tmp_path / 'ledger.db'}")

        assert "transformation_step_runs" in inspect(db.engine).get_table_names()
        db.close()

    def test_from_url_without_create_tables(self, tmp_path: Path) -> None:
        from textchain.core.ledger.database import LedgerDB

        db = LedgerDB.from_url(f"sqlite:///{tmp_path / 'empty.db'}", create_tables=False)

        assert inspect(db.engine).get_table_names() == []
        db.close()

    def test_connection_rolls_back_on_error(self) -> None:
        from textchain.core.ledger.database import LedgerDB
        from textchain.core.ledger.schema import transformations_table

        db = LedgerDB.in_memory()

        with pytest.raises(RuntimeError), db.connection() as conn:
            conn.execute(
                transformations_table.insert().values(
                    transformation_id="tr-1",
                    title="t",
                    description="",
                    created_at=datetime.now(UTC),
                    updated_at=datetime.now(UTC),
                )
            )
            raise RuntimeError("boom")

        with db.connection() as conn:
            assert conn.execute(text("SELECT COUNT(*) FROM transformations")).scalar() == 0
        db.close()


class TestSchemaValidation:
    def test_partial_ledger_rejected(self, tmp_path: Path) -> None:
        from sqlalchemy import create_engine

        from textchain.core.ledger.database import LedgerDB, SchemaCompatibilityError

        db_path = tmp_path / "old.db"
        engine = create_engine(f"sqlite:///{db_path}")
        with engine.begin() as conn:
            conn.execute(text("CREATE TABLE transformation_runs (run_id TEXT PRIMARY KEY)"))
        engine.dispose()

        with pytest.raises(SchemaCompatibilityError, match="transformation_runs.error"):
            LedgerDB(f"sqlite:///{db_path}")

    def test_existing_complete_ledger_accepted(self, tmp_path: Path) -> None:
        from textchain.core.ledger.database import LedgerDB

        url = f"sqlite:///{tmp_path / 'ledger.db'}"
        LedgerDB(url).close()

        db = LedgerDB(url)
        assert db.engine is not None
        db.close()
