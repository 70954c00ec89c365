"""
Command-line entry points: argument handling and exit status.
"""
import asyncio

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from harmony.core.config import settings
from harmony.core.database import Base
from harmony.scripts import check_database, migrate_to_supabase, upload_sample_data
from harmony.services.migration import MigrationReport


# ── upload-sample-data ───────────────────────────────────────────────────────

class TestUploadSampleData:
    def test_help(self, capsys):
        assert upload_sample_data.main(["help"]) == 0
        assert "Usage: upload-sample-data" in capsys.readouterr().out

    def test_no_command_shows_help(self, capsys):
        assert upload_sample_data.main([]) == 0
        assert "Commands:" in capsys.readouterr().out

    def test_unknown_command(self):
        assert upload_sample_data.main(["bogus", "household-1"]) == 1

    def test_missing_household_id(self):
        assert upload_sample_data.main(["upload"]) == 1
        assert upload_sample_data.main(["clear", ""]) == 1

    def test_dispatch(self, monkeypatch):
        calls = []

        async def fake_upload(household_id):
            calls.append(household_id)
            return {"chores": 7}

        monkeypatch.setitem(upload_sample_data.COMMANDS, "upload", fake_upload)
        assert upload_sample_data.main(["upload", "household-1"]) == 0
        assert calls == ["household-1"]


# ── migrate-to-supabase ──────────────────────────────────────────────────────

class TestMigrateToSupabase:
    def test_missing_configuration(self, monkeypatch):
        monkeypatch.setattr(settings, "firestore_export_path", "")
        assert migrate_to_supabase.main() == 1

    def test_missing_export(self, monkeypatch, tmp_path):
        monkeypatch.setattr(settings, "firestore_export_path", str(tmp_path / "nope.json"))
        assert migrate_to_supabase.main() == 1

    def test_exit_status_follows_report(self, monkeypatch, tmp_path):
        monkeypatch.setattr(settings, "firestore_export_path", str(tmp_path))

        async def ok_run(path):
            return MigrationReport(succeeded={"households": 2})

        monkeypatch.setattr(migrate_to_supabase, "run", ok_run)
        assert migrate_to_supabase.main() == 0

        async def failed_run(path):
            return MigrationReport(succeeded={"households": 2}, failed={"bills": "bad amount"})

        monkeypatch.setattr(migrate_to_supabase, "run", failed_run)
        assert migrate_to_supabase.main() == 1


# ── test-supabase ────────────────────────────────────────────────────────────

@pytest.fixture
def checked_db(tmp_path, monkeypatch):
    """Schema in a SQLite file; the script's session factory points at it.

    The async engine is built on first use, inside the loop ``main`` starts.
    """
    path = tmp_path / "check.db"
    sync_engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(sync_engine)

    engines = []

    def session_factory():
        if not engines:
            engines.append(create_async_engine(f"sqlite+aiosqlite:///{path}"))
        return async_sessionmaker(engines[0], expire_on_commit=False)

    async def dispose():
        for engine in engines:
            await engine.dispose()

    monkeypatch.setattr(check_database, "get_session_factory", session_factory)
    monkeypatch.setattr(check_database, "dispose_engine", dispose)
    yield sync_engine
    sync_engine.dispose()


class TestCheckDatabase:
    def test_all_checks_pass(self, checked_db):
        assert check_database.main() == 0
        with checked_db.connect() as conn:
            # The CRUD check removes its test household
            assert conn.execute(text("SELECT COUNT(*) FROM households")).scalar_one() == 0

    def test_missing_table_fails(self, checked_db):
        with checked_db.begin() as conn:
            conn.execute(text("DROP TABLE sensor_events"))
        assert check_database.main() == 1

    def test_realtime_skipped_off_postgres(self, checked_db):
        async def run():
            try:
                return await check_database.check_realtime()
            finally:
                await check_database.dispose_engine()

        assert asyncio.run(run()) is True
