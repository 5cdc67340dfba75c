from __future__ import annotations

import os
from collections.abc import Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

import db.session as db_session
from app import main
from app.config import get_app_settings, get_csv_upload_settings, get_dev_auth_settings
from db.base import Base
from db.config import load_env_files, normalize_postgres_url, resolve_database_url


@pytest.fixture()
def fresh_settings() -> Iterator[None]:
    for getter in (get_app_settings, get_csv_upload_settings, get_dev_auth_settings):
        getter.cache_clear()
    yield
    for getter in (get_app_settings, get_csv_upload_settings, get_dev_auth_settings):
        getter.cache_clear()


@pytest.fixture()
def use_engine(monkeypatch: pytest.MonkeyPatch):
    def _use(engine: Engine) -> None:
        monkeypatch.setattr(db_session, "get_engine", lambda: engine)

    return _use


class TestValidateEnv:
    def test_rejects_unknown_app_mode(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_MODE", "staging")

        with pytest.raises(RuntimeError, match="APP_MODE='staging'"):
            main._validate_env()

    def test_requires_a_database_url(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("DATABASE_URL", "CLOUD_DATABASE_URL", "LOCAL_DATABASE_URL"):
            monkeypatch.delenv(name, raising=False)

        with pytest.raises(RuntimeError, match="No database URL configured"):
            main._validate_env()

    def test_accepts_local_mode(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_MODE", "local")
        monkeypatch.setenv("DATABASE_URL", "sqlite://")

        main._validate_env()


class TestSchemaCheck:
    def test_passes_on_complete_schema(self, engine: Engine, use_engine) -> None:
        use_engine(engine)

        main._check_db()
        main._check_schema()

    def test_missing_tables_abort_startup(self, use_engine) -> None:
        empty = create_engine("sqlite://", poolclass=StaticPool)
        use_engine(empty)

        with pytest.raises(RuntimeError, match="data_uploads"):
            main._check_schema()

    def test_missing_digest_constraint_aborts_startup(self, use_engine) -> None:
        engine = create_engine("sqlite://", poolclass=StaticPool)
        uploads = Base.metadata.tables["data_uploads"]
        with engine.begin() as connection:
            for table in Base.metadata.sorted_tables:
                if table is uploads:
                    connection.exec_driver_sql(
                        "CREATE TABLE data_uploads (id CHAR(32) PRIMARY KEY, file_hash VARCHAR(64))"
                    )
                else:
                    table.create(connection)
        use_engine(engine)

        with pytest.raises(RuntimeError, match="file_hash unique constraint"):
            main._check_schema()


class TestSettings:
    def test_upload_settings_from_env(
        self, monkeypatch: pytest.MonkeyPatch, fresh_settings: None
    ) -> None:
        monkeypatch.setenv("CSV_UPLOAD_MAX_RETURNED_ERRORS", "25")
        monkeypatch.setenv("CSV_UPLOAD_LOG_ROW_ERRORS", "off")
        monkeypatch.setenv("UPLOAD_MAX_BYTES", "not-a-number")

        settings = get_csv_upload_settings()

        assert settings.max_returned_errors == 25
        assert settings.log_row_errors is False
        assert settings.max_upload_bytes == 50 * 1024 * 1024

    def test_dev_auth_defaults(self, monkeypatch: pytest.MonkeyPatch, fresh_settings: None) -> None:
        monkeypatch.delenv("DEV_AUTH_FALLBACK_ENABLED", raising=False)
        monkeypatch.setenv("DEV_FALLBACK_USER_ID", "   ")

        settings = get_dev_auth_settings()

        assert settings.fallback_enabled is True
        assert settings.fallback_user_id == "test_user_123"

    def test_app_mode_is_required(
        self, monkeypatch: pytest.MonkeyPatch, fresh_settings: None
    ) -> None:
        monkeypatch.delenv("APP_MODE", raising=False)

        with pytest.raises(RuntimeError, match="APP_MODE must be explicitly set"):
            get_app_settings()


class TestDatabaseURL:
    def test_postgres_urls_use_psycopg_driver(self) -> None:
        assert normalize_postgres_url("postgres://u:p@h/db") == "postgresql+psycopg://u:p@h/db"
        assert normalize_postgres_url("postgresql://u:p@h/db") == "postgresql+psycopg://u:p@h/db"

    def test_cloud_url_requires_cloud_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv("CLOUD_DATABASE_URL", "postgres://u:p@h/cloud")
        monkeypatch.setenv("LOCAL_DATABASE_URL", "sqlite:///local.db")

        monkeypatch.setenv("ENVIRONMENT", "local")
        assert resolve_database_url() == "sqlite:///local.db"

        monkeypatch.setenv("ENVIRONMENT", "Production")
        assert resolve_database_url() == "postgresql+psycopg://u:p@h/cloud"

    def test_env_files_never_override_process_environment(
        self, tmp_path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / ".env").write_text(
            "# comment\n"
            "export METRICS_TEST_A='from-env'\n"
            'METRICS_TEST_B="from-env"\n'
            "not a pair\n",
            encoding="utf-8",
        )
        (tmp_path / ".env.local").write_text(
            "METRICS_TEST_A=from-local\nMETRICS_TEST_C=from-local\n",
            encoding="utf-8",
        )
        monkeypatch.delenv("METRICS_TEST_A", raising=False)
        monkeypatch.setenv("METRICS_TEST_B", "from-process")
        monkeypatch.delenv("METRICS_TEST_C", raising=False)

        load_env_files(tmp_path)

        assert os.environ["METRICS_TEST_A"] == "from-env"
        assert os.environ["METRICS_TEST_B"] == "from-process"
        assert os.environ["METRICS_TEST_C"] == "from-local"
        os.environ.pop("METRICS_TEST_A")
        os.environ.pop("METRICS_TEST_C")

    def test_explicit_database_url_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "sqlite:///metrics.db")
        monkeypatch.setenv("LOCAL_DATABASE_URL", "postgresql://u:p@h/local")

        assert resolve_database_url() == "sqlite:///metrics.db"

    def test_reset_engine_drops_cached_engine(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "sqlite://")
        db_session.reset_engine()
        first = db_session.get_engine()

        db_session.reset_engine()

        assert db_session.get_engine() is not first
        db_session.reset_engine()
