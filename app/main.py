from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI


def _validate_env() -> None:
    """
    Validate required environment variables at startup.

    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle.
    """

    from db.config import load_env_files

    load_env_files()

    errors: list[str] = []

    # --- APP_MODE -------------------------------------------------------
    app_mode = os.getenv("APP_MODE", "").strip().lower()
    if not app_mode:
        errors.append("APP_MODE is not set. Allowed values: ['cloud', 'local'].")
    elif app_mode not in {"cloud", "local"}:
        errors.append(f"APP_MODE='{app_mode}' is not valid. Allowed values: ['cloud', 'local'].")

    # --- Database URL ---------------------------------------------------
    if not any(
        os.getenv(name, "").strip()
        for name in ("DATABASE_URL", "CLOUD_DATABASE_URL", "LOCAL_DATABASE_URL")
    ):
        errors.append(
            "No database URL configured. Set DATABASE_URL, CLOUD_DATABASE_URL "
            "or LOCAL_DATABASE_URL."
        )

    if errors:
        raise RuntimeError(
            "Startup validation failed - missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _warn_on_identity_fallback() -> None:
    """
    Warn when cloud deployments still accept requests without an identity.
    """

    from app.config import get_app_settings, get_dev_auth_settings

    if get_app_settings().mode == "cloud" and get_dev_auth_settings().fallback_enabled:
        logging.getLogger(__name__).warning(
            "DEV_AUTH_FALLBACK_ENABLED is on in cloud mode; requests without "
            "X-User-Id will act as %r.",
            get_dev_auth_settings().fallback_user_id,
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    from app.config import get_app_settings

    log_level = get_app_settings().log_level
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_db() -> None:
    """Run SELECT 1 on the configured engine. Raises RuntimeError if unreachable."""
    from sqlalchemy import text

    from db.session import get_engine

    try:
        with get_engine().connect() as connection:
            connection.execute(text("SELECT 1"))
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc


def _check_schema() -> None:
    """
    Verify that every mapped table exists and that upload digests are unique.

    Concurrent duplicate uploads are only rejected when the unique digest
    constraint is present. Does NOT auto-migrate.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401 - registers all ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    inspector = sa_inspect(get_engine())
    missing = sorted(set(Base.metadata.tables) - set(inspector.get_table_names()))
    if not missing:
        unique_columns = [
            tuple(constraint["column_names"])
            for constraint in inspector.get_unique_constraints("data_uploads")
        ]
        if ("file_hash",) not in unique_columns:
            missing.append("data_uploads.file_hash unique constraint")

    if missing:
        logging.getLogger(__name__).critical(
            "Schema mismatch: missing %s. Run 'alembic upgrade head' and restart.",
            ", ".join(missing),
        )
        raise RuntimeError(
            f"Schema mismatch: missing {', '.join(missing)}. Run migrations and restart."
        )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate DB connectivity and schema before serving traffic."""
    _check_db()
    logging.getLogger(__name__).info("Database connectivity confirmed")
    _check_schema()
    logging.getLogger(__name__).info("Database schema validated")
    yield


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()
    _warn_on_identity_fallback()

    application = FastAPI(
        title="Impact Metrics API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import (
        csv_upload_router,
        manual_input_router,
        metric_catalog_router,
    )

    application.include_router(csv_upload_router)
    application.include_router(manual_input_router)
    application.include_router(metric_catalog_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
