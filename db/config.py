"""
db/config.py

Where the metrics store lives: `.env` loading and database URL resolution.
"""

from __future__ import annotations

import os
from pathlib import Path

ENV_FILENAMES = (".env", ".env.local")
PSYCOPG_SCHEME = "postgresql+psycopg://"

_POSTGRES_SCHEMES = ("postgres://", "postgresql://")
_CLOUD_LIKE_ENVIRONMENTS = frozenset({"prod", "production", "staging", "cloud"})


def _parse_env_line(raw_line: str) -> tuple[str, str] | None:
    line = raw_line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None

    key, value = (part.strip() for part in line.split("=", 1))
    key = key.removeprefix("export ").strip()
    if not key:
        return None
    return key, value.strip("\"'")


def load_env_files(project_root: Path | None = None) -> None:
    """
    Populate os.environ from `.env`, then `.env.local`, when they exist.

    Values already present in the environment are never overwritten. `.env`
    is read first, so it wins over `.env.local` for keys both files define.
    """

    root = project_root or Path(__file__).resolve().parents[1]
    for env_path in (root / name for name in ENV_FILENAMES):
        if not env_path.is_file():
            continue
        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            parsed = _parse_env_line(raw_line)
            if parsed is not None:
                os.environ.setdefault(*parsed)


def normalize_postgres_url(url: str) -> str:
    """
    Point postgres URLs at the psycopg 3 driver; other URLs pass through.
    """

    for scheme in _POSTGRES_SCHEMES:
        if url.startswith(scheme):
            return PSYCOPG_SCHEME + url[len(scheme) :]
    return url


def _candidate_urls() -> list[str]:
    environment = os.getenv("ENVIRONMENT", "local").strip().lower()
    names = ["DATABASE_URL"]
    if environment in _CLOUD_LIKE_ENVIRONMENTS:
        names.append("CLOUD_DATABASE_URL")
    names.append("LOCAL_DATABASE_URL")
    return [os.getenv(name, "").strip() for name in names]


def resolve_database_url() -> str:
    """
    Return the metrics store URL.

    DATABASE_URL wins; CLOUD_DATABASE_URL is only consulted when ENVIRONMENT
    is cloud-like; LOCAL_DATABASE_URL is the last resort.
    """

    load_env_files()

    url = next((candidate for candidate in _candidate_urls() if candidate), None)
    if url is None:
        raise RuntimeError(
            "No database URL configured. Set DATABASE_URL, or configure "
            "LOCAL_DATABASE_URL / CLOUD_DATABASE_URL."
        )
    return normalize_postgres_url(url)
