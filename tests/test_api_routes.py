"""
HTTP-level tests for the metrics API, run against in-memory SQLite.

The application lifespan (DB connectivity and schema checks) is not entered;
TestClient is used without a context manager.
"""

from __future__ import annotations

import io
import json
import uuid
from collections.abc import Iterator

import pytest
from fastapi import FastAPI, HTTPException, UploadFile
from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from app.api.dependencies import read_uploaded_file
from app.config import get_csv_upload_settings, get_dev_auth_settings
from app.main import create_app
from app.services.metric_catalog_service import DEFAULT_METRIC_DEFINITIONS, MetricCatalogService
from db.models.data_upload import DataUpload
from db.models.metric_observation import MetricObservation
from db.models.user_profile import UserProfile
from db.session import get_db


@pytest.fixture()
def application(session_factory: sessionmaker[Session]) -> Iterator[FastAPI]:
    application = create_app()

    def _override_get_db() -> Iterator[Session]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture()
def client(application: FastAPI, owner: UserProfile) -> TestClient:
    return TestClient(application)


@pytest.fixture()
def strict_identity(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("DEV_AUTH_FALLBACK_ENABLED", "false")
    get_dev_auth_settings.cache_clear()
    yield
    get_dev_auth_settings.cache_clear()


def _upload(client: TestClient, content: bytes, mapping: dict | str | None = None, **kwargs):
    data = {}
    if mapping is not None:
        data["metricMapping"] = mapping if isinstance(mapping, str) else json.dumps(mapping)
    return client.post(
        "/data/upload-csv",
        files={"file": ("metrics.csv", content, "text/csv")},
        data=data,
        **kwargs,
    )


def _count(db: Session, model: type) -> int:
    return db.scalar(select(func.count()).select_from(model))


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


# ---------------------------------------------------------------------------
# POST /data/upload-csv
# ---------------------------------------------------------------------------


class TestUploadCSV:
    def test_successful_upload(self, client: TestClient, db: Session) -> None:
        response = _upload(
            client,
            b"date,enrolled\n2024-01-01,120\n2024-02-01,130\n",
            {"enrolled": "enrollment"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["rowsProcessed"] == 2
        assert body["rowsFailed"] == 0
        assert "errors" not in body
        assert _count(db, MetricObservation) == 2
        upload = db.get(DataUpload, uuid.UUID(body["uploadId"]))
        assert upload is not None
        assert upload.file_name == "metrics.csv"

    def test_row_errors_are_reported(self, client: TestClient) -> None:
        response = _upload(client, b"date,x\nsoon,1\n2024-01-01,2\n", {"x": "enrollment"})

        assert response.status_code == 200
        body = response.json()
        assert body["rowsProcessed"] == 1
        assert body["rowsFailed"] == 1
        assert body["errors"] == ["Row 2: Invalid date format: soon"]

    def test_duplicate_upload_conflicts(self, client: TestClient, db: Session) -> None:
        content = b"date,x\n2024-01-01,5\n"
        first = _upload(client, content, {"x": "enrollment"})

        second = _upload(client, content, {"x": "enrollment"})

        assert second.status_code == 409
        detail = second.json()["detail"]
        assert detail["error"] == "This file has already been uploaded"
        assert detail["uploadId"] == first.json()["uploadId"]
        assert _count(db, DataUpload) == 1

    def test_header_only_file_is_rejected(self, client: TestClient, db: Session) -> None:
        response = _upload(client, b"date,x\n", {"x": "enrollment"})

        assert response.status_code == 400
        assert response.json()["detail"] == "CSV file is empty or invalid"
        assert _count(db, DataUpload) == 0

    def test_missing_mapping_is_treated_as_empty(self, client: TestClient, db: Session) -> None:
        response = _upload(client, b"date,x\n2024-01-01,5\n")

        assert response.status_code == 200
        assert response.json()["rowsProcessed"] == 1
        assert _count(db, MetricObservation) == 0

    @pytest.mark.parametrize("mapping", ["{not json", "[1, 2]", '{"x": 5}'])
    def test_malformed_mapping_is_rejected(self, client: TestClient, db: Session, mapping: str) -> None:
        response = _upload(client, b"date,x\n2024-01-01,5\n", mapping)

        assert response.status_code == 400
        assert _count(db, DataUpload) == 0

    def test_missing_file_is_rejected(self, client: TestClient) -> None:
        response = client.post("/data/upload-csv", data={"metricMapping": "{}"})

        assert response.status_code == 422

    def test_oversized_file_is_rejected(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("UPLOAD_MAX_BYTES", "16")
        get_csv_upload_settings.cache_clear()
        try:
            response = _upload(client, b"date,x\n2024-01-01,5\n2024-01-02,6\n")
        finally:
            get_csv_upload_settings.cache_clear()

        assert response.status_code == 400

    def test_unknown_profile_is_not_found(self, client: TestClient, db: Session) -> None:
        response = _upload(
            client,
            b"date,x\n2024-01-01,5\n",
            {"x": "enrollment"},
            headers={"X-User-Id": "user_without_profile"},
        )

        assert response.status_code == 404
        assert _count(db, DataUpload) == 0

    def test_missing_identity_without_fallback(
        self, client: TestClient, strict_identity: None, db: Session
    ) -> None:
        response = _upload(client, b"date,x\n2024-01-01,5\n", {"x": "enrollment"})

        assert response.status_code == 401
        assert _count(db, DataUpload) == 0

    def test_explicit_identity_without_fallback(
        self, client: TestClient, strict_identity: None
    ) -> None:
        response = _upload(
            client,
            b"date,x\n2024-01-01,5\n",
            {"x": "enrollment"},
            headers={"X-User-Id": "test_user_123"},
        )

        assert response.status_code == 200



class _RecordingStream(io.BytesIO):
    def __init__(self, data: bytes) -> None:
        super().__init__(data)
        self.requested: list[int] = []

    def read(self, size: int | None = -1) -> bytes:
        self.requested.append(-1 if size is None else size)
        return super().read(size)


class TestReadUploadedFile:
    @pytest.fixture(autouse=True)
    def _small_limit(self, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
        monkeypatch.setenv("UPLOAD_MAX_BYTES", "16")
        get_csv_upload_settings.cache_clear()
        yield
        get_csv_upload_settings.cache_clear()

    def test_undeclared_size_reads_at_most_one_byte_past_limit(self) -> None:
        stream = _RecordingStream(b"x" * 1024)

        with pytest.raises(HTTPException) as ctx:
            read_uploaded_file(UploadFile(file=stream, filename="big.csv"))

        assert ctx.value.status_code == 400
        assert stream.requested == [17]
        assert stream.closed

    def test_declared_size_is_rejected_before_reading(self) -> None:
        stream = _RecordingStream(b"date,x\n")

        with pytest.raises(HTTPException) as ctx:
            read_uploaded_file(UploadFile(file=stream, filename="big.csv", size=10_000))

        assert ctx.value.status_code == 400
        assert stream.requested == []

    def test_file_within_limit(self) -> None:
        uploaded = read_uploaded_file(UploadFile(file=io.BytesIO(b"date,x\n1,2\n"), filename=None))

        assert uploaded.content == b"date,x\n1,2\n"
        assert uploaded.file_size == 11
        assert uploaded.file_name == "upload.csv"


# ---------------------------------------------------------------------------
# GET /data/uploads
# ---------------------------------------------------------------------------


def test_list_uploads(client: TestClient) -> None:
    _upload(client, b"date,x\n2024-01-01,1\n", {"x": "enrollment"})
    _upload(client, b"date,x\nbad,1\n", {"x": "enrollment"})

    response = client.get("/data/uploads", headers={"X-User-Id": "test_user_123"})

    assert response.status_code == 200
    uploads = response.json()["uploads"]
    assert [u["rowsFailed"] for u in uploads] == [0, 1]
    assert uploads[1]["errorLog"] == ["Row 2: Invalid date format: bad"]
    assert uploads[0]["uploadStatus"] == "completed"
    assert uploads[0]["metricsMapped"] == {"x": "enrollment"}


def test_list_uploads_requires_identity(client: TestClient) -> None:
    _upload(client, b"date,x\n2024-01-01,1\n", {"x": "enrollment"})

    response = client.get("/data/uploads")

    assert response.status_code == 401


# ---------------------------------------------------------------------------
# /data/manual-input
# ---------------------------------------------------------------------------


class TestManualInput:
    def test_create_list_update_delete(self, client: TestClient) -> None:
        created = client.post(
            "/data/manual-input",
            json={"metricId": "meals_served", "value": 1250, "date": "2024-04-01", "notes": "Q1"},
        )
        assert created.status_code == 200
        data = created.json()["data"]
        assert data["metricId"] == "meals_served"
        assert data["value"] == "1250"
        assert data["source"] == "manual"

        listed = client.get("/data/manual-input", params={"metricId": "meals_served"})
        assert [item["id"] for item in listed.json()["data"]] == [data["id"]]

        updated = client.put("/data/manual-input", json={"id": data["id"], "value": "1300"})
        assert updated.status_code == 200
        assert updated.json()["data"]["value"] == "1300"
        assert updated.json()["data"]["notes"] == "Q1"

        deleted = client.delete("/data/manual-input", params={"id": data["id"]})
        assert deleted.status_code == 200
        assert deleted.json() == {"success": True}
        assert client.get("/data/manual-input").json()["data"] == []

    def test_create_with_missing_fields(self, client: TestClient) -> None:
        response = client.post("/data/manual-input", json={"metricId": "enrollment"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Missing required fields: metricId, value, date"

    def test_create_with_invalid_date(self, client: TestClient) -> None:
        response = client.post(
            "/data/manual-input",
            json={"metricId": "enrollment", "value": 3, "date": "tomorrow"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid date format"

    def test_update_without_id(self, client: TestClient) -> None:
        response = client.put("/data/manual-input", json={"value": 3})

        assert response.status_code == 400
        assert response.json()["detail"] == "Missing metric data ID"

    def test_update_unknown_id(self, client: TestClient) -> None:
        response = client.put("/data/manual-input", json={"id": 999, "value": 3})

        assert response.status_code == 404
        assert response.json()["detail"] == "Metric data not found"

    def test_delete_without_id(self, client: TestClient) -> None:
        assert client.delete("/data/manual-input").status_code == 400

    def test_delete_other_owner_observation(self, client: TestClient, db: Session) -> None:
        other = UserProfile(external_user_id="other_user", email="other@example.com")
        db.add(other)
        db.commit()
        created = client.post(
            "/data/manual-input",
            json={"metricId": "enrollment", "value": 1, "date": "2024-01-01"},
            headers={"X-User-Id": "other_user"},
        ).json()["data"]

        response = client.delete("/data/manual-input", params={"id": created["id"]})

        assert response.status_code == 404


# ---------------------------------------------------------------------------
# GET /data/available-metrics
# ---------------------------------------------------------------------------


def test_available_metrics(client: TestClient, db: Session) -> None:
    MetricCatalogService().seed_defaults(db=db)

    response = client.get("/data/available-metrics")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["count"] == len(DEFAULT_METRIC_DEFINITIONS)
    first = body["metrics"][0]
    assert set(first) >= {"metricId", "metricName", "category", "unit", "dataType"}


def test_available_metrics_does_not_require_profile(
    application: FastAPI, strict_identity: None
) -> None:
    response = TestClient(application).get("/data/available-metrics")

    assert response.status_code == 200
    assert response.json()["count"] == 0
