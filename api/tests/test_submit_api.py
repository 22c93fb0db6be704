from datetime import datetime

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import tichi_survey.main as m
from tichi_survey import database, repo
from tichi_survey.routes import survey as survey_routes

SUBMIT = "/api/survey/submit"


def _payload():
    return {
        "userInfo": {"fullName": "Asha Rao", "email": "asha@example.com"},
        "responses": [
            {"questionId": "q1", "answer": "Asha"},
            {"questionId": "q4", "answer": "2nd Year"},
            {"questionId": "q10", "answer": ""},
        ],
    }


def test_valid_submission_is_persisted_and_returned(sqlite_store):
    client = TestClient(m.app)
    resp = client.post(SUBMIT, json=_payload())

    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Survey response saved successfully"
    data = body["data"]
    assert data["userInfo"] == _payload()["userInfo"]
    assert data["responses"] == _payload()["responses"]
    assert data["_id"]
    assert datetime.fromisoformat(data["submittedAt"]).tzinfo is not None


def test_identical_submissions_are_stored_as_independent_documents(sqlite_store):
    client = TestClient(m.app)
    first = client.post(SUBMIT, json=_payload())
    second = client.post(SUBMIT, json=_payload())

    assert first.status_code == 201
    assert second.status_code == 201
    assert first.json()["data"]["_id"] != second.json()["data"]["_id"]


def test_empty_string_answer_is_accepted(sqlite_store):
    client = TestClient(m.app)
    resp = client.post(
        SUBMIT,
        json={"userInfo": {"fullName": "A", "email": "a@b.com"}, "responses": [{"questionId": "q1", "answer": ""}]},
    )
    assert resp.status_code == 201
    assert resp.json()["data"]["responses"] == [{"questionId": "q1", "answer": ""}]


def test_missing_responses_returns_400_with_required_fields_message():
    client = TestClient(m.app)
    resp = client.post(SUBMIT, json={"userInfo": {"fullName": "A", "email": "a@b.com"}})
    assert resp.status_code == 400
    assert resp.json() == {
        "error": "Invalid request body",
        "details": "Request must include userInfo and responses",
    }


def test_empty_full_name_returns_400():
    client = TestClient(m.app)
    resp = client.post(SUBMIT, json={"userInfo": {"fullName": "", "email": "a@b.com"}, "responses": [{"questionId": "q1", "answer": "x"}]})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid userInfo"


def test_empty_responses_returns_400():
    client = TestClient(m.app)
    resp = client.post(SUBMIT, json={"userInfo": {"fullName": "A", "email": "a@b.com"}, "responses": []})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid responses", "details": "responses must be a non-empty array"}


def test_unparseable_body_returns_400():
    client = TestClient(m.app)
    resp = client.post(SUBMIT, content="{not json", headers={"content-type": "application/json"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid request body"


def test_document_schema_rejection_lists_each_field(sqlite_store):
    client = TestClient(m.app)
    payload = {
        "userInfo": {"fullName": "A", "email": {"address": "a@b.com"}},
        "responses": [{"questionId": 7, "answer": "x"}],
    }
    resp = client.post(SUBMIT, json=payload)

    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "Validation Error"
    assert isinstance(body["details"], list)
    assert any(d.startswith("userInfo.email") for d in body["details"])
    assert any(d.startswith("responses.0.questionId") for d in body["details"])


def test_duplicate_key_returns_409(monkeypatch):
    def fake_insert(record):
        raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

    monkeypatch.setattr(repo, "insert_survey_response", fake_insert)
    client = TestClient(m.app)
    resp = client.post(SUBMIT, json=_payload())

    assert resp.status_code == 409
    assert resp.json()["error"] == "Duplicate Entry"


def test_unreachable_store_returns_500_not_ready(monkeypatch):
    def fake_insert(record):
        raise OperationalError("INSERT", {}, Exception("connection refused"))

    monkeypatch.setattr(repo, "insert_survey_response", fake_insert)
    client = TestClient(m.app)
    resp = client.post(SUBMIT, json=_payload())

    assert resp.status_code == 500
    body = resp.json()
    assert body["error"] == "Database connection not ready"
    assert "connection refused" in body["details"]


def test_unconfigured_store_returns_500_not_ready(monkeypatch):
    monkeypatch.setattr(repo, "SessionLocal", sessionmaker())
    client = TestClient(m.app)
    resp = client.post(SUBMIT, json=_payload())

    assert resp.status_code == 500
    assert resp.json()["error"] == "Database connection not ready"


def test_unexpected_failure_is_rendered_as_internal_error(monkeypatch):
    def boom(payload):
        raise RuntimeError("boom")

    monkeypatch.setattr(survey_routes, "submit_survey_response", boom)
    client = TestClient(m.app, raise_server_exceptions=False)
    resp = client.post(SUBMIT, json=_payload())

    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error", "details": "boom"}


def test_health_reports_store_state(sqlite_store):
    client = TestClient(m.app)
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.json()["store"] == "connected"


def test_other_store_failures_return_500_with_diagnostics(monkeypatch):
    def fake_insert(record):
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(repo, "insert_survey_response", fake_insert)
    client = TestClient(m.app)
    resp = client.post(SUBMIT, json=_payload())

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to save survey response", "details": "disk full"}


def test_empty_user_info_returns_400_invalid_user_info():
    client = TestClient(m.app)
    resp = client.post(SUBMIT, json={"userInfo": {}, "responses": [{"questionId": "q1", "answer": "x"}]})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid userInfo", "details": "userInfo must include fullName and email"}


def test_table_is_created_by_first_write_when_startup_skipped_it():
    engine = database.init_engine(
        "sqlite://",
        create_tables=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    try:
        client = TestClient(m.app)
        first = client.post(SUBMIT, json=_payload())
        second = client.post(SUBMIT, json=_payload())

        assert first.status_code == 201
        assert second.status_code == 201
        assert first.json()["data"]["_id"] != second.json()["data"]["_id"]
    finally:
        database.Base.metadata.drop_all(bind=engine)
        engine.dispose()
        database.engine = None
        database._schema_ready = False
