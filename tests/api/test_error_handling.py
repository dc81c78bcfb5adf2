from __future__ import annotations

import logging
from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from app.api import providers
from app.core import errors
from app.main import app
from tests.conftest import auth, mint_token


def _exploding_repo():
    raise RuntimeError("pool exhausted")


@pytest.fixture
def lenient_client() -> TestClient:
    # The server error middleware re-raises after responding; keep the response.
    return TestClient(app, raise_server_exceptions=False)


def test_unexpected_error_is_json_500(lenient_client: TestClient) -> None:
    app.dependency_overrides[providers.get_privacy_repo] = _exploding_repo

    resp = lenient_client.get("/v1/privacy", headers=auth(mint_token("tee")))

    assert resp.status_code == 500
    assert resp.headers["content-type"] == "application/json"
    assert resp.json() == {"error": "Internal server error", "details": "pool exhausted"}


def test_unexpected_error_hides_details_in_prod(
    lenient_client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(errors, "SETTINGS", replace(errors.SETTINGS, app_env="prod"))
    app.dependency_overrides[providers.get_privacy_repo] = _exploding_repo

    resp = lenient_client.get("/v1/privacy", headers=auth(mint_token("tee")))

    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}


def test_unexpected_error_is_logged_with_traceback(
    lenient_client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    app.dependency_overrides[providers.get_privacy_repo] = _exploding_repo

    with caplog.at_level(logging.ERROR, logger="app.core.errors"):
        lenient_client.get("/v1/privacy", headers=auth(mint_token("tee")))

    records = [r for r in caplog.records if r.name == "app.core.errors"]
    assert records
    assert records[0].exc_info is not None
    assert "GET /v1/privacy" in records[0].getMessage()
