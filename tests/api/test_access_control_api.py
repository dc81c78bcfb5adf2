from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import add_course, auth

URL = "/v1/courses/{}/access-control"


def _rules_body(**overrides) -> dict:
    body = {
        "is_public": False,
        "requires_enrollment": True,
        "allowed_roles": ["student"],
        "rules": [
            {
                "resource_type": "lesson",
                "resource_id": "lesson-2",
                "available_from": "2026-01-01T00:00:00Z",
                "prerequisites": [
                    {"type": "lesson", "id": "lesson-1"},
                    {"type": "quiz", "id": "quiz-1", "required_status": "STARTED"},
                ],
            }
        ],
    }
    body.update(overrides)
    return body


def test_read_requires_authentication(client: TestClient) -> None:
    assert client.get(URL.format("course-1")).status_code == 401


def test_defaults_when_nothing_saved(client: TestClient, token: str) -> None:
    add_course("course-1", "t1")
    resp = client.get(URL.format("course-1"), headers=auth(token))
    assert resp.status_code == 200
    assert resp.json() == {
        "course_id": "course-1",
        "is_public": False,
        "requires_enrollment": True,
        "allowed_roles": ["student", "mentor"],
        "rules": [],
        "updated_at": None,
    }


def test_malformed_course_id_is_400(client: TestClient, token: str) -> None:
    resp = client.get(URL.format("bad_id!"), headers=auth(token))
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid course ID format"


def test_unknown_course_is_404(client: TestClient, token: str) -> None:
    resp = client.get(URL.format("nope"), headers=auth(token))
    assert resp.status_code == 404


def test_write_is_admin_only(client: TestClient, token: str) -> None:
    add_course("course-1", "t1")
    resp = client.post(URL.format("course-1"), json=_rules_body(), headers=auth(token))
    assert resp.status_code == 403


def test_non_admin_is_refused_before_body_validation(
    client: TestClient, token: str
) -> None:
    resp = client.post(URL.format("course-1"), json={"rules": "nope"}, headers=auth(token))
    assert resp.status_code == 403


def test_admin_saves_and_reads_back(client: TestClient, admin_token: str) -> None:
    add_course("course-1", "t1")
    saved = client.post(
        URL.format("course-1"), json=_rules_body(), headers=auth(admin_token)
    )
    assert saved.status_code == 200
    assert saved.json()["updated_at"] is not None

    read = client.get(URL.format("course-1"), headers=auth(admin_token))
    body = read.json()
    assert body["allowed_roles"] == ["student"]
    [rule] = body["rules"]
    assert rule["resource_id"] == "lesson-2"
    assert [p["type"] for p in rule["prerequisites"]] == ["lesson", "quiz"]
    assert rule["prerequisites"][0]["required_status"] == "COMPLETED"


def test_save_replaces_previous_rules(client: TestClient, admin_token: str) -> None:
    add_course("course-1", "t1")
    client.post(URL.format("course-1"), json=_rules_body(), headers=auth(admin_token))
    client.post(
        URL.format("course-1"), json=_rules_body(rules=[]), headers=auth(admin_token)
    )
    read = client.get(URL.format("course-1"), headers=auth(admin_token))
    assert read.json()["rules"] == []


def test_invalid_body_is_400(client: TestClient, admin_token: str) -> None:
    add_course("course-1", "t1")
    resp = client.post(
        URL.format("course-1"),
        json=_rules_body(allowed_roles=["guest"]),
        headers=auth(admin_token),
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid request parameters"


def test_unknown_prerequisite_type_is_400(client: TestClient, admin_token: str) -> None:
    add_course("course-1", "t1")
    rules = [
        {
            "resource_type": "module",
            "resource_id": "m2",
            "prerequisites": [{"type": "badge", "id": "b1"}],
        }
    ]
    resp = client.post(
        URL.format("course-1"), json=_rules_body(rules=rules), headers=auth(admin_token)
    )
    assert resp.status_code == 400


def test_inverted_window_is_400(client: TestClient, admin_token: str) -> None:
    add_course("course-1", "t1")
    rules = [
        {
            "resource_type": "module",
            "resource_id": "m2",
            "available_from": "2026-02-01T00:00:00Z",
            "available_until": "2026-01-01T00:00:00Z",
        }
    ]
    resp = client.post(
        URL.format("course-1"), json=_rules_body(rules=rules), headers=auth(admin_token)
    )
    assert resp.status_code == 400


def test_self_prerequisite_is_400(client: TestClient, admin_token: str) -> None:
    add_course("course-1", "t1")
    rules = [
        {
            "resource_type": "module",
            "resource_id": "m2",
            "prerequisites": [{"type": "module", "id": "m2"}],
        }
    ]
    resp = client.post(
        URL.format("course-1"), json=_rules_body(rules=rules), headers=auth(admin_token)
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "A resource cannot be its own prerequisite"


def test_window_without_timezone_is_400(client: TestClient, admin_token: str) -> None:
    add_course("course-1", "t1")
    rules = [
        {
            "resource_type": "module",
            "resource_id": "m2",
            "available_from": "2026-01-01T00:00:00",
            "available_until": "2026-02-01T00:00:00Z",
        }
    ]
    resp = client.post(
        URL.format("course-1"), json=_rules_body(rules=rules), headers=auth(admin_token)
    )
    assert resp.status_code == 400
    assert resp.json()["details"][0]["type"] == "timezone_aware"
