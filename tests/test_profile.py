import pytest


def test_get_creates_row_with_defaults(client, auth, db):
    from dailyquiz.models.orm import User
    r = client.get("/v1/profile", headers=auth("nora", email="nora@example.com"))
    assert r.status_code == 200
    assert r.json() == {"email": "nora@example.com", "display_name": "", "role": "user"}
    assert db.get(User, "nora") is not None


def test_rename_trims_and_persists(client, auth):
    hdr = auth("omar")
    r = client.post("/v1/profile", headers=hdr, json={"display_name": "  Omar K  "})
    assert r.json() == {"status": "updated"}
    assert client.get("/v1/profile", headers=hdr).json()["display_name"] == "Omar K"


@pytest.mark.parametrize("name,status", [
    ("A", 400), ("  A  ", 400), ("", 400), (None, 400), ("x" * 31, 400),
    ("Al", 200), ("x" * 30, 200),
])
def test_display_name_bounds(client, auth, name, status):
    r = client.post("/v1/profile", headers=auth("pia"), json={"display_name": name})
    assert r.status_code == status


def test_role_is_reported(client, auth):
    assert client.get("/v1/profile", headers=auth("quinn", role="moderator")).json()["role"] == "moderator"


def test_profile_requires_session(client):
    assert client.get("/v1/profile").status_code == 401
    assert client.post("/v1/profile", json={"display_name": "Rex"}).status_code == 401
