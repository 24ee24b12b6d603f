import logging

from app.core import busy
from app.core.errors import ServiceError


def test_end_to_end_share_and_import(client, signup, store):
    owner_headers, owner_id = signup("owner@mail.com", name="Owner")
    reader_headers, reader_id = signup("reader@mail.com", name="Reader")

    r = client.post("/api/notes", json={"title": "Groceries", "content": "Milk, eggs"}, headers=owner_headers)
    assert r.status_code == 201, r.text
    note = r.json()
    assert note["user_ids"] == [owner_id]
    first_token = store.raw("notes", note["id"])["token"]
    assert len(first_token) == 16

    r = client.post(f"/api/notes/{note['id']}/share", headers=owner_headers)
    assert r.status_code == 200, r.text
    shared = r.json()
    assert shared["token"] != first_token
    assert shared["payload"] == f"{note['id']}  {shared['token']}"
    assert shared["qr_png_base64"]

    r = client.post("/api/notes/import/preview", json={"payload": shared["payload"]}, headers=reader_headers)
    assert r.status_code == 200, r.text
    assert r.json()["title"] == "Groceries"
    assert r.json()["state"] == "accepted"

    r = client.post("/api/notes/import", json={"payload": shared["payload"]}, headers=reader_headers)
    assert r.status_code == 200, r.text
    assert r.json()["user_ids"] == [owner_id, reader_id]

    r = client.get("/api/notes", headers=reader_headers)
    assert [n["id"] for n in r.json()["notes"]] == [note["id"]]


def test_invalid_codes_share_one_message(client, signup):
    headers, _ = signup("reader@mail.com")
    for payload in ("onlyonefield", "missing  Tkn0123456789012"):
        r = client.post("/api/notes/import/preview", json={"payload": payload}, headers=headers)
        assert r.status_code == 400
        assert r.json()["message"] == "Invalid code"


def test_stale_code_is_rejected(client, signup):
    headers, _ = signup("owner@mail.com")
    reader, _ = signup("reader@mail.com")
    note = client.post("/api/notes", json={"title": "t", "content": "c"}, headers=headers).json()
    old = client.post(f"/api/notes/{note['id']}/share", headers=headers).json()["payload"]
    client.post(f"/api/notes/{note['id']}/share", headers=headers)

    r = client.post("/api/notes/import", json={"payload": old}, headers=reader)
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid code"


def test_register_validation_errors_point_at_fields(client):
    r = client.post(
        "/api/auth/register",
        json={"name": " ", "email": "bad", "password": "123", "security_password_enabled": True},
    )
    assert r.status_code == 422
    fields = {e["field"] for e in r.json()["errors"]}
    assert {"name", "email", "password", "security_password"} <= fields


def test_duplicate_registration(client, signup):
    signup("ana@mail.com")
    r = client.post("/api/auth/register", json={"name": "Ana", "email": "ana@mail.com", "password": "secret1"})
    assert r.status_code == 422
    assert r.json()["errors"] == [{"field": "email", "message": "Email already registered"}]


def test_login_with_bad_credentials(client, signup):
    signup("ana@mail.com")
    r = client.post("/api/auth/login", json={"email": "ana@mail.com", "password": "wrong12"})
    assert r.status_code == 401


def test_account_security_password_gate(client, signup):
    headers, user_id = signup("ana@mail.com", security_password="Sesame")

    assert client.get("/api/notes", headers=headers).status_code == 403
    assert client.get("/api/auth/me", headers=headers).status_code == 403

    r = client.post("/api/auth/security-password", json={"security_password": ""}, headers=headers)
    assert r.status_code == 422
    r = client.post("/api/auth/security-password", json={"security_password": "sesame"}, headers=headers)
    assert r.status_code == 422
    assert r.json()["errors"][0]["field"] == "security_password"

    r = client.post("/api/auth/security-password", json={"security_password": "Sesame"}, headers=headers)
    assert r.status_code == 200
    unlocked = {"Authorization": f"Bearer {r.json()['access_token']}"}
    assert client.get("/api/notes", headers=unlocked).status_code == 200

    me = client.get("/api/auth/me", headers=unlocked).json()
    assert me == {"id": user_id, "name": "Tester", "email": "ana@mail.com", "has_security_password": True}


def test_logout_invalidates_session(client, signup):
    headers, _ = signup("ana@mail.com")
    assert client.post("/api/auth/logout", headers=headers).status_code == 200
    assert client.get("/api/notes", headers=headers).status_code == 401


def test_missing_token(client):
    assert client.get("/api/notes").status_code == 401


def test_note_security_password_flow(client, signup):
    headers, _ = signup("ana@mail.com")
    note = client.post("/api/notes", json={"title": "Diary", "content": "secret stuff"}, headers=headers).json()

    r = client.put(
        f"/api/notes/{note['id']}",
        json={"title": "Diary", "content": "secret stuff", "security_password_enabled": True, "security_password": "pin"},
        headers=headers,
    )
    assert r.status_code == 200

    listed = client.get("/api/notes", headers=headers).json()["notes"][0]
    assert listed["locked"] is True
    assert listed["content"] is None

    assert client.get(f"/api/notes/{note['id']}", headers=headers).status_code == 403
    assert client.post(f"/api/notes/{note['id']}/share", headers=headers).status_code == 403

    r = client.post(f"/api/notes/{note['id']}/unlock", json={"security_password": "nope"}, headers=headers)
    assert r.status_code == 422

    r = client.post(f"/api/notes/{note['id']}/unlock", json={"security_password": "pin"}, headers=headers)
    assert r.status_code == 200
    access = {**headers, "X-Note-Access": r.json()["note_access_token"]}

    r = client.get(f"/api/notes/{note['id']}", headers=access)
    assert r.status_code == 200
    assert r.json()["content"] == "secret stuff"

    r = client.put(
        f"/api/notes/{note['id']}",
        json={"title": "Diary", "content": "now public"},
        headers=access,
    )
    assert r.status_code == 200
    assert r.json()["security_password"] is None
    assert client.get(f"/api/notes/{note['id']}", headers=headers).status_code == 200


def test_note_access_token_dies_when_password_changes(client, signup):
    headers, _ = signup("ana@mail.com")
    note = client.post("/api/notes", json={"title": "Diary", "content": "secret"}, headers=headers).json()
    protect = lambda pw, h: client.put(
        f"/api/notes/{note['id']}",
        json={"title": "Diary", "content": "secret", "security_password_enabled": True, "security_password": pw},
        headers=h,
    )
    assert protect("pin", headers).status_code == 200

    r = client.post(f"/api/notes/{note['id']}/unlock", json={"security_password": "pin"}, headers=headers)
    old_access = {**headers, "X-Note-Access": r.json()["note_access_token"]}
    assert protect("newpin", old_access).status_code == 200

    assert client.get(f"/api/notes/{note['id']}", headers=old_access).status_code == 403

    r = client.post(f"/api/notes/{note['id']}/unlock", json={"security_password": "newpin"}, headers=headers)
    new_access = {**headers, "X-Note-Access": r.json()["note_access_token"]}
    assert client.get(f"/api/notes/{note['id']}", headers=new_access).status_code == 200


def test_edit_requires_security_password_when_enabled(client, signup):
    headers, _ = signup("ana@mail.com")
    note = client.post("/api/notes", json={"title": "t", "content": "c"}, headers=headers).json()
    r = client.put(
        f"/api/notes/{note['id']}",
        json={"title": "t", "content": "c", "security_password_enabled": True, "security_password": "  "},
        headers=headers,
    )
    assert r.status_code == 422
    assert r.json()["errors"][0]["field"] == "security_password"


def test_edit_regenerates_token(client, signup, store):
    headers, _ = signup("ana@mail.com")
    note = client.post("/api/notes", json={"title": "t", "content": "c"}, headers=headers).json()
    before = store.raw("notes", note["id"])["token"]
    client.put(f"/api/notes/{note['id']}", json={"title": "t2", "content": "c2"}, headers=headers)
    after = store.raw("notes", note["id"])
    assert after["token"] != before
    assert after["title"] == "t2"


def test_create_rejects_blank_fields(client, signup):
    headers, _ = signup("ana@mail.com")
    r = client.post("/api/notes", json={"title": "  ", "content": ""}, headers=headers)
    assert r.status_code == 422
    assert {e["field"] for e in r.json()["errors"]} == {"title", "content"}


def test_search_matches_title_or_content(client, signup):
    headers, _ = signup("ana@mail.com")
    client.post("/api/notes", json={"title": "Groceries", "content": "Milk, eggs"}, headers=headers)
    client.post("/api/notes", json={"title": "Work", "content": "Call Bob"}, headers=headers)

    titles = lambda q: sorted(n["title"] for n in client.get("/api/notes", params={"q": q}, headers=headers).json()["notes"])
    assert titles("MILK") == ["Groceries"]
    assert titles("o") == ["Groceries", "Work"]
    assert titles("") == ["Groceries", "Work"]
    assert titles("   ") == ["Groceries", "Work"]
    assert titles("zzz") == []


def test_notes_are_private_until_imported(client, signup):
    owner, _ = signup("owner@mail.com")
    other, _ = signup("other@mail.com")
    note = client.post("/api/notes", json={"title": "t", "content": "c"}, headers=owner).json()

    assert client.get("/api/notes", headers=other).json()["notes"] == []
    assert client.get(f"/api/notes/{note['id']}", headers=other).status_code == 404
    assert client.delete(f"/api/notes/{note['id']}", headers=other).status_code == 404


def test_delete_note(client, signup):
    headers, _ = signup("ana@mail.com")
    note = client.post("/api/notes", json={"title": "t", "content": "c"}, headers=headers).json()
    assert client.delete(f"/api/notes/{note['id']}", headers=headers).status_code == 204
    assert client.get(f"/api/notes/{note['id']}", headers=headers).status_code == 404


def test_store_failure_is_generic(client, signup, store):
    headers, _ = signup("ana@mail.com")
    store.fail_on.add(("create_document", "notes"))
    r = client.post("/api/notes", json={"title": "t", "content": "c"}, headers=headers)
    assert r.status_code == 503
    assert r.json()["message"] == "Please try again"


def test_store_failure_is_logged_with_traceback(client, signup, store, caplog):
    headers, _ = signup("ana@mail.com")
    store.fail_on.add(("query", "notes"))
    with caplog.at_level(logging.ERROR, logger="notes.errors"):
        assert client.get("/api/notes", headers=headers).status_code == 503
    records = [r for r in caplog.records if r.name == "notes.errors"]
    assert records and records[0].exc_info[0] is ServiceError


def test_busy_screen_rejects_second_action(client, signup):
    headers, user_id = signup("ana@mail.com")
    busy.HELD.add((user_id, "create_note"))
    r = client.post("/api/notes", json={"title": "t", "content": "c"}, headers=headers)
    assert r.status_code == 409
    assert r.json()["flow"] == "create_note"


def test_request_id_is_echoed(client):
    r = client.get("/api/ping", headers={"X-Request-Id": "abc"})
    assert r.json() == {"message": "pong"}
    assert r.headers["X-Request-Id"] == "abc"
