import pytest

from app.core.errors import FieldValidationError, NoteMissing, SecurityPasswordMismatch
from app.repositories import note_repo, user_repo
from app.services import security_gate


@pytest.mark.parametrize("submitted", ["", "   ", None])
async def test_blank_password_never_reaches_store(store, submitted):
    with pytest.raises(FieldValidationError) as exc:
        await security_gate.verify_account_password(store, "u1", submitted)
    assert exc.value.field == "security_password"
    assert not isinstance(exc.value, SecurityPasswordMismatch)
    assert store.calls == []


async def test_matching_password_unlocks(store):
    await user_repo.insert_user(store, "u1", {"name": "Ana", "email": "ana@mail.com", "security_password": "Sesame"})
    await security_gate.verify_account_password(store, "u1", "Sesame")


@pytest.mark.parametrize("submitted", ["sesame", "Sesame!", "other"])
async def test_other_values_are_rejected(store, submitted):
    await user_repo.insert_user(store, "u1", {"name": "Ana", "email": "ana@mail.com", "security_password": "Sesame"})
    with pytest.raises(SecurityPasswordMismatch):
        await security_gate.verify_account_password(store, "u1", submitted)


async def test_note_gate_requires_membership(store):
    note_id = await note_repo.insert_note(
        store, {"title": "t", "content": "c", "user_ids": ["u1"], "token": "A" * 16, "security_password": "pin"}
    )
    await security_gate.verify_note_password(store, note_id, "u1", "pin")
    with pytest.raises(NoteMissing):
        await security_gate.verify_note_password(store, note_id, "intruder", "pin")
    with pytest.raises(SecurityPasswordMismatch):
        await security_gate.verify_note_password(store, note_id, "u1", "PIN")


def test_is_protected_ignores_blank_values():
    assert not security_gate.is_protected({"security_password": None})
    assert not security_gate.is_protected({"security_password": "  "})
    assert security_gate.is_protected({"security_password": "x"})
