"""Repo de la colección `notes`.

- `user_ids` guarda los ids (str) con acceso a la nota.
- Sella timestamps en ISO-8601 UTC (Z).
"""
from typing import Dict, Any, List, Optional
from datetime import datetime, timezone

from app.infrastructure.db.document_store import DocumentStore

COLLECTION = "notes"


def _now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


async def insert_note(store: DocumentStore, doc: Dict[str, Any]) -> str:
    """Inserta nota con defaults y devuelve id (str)."""
    data = dict(doc)
    now = _now_iso()
    data.setdefault("security_password", None)
    data.setdefault("created_at", now)
    data["updated_at"] = now
    return await store.create_document(COLLECTION, data)


async def get_note(store: DocumentStore, note_id: str) -> Optional[Dict[str, Any]]:
    return await store.get_document(COLLECTION, note_id)


async def list_notes_for_user(store: DocumentStore, user_id: str) -> List[Dict[str, Any]]:
    """Notas cuyo `user_ids` contiene al usuario (ordenadas por updated_at desc)."""
    return await store.query(COLLECTION, "user_ids", "array-contains", str(user_id), order_by="updated_at")


async def update_note_content(
    store: DocumentStore,
    note_id: str,
    *,
    title: str,
    content: str,
    security_password: Optional[str],
    token: str,
) -> Dict[str, Any]:
    """Actualiza contenido y re-sella `updated_at` y `token`; devuelve los campos escritos."""
    set_ops = {
        "title": title,
        "content": content,
        "security_password": security_password,
        "token": token,
        "updated_at": _now_iso(),
    }
    await store.update_fields(COLLECTION, note_id, set_ops)
    return set_ops


async def set_note_token(store: DocumentStore, note_id: str, token: str) -> None:
    await store.update_fields(COLLECTION, note_id, {"token": token})


async def set_note_user_ids(store: DocumentStore, note_id: str, user_ids: List[str]) -> None:
    await store.update_fields(COLLECTION, note_id, {"user_ids": list(user_ids)})


async def delete_note(store: DocumentStore, note_id: str) -> None:
    await store.delete_document(COLLECTION, note_id)
