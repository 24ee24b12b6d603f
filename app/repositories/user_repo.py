"""Repo de la colección `users` (perfil), indexada por el id de identidad."""
from typing import Dict, Any, Optional
from datetime import datetime, timezone

from app.infrastructure.db.document_store import DocumentStore

COLLECTION = "users"


def _now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


async def insert_user(store: DocumentStore, user_id: str, doc: Dict[str, Any]) -> str:
    """Crea el perfil con el mismo id que asignó el servicio de identidad."""
    data = dict(doc)
    now = _now_iso()
    data["email"] = str(data.get("email", "")).lower()
    data.setdefault("security_password", None)
    data.setdefault("created_at", now)
    data["updated_at"] = now
    return await store.create_document(COLLECTION, data, document_id=user_id)


async def get_user(store: DocumentStore, user_id: str) -> Optional[Dict[str, Any]]:
    return await store.get_document(COLLECTION, user_id)
