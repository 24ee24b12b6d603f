"""Persistencia del servicio de identidad (credenciales y versión de token)."""
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from app.infrastructure.db.document_store import DocumentStore

IDENTITY_COLL = "identities"


def _now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


async def find_identity_by_email(store: DocumentStore, email: str) -> Optional[Dict[str, Any]]:
    """Busca identidad por email (email en minúsculas)."""
    found = await store.query(IDENTITY_COLL, "email", "==", email.lower())
    return found[0] if found else None


async def get_identity(store: DocumentStore, user_id: str) -> Optional[Dict[str, Any]]:
    return await store.get_document(IDENTITY_COLL, user_id)


async def insert_identity(store: DocumentStore, email: str, password_hash: str) -> str:
    now = _now_iso()
    return await store.create_document(
        IDENTITY_COLL,
        {
            "email": email.lower(),
            "password_hash": password_hash,
            "token_version": 0,
            "created_at": now,
            "updated_at": now,
        },
    )


async def increment_token_version(store: DocumentStore, user_id: str) -> int:
    """Incrementa token_version (invalidando access tokens previos); devuelve el nuevo valor."""
    ident = await store.get_document(IDENTITY_COLL, user_id)
    if not ident:
        return 0
    version = int(ident.get("token_version", 0)) + 1
    await store.update_fields(IDENTITY_COLL, user_id, {"token_version": version, "updated_at": _now_iso()})
    return version


async def delete_identity(store: DocumentStore, user_id: str) -> None:
    await store.delete_document(IDENTITY_COLL, user_id)
