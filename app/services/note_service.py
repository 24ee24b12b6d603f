"""
Service layer for notes: creación, listado, búsqueda, edición y borrado.

Una nota sólo es visible para los usuarios en su `user_ids`. Las notas con
security password ocultan su contenido en listados y exigen un token de acceso
(ver `security_gate` y `token_service.create_note_access_token`) para leerlas
o editarlas.
"""
from typing import Dict, Any, List, Optional

from app.core.errors import DocumentNotFound, NoteLocked, NoteMissing
from app.core.share_code import generate_token
from app.infrastructure.db.document_store import DocumentStore
from app.repositories import note_repo
from app.services import security_gate
from app.services.token_service import note_access_allows


def _summary(note: Dict[str, Any]) -> Dict[str, Any]:
    locked = security_gate.is_protected(note)
    return {
        "id": note["id"],
        "title": note.get("title") or "",
        "content": None if locked else note.get("content") or "",
        "locked": locked,
        "created_at": note.get("created_at"),
        "updated_at": note.get("updated_at"),
    }


def _detail(note: Dict[str, Any]) -> Dict[str, Any]:
    out = _summary(note)
    out["content"] = note.get("content") or ""
    out["security_password"] = note.get("security_password")
    out["user_ids"] = list(note.get("user_ids") or [])
    return out


async def create_note(store: DocumentStore, user_id: str, *, title: str, content: str) -> Dict[str, Any]:
    note_id = await note_repo.insert_note(
        store,
        {
            "title": title,
            "content": content,
            "user_ids": [str(user_id)],
            "token": generate_token(),
        },
    )
    note = await note_repo.get_note(store, note_id)
    return _detail(note or {"id": note_id, "title": title, "content": content, "user_ids": [str(user_id)]})


async def list_notes(store: DocumentStore, user_id: str) -> List[Dict[str, Any]]:
    notes = await note_repo.list_notes_for_user(store, user_id)
    return [_summary(n) for n in notes]


async def search_notes(store: DocumentStore, user_id: str, query: str) -> List[Dict[str, Any]]:
    """Subcadena sin distinguir mayúsculas en título o contenido (sólo título si la nota está protegida).

    Una consulta vacía coincide con todas las notas del usuario.
    """
    q = (query or "").strip().lower()
    notes = await note_repo.list_notes_for_user(store, user_id)
    if not q:
        return [_summary(n) for n in notes]
    out: List[Dict[str, Any]] = []
    for n in notes:
        haystacks = [n.get("title") or ""]
        if not security_gate.is_protected(n):
            haystacks.append(n.get("content") or "")
        if any(q in h.lower() for h in haystacks):
            out.append(_summary(n))
    return out


async def get_visible_note(store: DocumentStore, user_id: str, note_id: str) -> Dict[str, Any]:
    """Documento crudo de la nota si el usuario es miembro; si no, NoteMissing."""
    note = await note_repo.get_note(store, note_id)
    if not note or str(user_id) not in (note.get("user_ids") or []):
        raise NoteMissing()
    return note


def require_unlocked(note: Dict[str, Any], user_id: str, note_access: Optional[str]) -> None:
    if security_gate.is_protected(note) and not note_access_allows(
        note_access,
        user_id=user_id,
        note_id=note["id"],
        security_password=note.get("security_password"),
    ):
        raise NoteLocked()


async def open_note(
    store: DocumentStore, user_id: str, note_id: str, note_access: Optional[str] = None
) -> Dict[str, Any]:
    note = await get_visible_note(store, user_id, note_id)
    require_unlocked(note, user_id, note_access)
    return _detail(note)


async def update_note(
    store: DocumentStore,
    user_id: str,
    note_id: str,
    *,
    title: str,
    content: str,
    security_password: Optional[str],
    note_access: Optional[str] = None,
) -> Dict[str, Any]:
    """Guarda contenido; cualquier edición re-genera el token (invalida QRs previos)."""
    note = await get_visible_note(store, user_id, note_id)
    require_unlocked(note, user_id, note_access)
    try:
        changes = await note_repo.update_note_content(
            store,
            note_id,
            title=title,
            content=content,
            security_password=security_password,
            token=generate_token(),
        )
    except DocumentNotFound:
        raise NoteMissing()
    note.update(changes)
    return _detail(note)


async def delete_note(
    store: DocumentStore, user_id: str, note_id: str, note_access: Optional[str] = None
) -> None:
    note = await get_visible_note(store, user_id, note_id)
    require_unlocked(note, user_id, note_access)
    await note_repo.delete_note(store, note_id)
