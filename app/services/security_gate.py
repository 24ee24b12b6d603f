"""
Security password: compuerta de visibilidad para cuentas y notas.

Comparación en texto plano y sensible a mayúsculas contra el valor guardado.
Sin bloqueo ni contador de intentos. No cifra nada: quien tenga acceso directo
a la base la evita por completo.
"""
from typing import Any, Dict, Optional

from app.core.errors import FieldValidationError, NoteMissing, SecurityPasswordMismatch, UserNotFound
from app.infrastructure.db.document_store import DocumentStore
from app.repositories import note_repo, user_repo


def is_protected(doc: Optional[Dict[str, Any]]) -> bool:
    return bool(((doc or {}).get("security_password") or "").strip())


def require_submitted(submitted: Optional[str]) -> str:
    """Rechaza localmente un valor vacío (antes de tocar la base)."""
    value = (submitted or "").strip()
    if not value:
        raise FieldValidationError("security_password", "Security password is required")
    return value


def check_security_password(submitted: Optional[str], stored: Optional[str]) -> None:
    value = require_submitted(submitted)
    if value != (stored or ""):
        raise SecurityPasswordMismatch()


async def verify_account_password(store: DocumentStore, user_id: str, submitted: Optional[str]) -> None:
    require_submitted(submitted)
    user = await user_repo.get_user(store, user_id)
    if not user:
        raise UserNotFound()
    check_security_password(submitted, user.get("security_password"))


async def verify_note_password(
    store: DocumentStore, note_id: str, user_id: str, submitted: Optional[str]
) -> Dict[str, Any]:
    """Devuelve la nota desbloqueada (para atar el token de acceso a su password vigente)."""
    require_submitted(submitted)
    note = await note_repo.get_note(store, note_id)
    if not note or str(user_id) not in (note.get("user_ids") or []):
        raise NoteMissing()
    check_security_password(submitted, note.get("security_password"))
    return note
