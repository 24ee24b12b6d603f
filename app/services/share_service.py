"""
Compartir e importar notas mediante QR.

Emisor: `share_note` re-genera el token de la nota, lo persiste (invalidando
cualquier QR anterior) y produce el payload `"<note_id>  <token>"` con su PNG.

Receptor: `ImportFlow` decodifica el payload, trae la nota, compara el token y,
tras la confirmación del usuario, agrega su id a `user_ids`. Los pasos son
estrictamente secuenciales y ninguno se reintenta.

    idle -> generating_token -> awaiting_scan              (emisor)
    idle -> verifying_token -> accepted | rejected         (receptor)
    accepted -> imported | cancelled
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from app.core.errors import (
    DocumentNotFound,
    InvalidCode,
    NoteMissing,
    NoteNotFound,
    TokenMismatch,
)
from app.core.share_code import decode_payload, encode_payload, generate_token
from app.infrastructure.db.document_store import DocumentStore
from app.infrastructure.qr.qr_renderer import generate_qr_base64
from app.repositories import note_repo

_log = logging.getLogger("notes.share")


class ShareState(str, Enum):
    IDLE = "idle"
    GENERATING_TOKEN = "generating_token"
    AWAITING_SCAN = "awaiting_scan"
    VERIFYING_TOKEN = "verifying_token"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    IMPORTED = "imported"
    CANCELLED = "cancelled"


@dataclass
class ShareCode:
    note_id: str
    token: str = ""
    payload: str = ""
    state: ShareState = ShareState.IDLE

    def qr_png_base64(self) -> str:
        return generate_qr_base64(self.payload)


async def share_note(store: DocumentStore, note: Dict[str, Any]) -> ShareCode:
    """
    Rota el token de la nota y devuelve el código a mostrar.

    Si la persistencia falla no se produce ningún código (ServiceError se propaga).
    """
    code = ShareCode(note_id=note["id"], state=ShareState.GENERATING_TOKEN)
    code.token = generate_token()
    try:
        await note_repo.set_note_token(store, code.note_id, code.token)
    except DocumentNotFound:
        raise NoteMissing()
    code.payload = encode_payload(code.note_id, code.token)
    code.state = ShareState.AWAITING_SCAN
    _log.info("Nota compartida note_id=%s", code.note_id)
    return code


class ImportFlow:
    """Flujo de importación de un usuario receptor (una instancia por intento)."""

    def __init__(self, store: DocumentStore, user_id: str) -> None:
        self.store = store
        self.user_id = str(user_id)
        self.state = ShareState.IDLE
        self.note: Optional[Dict[str, Any]] = None
        self.rejection: Optional[str] = None

    async def scan(self, raw_payload: str) -> Dict[str, Any]:
        """Decodifica, trae la nota y verifica el token. Devuelve la nota aceptada."""
        self.state = ShareState.VERIFYING_TOKEN
        try:
            code = decode_payload(raw_payload)
            note = await note_repo.get_note(self.store, code.note_id)
            if not note:
                raise NoteNotFound()
            if note.get("token") != code.token:
                raise TokenMismatch()
        except InvalidCode as e:
            self.state = ShareState.REJECTED
            self.rejection = e.reason
            _log.info("Importación rechazada user_id=%s reason=%s", self.user_id, e.reason)
            raise
        self.note = note
        self.state = ShareState.ACCEPTED
        return note

    @property
    def already_member(self) -> bool:
        return bool(self.note) and self.user_id in (self.note.get("user_ids") or [])

    async def confirm(self) -> Dict[str, Any]:
        """Agrega al usuario a `user_ids` (sin duplicados); el token no cambia."""
        if self.state is not ShareState.ACCEPTED or self.note is None:
            raise RuntimeError(f"confirm() no válido en estado {self.state.value}")
        current = list(self.note.get("user_ids") or [])
        user_ids = list(dict.fromkeys(current + [self.user_id]))
        if user_ids != current:
            try:
                await note_repo.set_note_user_ids(self.store, self.note["id"], user_ids)
            except DocumentNotFound:
                self.state = ShareState.REJECTED
                self.rejection = NoteNotFound.reason
                raise NoteNotFound()
        self.note = {**self.note, "user_ids": user_ids}
        self.state = ShareState.IMPORTED
        _log.info("Nota importada note_id=%s user_id=%s", self.note["id"], self.user_id)
        return self.note

    def cancel(self) -> None:
        """Descarta el intento sin efectos secundarios."""
        if self.state in (ShareState.IMPORTED, ShareState.REJECTED):
            return
        self.note = None
        self.state = ShareState.CANCELLED
