"""
Endpoints para compartir una nota por QR e importarla desde el payload escaneado.

El servidor no guarda estado entre la vista previa y la confirmación: la
importación confirmada vuelve a verificar el código antes de escribir.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Header

from app.api.deps import get_current_user, get_store
from app.api.schemas.share import ImportOut, ImportPreviewOut, ScanPayload, ShareOut
from app.core import busy
from app.infrastructure.db.document_store import DocumentStore
from app.services import note_service
from app.services.share_service import ImportFlow, share_note

router = APIRouter(prefix="/notes", tags=["Share"])


@router.post(
    "/import/preview",
    response_model=ImportPreviewOut,
    summary="Verificar código escaneado",
    description="Decodifica el payload, trae la nota y compara el token. Devuelve el título para confirmar.",
)
async def preview_import(
    payload: ScanPayload,
    user=Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
) -> ImportPreviewOut:
    flow = ImportFlow(store, user["id"])
    async with busy.hold(user["id"], "import"):
        note = await flow.scan(payload.payload)
    return ImportPreviewOut(
        note_id=note["id"],
        title=note.get("title") or "",
        already_member=flow.already_member,
        state=flow.state.value,
    )


@router.post(
    "/import",
    response_model=ImportOut,
    summary="Importar nota",
    description="Confirma la importación: agrega al usuario al acceso de la nota (sin duplicados).",
)
async def import_note(
    payload: ScanPayload,
    user=Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
) -> ImportOut:
    flow = ImportFlow(store, user["id"])
    async with busy.hold(user["id"], "import"):
        await flow.scan(payload.payload)
        note = await flow.confirm()
    return ImportOut(
        message="ok",
        note_id=note["id"],
        title=note.get("title") or "",
        user_ids=note["user_ids"],
        state=flow.state.value,
    )


@router.post(
    "/{note_id}/share",
    response_model=ShareOut,
    summary="Compartir nota",
    description="Rota el token de la nota (invalida QRs previos) y devuelve el payload y su QR en PNG base64.",
)
async def share(
    note_id: str,
    x_note_access: Optional[str] = Header(default=None),
    user=Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
) -> ShareOut:
    async with busy.hold(user["id"], f"share:{note_id}"):
        note = await note_service.get_visible_note(store, user["id"], note_id)
        note_service.require_unlocked(note, user["id"], x_note_access)
        code = await share_note(store, note)
    return ShareOut(
        note_id=code.note_id,
        token=code.token,
        payload=code.payload,
        qr_png_base64=code.qr_png_base64(),
        state=code.state.value,
    )
