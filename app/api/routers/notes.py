"""
Endpoints para `notes`: listado/búsqueda, alta, lectura, edición, borrado y
desbloqueo de notas protegidas con security password.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, Response, status

from app.api.deps import get_current_user, get_store
from app.api.schemas.auth import SecurityPasswordPayload
from app.api.schemas.note import NoteCreate, NoteListOut, NoteOut, NoteUnlockOut, NoteUpdate
from app.core import busy
from app.infrastructure.db.document_store import DocumentStore
from app.services import note_service, security_gate
from app.services.token_service import create_note_access_token

router = APIRouter(prefix="/notes", tags=["Notes"])


@router.get(
    "",
    response_model=NoteListOut,
    summary="Listar notas",
    description="Notas visibles para el usuario; con `q` filtra por título/contenido.",
)
async def list_notes(
    q: Optional[str] = Query(default=None),
    user=Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
) -> NoteListOut:
    if q is not None:
        items = await note_service.search_notes(store, user["id"], q)
    else:
        items = await note_service.list_notes(store, user["id"])
    return NoteListOut(notes=items)


@router.post("", response_model=NoteOut, status_code=status.HTTP_201_CREATED, summary="Crear nota")
async def create_note(
    payload: NoteCreate,
    user=Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
) -> NoteOut:
    async with busy.hold(user["id"], "create_note"):
        note = await note_service.create_note(store, user["id"], title=payload.title, content=payload.content)
    return NoteOut(**note)


@router.get("/{note_id}", response_model=NoteOut, summary="Leer nota")
async def get_note(
    note_id: str,
    x_note_access: Optional[str] = Header(default=None),
    user=Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
) -> NoteOut:
    note = await note_service.open_note(store, user["id"], note_id, x_note_access)
    return NoteOut(**note)


@router.put(
    "/{note_id}",
    response_model=NoteOut,
    summary="Editar nota",
    description="Guarda título/contenido/security password y re-genera el token de compartición.",
)
async def update_note(
    note_id: str,
    payload: NoteUpdate,
    x_note_access: Optional[str] = Header(default=None),
    user=Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
) -> NoteOut:
    async with busy.hold(user["id"], f"edit:{note_id}"):
        note = await note_service.update_note(
            store,
            user["id"],
            note_id,
            title=payload.title,
            content=payload.content,
            security_password=payload.security_password,
            note_access=x_note_access,
        )
    return NoteOut(**note)


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Borrar nota")
async def delete_note(
    note_id: str,
    x_note_access: Optional[str] = Header(default=None),
    user=Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
) -> Response:
    async with busy.hold(user["id"], f"edit:{note_id}"):
        await note_service.delete_note(store, user["id"], note_id, x_note_access)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{note_id}/unlock",
    response_model=NoteUnlockOut,
    summary="Desbloquear nota protegida",
    description="Verifica la security password de la nota y devuelve un token para `X-Note-Access`.",
)
async def unlock_note(
    note_id: str,
    payload: SecurityPasswordPayload,
    user=Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
) -> NoteUnlockOut:
    async with busy.hold(user["id"], f"unlock:{note_id}"):
        note = await security_gate.verify_note_password(store, note_id, user["id"], payload.security_password)
    token = create_note_access_token(
        user_id=user["id"], note_id=note_id, security_password=note.get("security_password")
    )
    return NoteUnlockOut(note_id=note_id, note_access_token=token)
