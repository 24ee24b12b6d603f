"""Esquemas para compartir/importar notas por QR."""
from typing import List
from pydantic import BaseModel


class ShareOut(BaseModel):
    note_id: str
    token: str
    payload: str
    qr_png_base64: str
    state: str


class ScanPayload(BaseModel):
    """Texto decodificado del QR tal como lo entrega el escáner."""
    payload: str


class ImportPreviewOut(BaseModel):
    note_id: str
    title: str
    already_member: bool
    state: str


class ImportOut(BaseModel):
    message: str
    note_id: str
    title: str
    user_ids: List[str]
    state: str
