"""
Esquemas Pydantic para `notes`.
"""
from typing import List, Optional
from pydantic import BaseModel, Field, ValidationInfo, field_validator

from app.api.schemas.auth import optional_security_password, required_text


class NoteCreate(BaseModel):
    title: str
    content: str

    @field_validator("title")
    @classmethod
    def _title(cls, v: str) -> str:
        return required_text(v)

    @field_validator("content")
    @classmethod
    def _content(cls, v: str) -> str:
        # El contenido se guarda tal cual (sin trim), pero no puede ser blanco
        required_text(v)
        return v


class NoteUpdate(NoteCreate):
    """Edición completa: `security_password_enabled=False` borra la security password."""

    security_password_enabled: bool = False
    security_password: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("security_password")
    @classmethod
    def _security_password(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        return optional_security_password(v, info)


class NoteSummaryOut(BaseModel):
    id: str
    title: str
    content: Optional[str] = None  # None si la nota está protegida
    locked: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class NoteOut(NoteSummaryOut):
    content: str
    security_password: Optional[str] = None
    user_ids: List[str]


class NoteListOut(BaseModel):
    notes: List[NoteSummaryOut]


class NoteUnlockOut(BaseModel):
    note_id: str
    note_access_token: str
