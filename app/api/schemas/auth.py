"""
Esquemas Pydantic para operaciones de autenticación.

- Mantiene las validaciones y normalizaciones (p. ej. email en minúsculas).
- Modelos pensados para separar la capa API de la lógica de negocio.
"""

from typing import Optional
from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator


def required_text(v: Optional[str]) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError("Field is required")
    return v


def optional_security_password(v: Optional[str], info: ValidationInfo) -> Optional[str]:
    """Vacía el valor si el interruptor está apagado; lo exige si está encendido."""
    if not info.data.get("security_password_enabled"):
        return None
    return required_text(v)


class RegisterPayload(BaseModel):
    """Payload de registro.

    - `password`: mínimo 6 caracteres.
    - Si `security_password_enabled`, `security_password` no puede ir vacío.
    """

    name: str
    email: EmailStr
    password: str
    security_password_enabled: bool = False
    security_password: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return required_text(v)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: EmailStr) -> str:
        return str(v).strip().lower()

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        v = required_text(v)
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v

    @field_validator("security_password")
    @classmethod
    def _security_password(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        return optional_security_password(v, info)


class LoginPayload(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: EmailStr) -> str:
        return str(v).strip().lower()

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        return required_text(v)


class SecurityPasswordPayload(BaseModel):
    # El vacío se rechaza en la capa de servicio (antes de consultar la base)
    security_password: Optional[str] = None


class SessionOut(BaseModel):
    user_id: str
    access_token: str
    token_type: str = "bearer"
    security_password_required: bool = False


class RegisterOut(BaseModel):
    message: str
    id: str
