"""
Esquemas Pydantic para la colección `users`.

Reglas clave:
- Campos en snake_case.
- `email` se guarda siempre en minúsculas.
- `password` es una copia redundante del password de login; ningún flujo la lee.
- Timestamps en ISO-8601 UTC.
"""

from typing import Optional
from pydantic import BaseModel, EmailStr


class UserOut(BaseModel):
    """Respuesta pública de usuario (sin secretos)."""
    id: str
    name: Optional[str] = None
    email: EmailStr
    has_security_password: bool = False
