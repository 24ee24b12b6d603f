"""
Errores de dominio de la API de notas.

Cada familia corresponde a una categoría de manejo:

- Validación (`FieldValidationError`): entrada vacía o mal formada, se detecta
  antes de cualquier llamada a la base; se muestra junto al campo y no se loggea.
- Servicio (`ServiceError`): cualquier fallo del almacén de documentos o del
  servicio de identidad; se loggea y se responde con un mensaje genérico.
- Rechazos semánticos (`InvalidCode` y subclases): QR mal formado, nota
  inexistente o token distinto; todos salen con el mismo mensaje genérico.
- Fatales para el flujo (`NoteMissing`): la pantalla esperaba una nota que no está.

`app/core/exceptions.py` traduce estas excepciones a respuestas HTTP.
"""
from typing import Optional


class NotesError(Exception):
    """Base de todos los errores de dominio."""

    message = "Error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message


class FieldValidationError(NotesError):
    message = "Validation error"

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class ServiceError(NotesError):
    """Fallo de transporte o del servicio externo (no se reintenta)."""

    message = "Please try again"


class DocumentNotFound(NotesError):
    """El almacén no tiene el documento pedido (p.ej. update sobre id inexistente)."""

    message = "Document not found"


class InvalidCode(NotesError):
    """Rechazo de un código QR. La subclase sólo se usa internamente (logs)."""

    message = "Invalid code"
    reason = "invalid_code"


class InvalidCodeFormat(InvalidCode):
    reason = "invalid_code_format"


class NoteNotFound(InvalidCode):
    reason = "note_not_found"


class TokenMismatch(InvalidCode):
    reason = "token_mismatch"


class NoteMissing(NotesError):
    message = "Note not found"


class InvalidCredentials(NotesError):
    message = "Invalid credentials"


class UserNotFound(NotesError):
    message = "User not found"


class SessionLocked(NotesError):
    message = "Security password required"


class NoteLocked(NotesError):
    message = "Note security password required"


class SecurityPasswordMismatch(FieldValidationError):
    def __init__(self) -> None:
        super().__init__("security_password", "Invalid security password")


class FlowBusy(NotesError):
    message = "Busy"

    def __init__(self, flow: str) -> None:
        super().__init__()
        self.flow = flow
