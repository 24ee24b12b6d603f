"""
Token de compartición y formato del payload QR.

El payload es texto UTF-8 `"<note_id>  <token>"`: id de la nota, exactamente dos
espacios y el token. Los escáneres existentes dependen de ese separador.
"""
import secrets
import string
from typing import NamedTuple

from app.core.errors import InvalidCodeFormat

TOKEN_LENGTH = 16
TOKEN_ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits
PAYLOAD_SEPARATOR = "  "


class ScannedCode(NamedTuple):
    note_id: str
    token: str


def generate_token() -> str:
    """16 caracteres uniformes sobre [a-zA-Z0-9]. Sin garantía de unicidad."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(TOKEN_LENGTH))


def encode_payload(note_id: str, token: str) -> str:
    return f"{note_id}{PAYLOAD_SEPARATOR}{token}"


def decode_payload(raw: str) -> ScannedCode:
    """Separa el payload escaneado; exige exactamente dos campos no vacíos."""
    parts = (raw or "").split(PAYLOAD_SEPARATOR)
    if len(parts) != 2 or not all(parts):
        raise InvalidCodeFormat()
    return ScannedCode(note_id=parts[0], token=parts[1])
