"""
Creación y verificación de JWTs para sesiones y acceso a notas protegidas.
"""
import hashlib
import hmac
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Literal, Optional
from uuid import uuid4

import jwt as pyjwt

from app.core.config import settings

Stage = Literal["locked", "unlocked"]


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(*, user_id: str, email: str, token_version: int, stage: Stage = "unlocked") -> str:
    """
    Genera un JWT válido por ACCESS_TOKEN_EXPIRE_MINUTES.
    Claims: sub(user_id), email, token_version, stage, iat, exp, jti.

    `stage="locked"` identifica una sesión cuya cuenta tiene security password
    pendiente de verificar.
    """
    now = _now_utc()
    exp = now + timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": str(user_id),
        "email": email,
        "token_version": token_version,
        "stage": stage,
        "purpose": "access",
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
        "jti": str(uuid4()),
    }
    return pyjwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_access_token(token: str) -> Dict[str, Any]:
    """
    Decodifica y valida firma/expiración. Devuelve payload.
    """
    payload = pyjwt.decode(token, key=settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    if payload.get("purpose") != "access":
        raise pyjwt.InvalidTokenError("Token de acceso inválido")
    return payload


def password_fingerprint(security_password: Optional[str]) -> str:
    """Huella (HMAC-SHA256 con el secreto JWT) de la security password vigente de la nota."""
    value = (security_password or "").encode("utf-8")
    return hmac.new(settings.jwt_secret.encode("utf-8"), value, hashlib.sha256).hexdigest()[:32]


def create_note_access_token(
    *, user_id: str, note_id: str, security_password: Optional[str], expires_in_minutes: int | None = None
) -> str:
    """
    Token corto que desbloquea una nota protegida para un usuario.
    Claims: sub(user_id), note_id, pwf (huella de la security password), purpose=note_access, iat, exp, jti.

    Si la security password de la nota cambia, el token deja de servir.
    """
    now = _now_utc()
    mins = expires_in_minutes if expires_in_minutes is not None else settings.note_access_expire_minutes
    exp = now + timedelta(minutes=mins)
    payload = {
        "sub": str(user_id),
        "note_id": str(note_id),
        "pwf": password_fingerprint(security_password),
        "purpose": "note_access",
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
        "jti": str(uuid4()),
    }
    return pyjwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def note_access_allows(
    token: str | None, *, user_id: str, note_id: str, security_password: Optional[str]
) -> bool:
    if not token:
        return False
    try:
        payload = pyjwt.decode(token, key=settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except pyjwt.PyJWTError:
        return False
    return (
        payload.get("purpose") == "note_access"
        and payload.get("sub") == str(user_id)
        and payload.get("note_id") == str(note_id)
        and hmac.compare_digest(str(payload.get("pwf") or ""), password_fingerprint(security_password))
    )
