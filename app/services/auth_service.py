"""
Lógica de autenticación: servicio de identidad (sign-up, sign-in, sign-out,
sesión actual) y casos de uso de registro/login sobre el perfil `users`.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import jwt as pyjwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from argon2.low_level import Type

from app.core.config import settings
from app.core.errors import (
    FieldValidationError,
    InvalidCredentials,
    ServiceError,
    UserNotFound,
)
from app.infrastructure.db.document_store import DocumentStore
from app.repositories import auth_repo as repo
from app.repositories import user_repo
from app.services import security_gate
from app.services.token_service import create_access_token, verify_access_token

_log = logging.getLogger("notes.auth")

ph = PasswordHasher(time_cost=2, memory_cost=51200, parallelism=2, hash_len=32, salt_len=16, type=Type.ID)


@dataclass
class Session:
    user_id: str
    access_token: str
    locked: bool = False


def hash_password(password: str) -> str:
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


# === Servicio de identidad ===

async def sign_up(store: DocumentStore, *, email: str, password: str) -> str:
    """Crea credenciales y devuelve el id asignado al usuario."""
    email = email.lower()
    if await repo.find_identity_by_email(store, email):
        raise FieldValidationError("email", "Email already registered")
    return await repo.insert_identity(store, email, hash_password(password))


async def sign_in(store: DocumentStore, *, email: str, password: str) -> Session:
    ident = await repo.find_identity_by_email(store, email.lower())
    if not ident or not verify_password(password, ident.get("password_hash") or ""):
        raise InvalidCredentials()
    access = create_access_token(
        user_id=ident["id"], email=ident["email"], token_version=int(ident.get("token_version", 0))
    )
    return Session(user_id=ident["id"], access_token=access)


async def sign_out(store: DocumentStore, user_id: str) -> None:
    """Invalida todos los access tokens del usuario."""
    await repo.increment_token_version(store, user_id)


async def current_user_id(store: DocumentStore, access_token: Optional[str]) -> Optional[str]:
    """Id del usuario de la sesión, o None si el token no es válido o ya se cerró."""
    claims = await session_claims(store, access_token)
    return claims["sub"] if claims else None


async def session_claims(store: DocumentStore, access_token: Optional[str]) -> Optional[Dict[str, Any]]:
    if not access_token:
        return None
    try:
        payload = verify_access_token(access_token)
    except pyjwt.PyJWTError:
        return None
    user_id = payload.get("sub")
    if not user_id:
        return None
    ident = await repo.get_identity(store, user_id)
    if not ident or int(ident.get("token_version", 0)) != payload.get("token_version"):
        return None
    return payload


async def delete_identity(store: DocumentStore, user_id: str) -> None:
    await repo.delete_identity(store, user_id)


# === Casos de uso de más alto nivel ===

async def register_user(
    store: DocumentStore,
    *,
    name: str,
    email: str,
    password: str,
    security_password: Optional[str] = None,
) -> str:
    """
    Registra credenciales y perfil. Si el perfil no se puede guardar, borra la
    identidad recién creada. No deja la sesión iniciada.
    """
    user_id = await sign_up(store, email=email, password=password)
    profile = {
        "name": name,
        "email": email,
        "password": password if settings.store_profile_password else None,
        "security_password": security_password or None,
    }
    try:
        await user_repo.insert_user(store, user_id, profile)
    except ServiceError:
        _log.exception("No se pudo guardar el perfil de %s; revirtiendo identidad", user_id)
        await delete_identity(store, user_id)
        raise
    return user_id


async def login(store: DocumentStore, *, email: str, password: str) -> Session:
    """
    Inicia sesión y decide si aplica la compuerta de security password de la cuenta.
    Si el perfil no existe o no se puede leer, cierra la sesión.
    """
    session = await sign_in(store, email=email, password=password)
    try:
        user = await user_repo.get_user(store, session.user_id)
    except ServiceError:
        _log.exception("Fallo leyendo perfil de %s", session.user_id)
        user = None
    if not user:
        await sign_out(store, session.user_id)
        raise UserNotFound()

    if not security_gate.is_protected(user):
        return session

    ident = await repo.get_identity(store, session.user_id) or {}
    locked = create_access_token(
        user_id=session.user_id,
        email=user.get("email", ""),
        token_version=int(ident.get("token_version", 0)),
        stage="locked",
    )
    return Session(user_id=session.user_id, access_token=locked, locked=True)


async def unlock_account(store: DocumentStore, *, user_id: str, security_password: Optional[str]) -> Session:
    """Verifica la security password de la cuenta y emite una sesión desbloqueada."""
    await security_gate.verify_account_password(store, user_id, security_password)
    ident = await repo.get_identity(store, user_id)
    if not ident:
        raise UserNotFound()
    access = create_access_token(
        user_id=user_id, email=ident["email"], token_version=int(ident.get("token_version", 0))
    )
    return Session(user_id=user_id, access_token=access)


async def get_profile(store: DocumentStore, user_id: str) -> Dict[str, Any]:
    """Perfil público (sin secretos)."""
    user = await user_repo.get_user(store, user_id)
    if not user:
        raise UserNotFound()
    return {
        "id": user["id"],
        "name": user.get("name"),
        "email": user.get("email"),
        "has_security_password": security_gate.is_protected(user),
    }
