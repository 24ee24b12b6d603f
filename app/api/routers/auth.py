"""Rutas de autenticación: registro, login, compuerta de cuenta y logout."""
from fastapi import APIRouter, Depends, status

from app.api.deps import get_current_user, get_current_user_loose, get_store
from app.api.schemas.auth import (
    LoginPayload,
    RegisterOut,
    RegisterPayload,
    SecurityPasswordPayload,
    SessionOut,
)
from app.api.schemas.user import UserOut
from app.core import busy
from app.infrastructure.db.document_store import DocumentStore
from app.services import auth_service as service

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=RegisterOut,
    status_code=status.HTTP_201_CREATED,
    summary="Registrar usuario",
    description="Crea credenciales y perfil. No inicia sesión.",
)
async def register(payload: RegisterPayload, store: DocumentStore = Depends(get_store)) -> RegisterOut:
    async with busy.hold(payload.email, "register"):
        user_id = await service.register_user(
            store,
            name=payload.name,
            email=payload.email,
            password=payload.password,
            security_password=payload.security_password,
        )
    return RegisterOut(message="ok", id=user_id)


@router.post(
    "/login",
    response_model=SessionOut,
    summary="Login con email y password",
    description="Si la cuenta tiene security password, la sesión queda bloqueada hasta verificarla.",
)
async def login(payload: LoginPayload, store: DocumentStore = Depends(get_store)) -> SessionOut:
    async with busy.hold(payload.email, "login"):
        session = await service.login(store, email=payload.email, password=payload.password)
    return SessionOut(
        user_id=session.user_id,
        access_token=session.access_token,
        security_password_required=session.locked,
    )


@router.post(
    "/security-password",
    response_model=SessionOut,
    summary="Verificar security password de la cuenta",
    description="Compara contra el valor guardado y emite un access token desbloqueado.",
)
async def verify_security_password(
    payload: SecurityPasswordPayload,
    user=Depends(get_current_user_loose),
    store: DocumentStore = Depends(get_store),
) -> SessionOut:
    async with busy.hold(user["id"], "security_password"):
        session = await service.unlock_account(
            store, user_id=user["id"], security_password=payload.security_password
        )
    return SessionOut(user_id=session.user_id, access_token=session.access_token)


@router.post(
    "/logout",
    response_model=dict,
    summary="Cerrar sesión",
    description="Invalida todos los access tokens del usuario.",
)
async def logout(user=Depends(get_current_user_loose), store: DocumentStore = Depends(get_store)):
    await service.sign_out(store, user["id"])
    return {"message": "ok"}


@router.get(
    "/me",
    response_model=UserOut,
    summary="Perfil básico del usuario",
)
async def me(user=Depends(get_current_user), store: DocumentStore = Depends(get_store)) -> UserOut:
    return UserOut(**await service.get_profile(store, user["id"]))
