"""
Dependencias reutilizables para routers (FastAPI Depends).

- Almacén de documentos: inyectable (los tests lo sustituyen vía dependency_overrides).
- Autenticación: extrae y valida el Access Token, devuelve los claims de la sesión.
- Mantener esta capa delgada: sin lógica de negocio pesada.
"""
from typing import Optional, Dict, Any
from fastapi import Depends, HTTPException, Header
from starlette.status import HTTP_401_UNAUTHORIZED

from app.core.errors import SessionLocked
from app.infrastructure.db.document_store import DocumentStore, MongoDocumentStore
from app.infrastructure.db.mongo_async import get_async_db
from app.services import auth_service

_store: Optional[MongoDocumentStore] = None


def get_store() -> DocumentStore:
    global _store
    if _store is None:
        _store = MongoDocumentStore(get_async_db())
    return _store


def _bearer(authorization: Optional[str]) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Missing token")
    return authorization.split(" ", 1)[1]


async def get_current_user_loose(
    authorization: Optional[str] = Header(default=None),
    store: DocumentStore = Depends(get_store),
) -> Dict[str, Any]:
    """
    Sesión válida aunque la cuenta tenga security password pendiente (stage=locked).
    Útil para el propio endpoint de desbloqueo y para logout.
    """
    claims = await auth_service.session_claims(store, _bearer(authorization))
    if not claims:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return {"id": claims["sub"], "email": claims.get("email"), "stage": claims.get("stage", "unlocked")}


async def get_current_user(user: Dict[str, Any] = Depends(get_current_user_loose)) -> Dict[str, Any]:
    """Igual que get_current_user_loose pero exige la compuerta de cuenta superada."""
    if user["stage"] != "unlocked":
        raise SessionLocked()
    return user
