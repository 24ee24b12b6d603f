"""Entrada principal de la app FastAPI (configura middlewares, excepciones y routers)."""
from fastapi import FastAPI
from app.core.config import settings
from app.infrastructure.db.mongo_async import close_async_client, db_ready, get_async_db
from app.infrastructure.db.bootstrap import ensure_collections
from app.api.router import api_router
from app.core.logging import setup_logging
from app.core.middleware import add_middlewares
from app.core.exceptions import register_exception_handlers
import logging

_log = logging.getLogger("notes.startup")

setup_logging(settings.log_level)
app = FastAPI(title=settings.app_name)

add_middlewares(app)
register_exception_handlers(app)


# Startup
@app.on_event("startup")
async def on_startup():
    # Garantiza colecciones/índices/validadores mínimos si hay conexión
    try:
        if await db_ready():
            await ensure_collections(get_async_db())
        else:
            _log.warning("Mongo no listo; omitiendo ensure_collections()")
    except Exception as e:
        # No impedir el arranque si fallan validadores/índices
        _log.warning("ensure_collections() falló: %s", e)


@app.on_event("shutdown")
async def on_shutdown():
    close_async_client()


# Monta routers bajo el prefijo configurado
app.include_router(api_router, prefix=settings.api_prefix_normalized)
