"""Aplica validadores e índices de las colecciones `notes`, `users` e `identities`.

Uso típico:
  PYTHONPATH=. python scripts/ensure_indexes.py
  PYTHONPATH=. python scripts/ensure_indexes.py --db notes_staging

Es lo mismo que hace el startup de la app, útil cuando la API arranca sin
permisos de administración sobre la base.
"""
from __future__ import annotations

import argparse
import asyncio
import logging

from app.core.config import settings
from app.core.logging import setup_logging
from app.infrastructure.db.bootstrap import ensure_collections
from app.infrastructure.db.mongo_async import close_async_client, db_ready, get_async_db


async def _run() -> int:
    if not await db_ready():
        logging.getLogger("notes.scripts").error("Mongo no accesible en %s", settings.mongo_uri)
        return 1
    await ensure_collections(get_async_db())
    close_async_client()
    return 0


def main() -> int:
    ap = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    ap.add_argument("--db", default=None, help="Nombre de la base (por defecto MONGO_DB)")
    args = ap.parse_args()
    if args.db:
        settings.mongo_db = args.db
    setup_logging(settings.log_level)
    return asyncio.run(_run())


if __name__ == "__main__":
    raise SystemExit(main())
