"""
Bandera "ocupado" en memoria: una sola llamada pendiente por (usuario, pantalla).

Uso típico:
- async with busy.hold(user_id, "import"):
      ...  # cualquier otra acción en "import" de ese usuario recibe FlowBusy

Las acciones concurrentes no se encolan: se rechazan mientras la llamada
anterior sigue en curso.
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator, Set, Tuple

from app.core.errors import FlowBusy

HELD: Set[Tuple[str, str]] = set()


@asynccontextmanager
async def hold(identifier: str, flow: str) -> AsyncIterator[None]:
    """Marca la pantalla como ocupada durante el bloque; lanza FlowBusy si ya lo estaba."""
    key = (identifier, flow)
    if key in HELD:
        raise FlowBusy(flow)
    HELD.add(key)
    try:
        yield
    finally:
        HELD.discard(key)


def reset() -> None:
    """Limpia el estado (útil en tests o reinicios)."""
    HELD.clear()
