"""Almacén de documentos inyectable.

`DocumentStore` es la interfaz que consumen los repositorios (colecciones con
documentos indexados por un id opaco). `MongoDocumentStore` la implementa sobre
Motor. Los documentos devueltos exponen `id` (str) en lugar de `_id`.

Cualquier fallo del driver se envuelve en `ServiceError`; los ids mal formados
se tratan como inexistentes.
"""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Protocol

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING
from pymongo.errors import PyMongoError
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.errors import DocumentNotFound, ServiceError

QueryOp = Literal["==", "array-contains"]


class DocumentStore(Protocol):
    async def create_document(
        self, collection: str, fields: Dict[str, Any], document_id: Optional[str] = None
    ) -> str: ...

    async def get_document(self, collection: str, document_id: str) -> Optional[Dict[str, Any]]: ...

    async def update_fields(self, collection: str, document_id: str, fields: Dict[str, Any]) -> None: ...

    async def delete_document(self, collection: str, document_id: str) -> None: ...

    async def query(
        self, collection: str, field: str, op: QueryOp, value: Any, order_by: Optional[str] = None
    ) -> List[Dict[str, Any]]: ...


def _key(document_id: str) -> Any:
    """Ids generados por Mongo son ObjectId; los demás (p.ej. ids de identidad) se usan tal cual."""
    if ObjectId.is_valid(document_id):
        return ObjectId(document_id)
    return document_id


def _out(doc: Dict[str, Any]) -> Dict[str, Any]:
    d = dict(doc)
    d["id"] = str(d.pop("_id", ""))
    return d


class MongoDocumentStore:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    async def create_document(
        self, collection: str, fields: Dict[str, Any], document_id: Optional[str] = None
    ) -> str:
        data = {k: v for k, v in fields.items() if k != "id"}
        if document_id is not None:
            data["_id"] = _key(document_id)
        try:
            res = await self._db[collection].insert_one(data)
        except PyMongoError as e:
            raise ServiceError() from e
        return str(res.inserted_id)

    async def get_document(self, collection: str, document_id: str) -> Optional[Dict[str, Any]]:
        try:
            doc = await self._db[collection].find_one({"_id": _key(document_id)})
        except InvalidId:
            return None
        except PyMongoError as e:
            raise ServiceError() from e
        return _out(doc) if doc else None

    async def update_fields(self, collection: str, document_id: str, fields: Dict[str, Any]) -> None:
        try:
            res = await self._db[collection].update_one({"_id": _key(document_id)}, {"$set": dict(fields)})
        except PyMongoError as e:
            raise ServiceError() from e
        if res.matched_count == 0:
            raise DocumentNotFound()

    async def delete_document(self, collection: str, document_id: str) -> None:
        try:
            await self._db[collection].delete_one({"_id": _key(document_id)})
        except PyMongoError as e:
            raise ServiceError() from e

    async def query(
        self, collection: str, field: str, op: QueryOp, value: Any, order_by: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        # En Mongo la igualdad sobre un arreglo ya es "contiene"
        if op not in ("==", "array-contains"):
            raise ValueError(f"Operador no soportado: {op}")
        cursor = self._db[collection].find({field: value})
        if order_by:
            cursor = cursor.sort(order_by, DESCENDING)
        try:
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise ServiceError() from e
        return [_out(d) for d in docs]
