"""
Bootstrap de la base Mongo: define y aplica validadores (JSON Schema) e índices.
Se ejecuta al inicio de la app para asegurar colecciones mínimas y consistencia.
No tumba la app si algo falla; deja warnings en casos no críticos.
"""
from __future__ import annotations

from typing import Any, Dict, List
import logging
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.repositories.auth_repo import IDENTITY_COLL
from app.repositories.note_repo import COLLECTION as NOTES_COLL
from app.repositories.user_repo import COLLECTION as USERS_COLL

_log = logging.getLogger("notes.mongo.bootstrap")


NOTE_VALIDATOR: Dict[str, Any] = {
    "bsonType": "object",
    "required": ["title", "content", "user_ids", "token", "created_at", "updated_at"],
    "properties": {
        "title": {"bsonType": "string"},
        "content": {"bsonType": "string"},
        "user_ids": {"bsonType": "array", "minItems": 1, "items": {"bsonType": "string"}},
        "token": {"bsonType": "string", "minLength": 16, "maxLength": 16},
        "security_password": {"bsonType": ["string", "null"]},
        "created_at": {"bsonType": "string", "minLength": 10},
        "updated_at": {"bsonType": "string", "minLength": 10},
    },
    "additionalProperties": True,
}

USER_VALIDATOR: Dict[str, Any] = {
    "bsonType": "object",
    "required": ["name", "email", "created_at"],
    "properties": {
        "name": {"bsonType": "string", "minLength": 1},
        "email": {"bsonType": "string", "minLength": 3, "description": "lowercase"},
        "password": {"bsonType": ["string", "null"]},
        "security_password": {"bsonType": ["string", "null"]},
        "created_at": {"bsonType": "string", "minLength": 10},
    },
    "additionalProperties": True,
}

IDENTITY_VALIDATOR: Dict[str, Any] = {
    "bsonType": "object",
    "required": ["email", "password_hash", "token_version"],
    "properties": {
        "email": {"bsonType": "string", "minLength": 3},
        "password_hash": {"bsonType": "string"},
        "token_version": {"bsonType": "int", "minimum": 0},
    },
    "additionalProperties": True,
}


async def _collmod_or_create(db: AsyncIOMotorDatabase, name: str, validator: Dict[str, Any]) -> None:
    try:
        if name in await db.list_collection_names():
            await db.command({
                "collMod": name,
                "validator": {"$jsonSchema": validator},
                "validationLevel": "moderate",
            })
        else:
            await db.create_collection(name, validator={"$jsonSchema": validator})
    except PyMongoError as e:
        # No aborta el arranque; solo deja sin validator estricto.
        _log.warning("No se pudo aplicar validator en '%s': %s", name, e)


async def _ensure_indexes(db: AsyncIOMotorDatabase, name: str, indexes: List[Dict[str, Any]]) -> None:
    coll = db[name]
    for ix in indexes:
        ix = dict(ix)
        keys = ix.pop("keys")
        try:
            await coll.create_index(keys, **ix)
        except PyMongoError as e:
            _log.warning("No se pudo crear índice en '%s' (%s): %s", name, keys, e)


async def ensure_collections(db: AsyncIOMotorDatabase) -> None:
    """
    Garantiza colecciones, validadores e índices mínimos.
    """
    await _collmod_or_create(db, NOTES_COLL, NOTE_VALIDATOR)
    await _collmod_or_create(db, USERS_COLL, USER_VALIDATOR)
    await _collmod_or_create(db, IDENTITY_COLL, IDENTITY_VALIDATOR)

    await _ensure_indexes(db, NOTES_COLL, [
        # Listado por membresía, más recientes primero
        {"keys": [("user_ids", ASCENDING), ("updated_at", DESCENDING)], "name": "user_ids_updated_at"},
    ])
    await _ensure_indexes(db, IDENTITY_COLL, [
        {"keys": [("email", ASCENDING)], "name": "uniq_email", "unique": True},
    ])
    await _ensure_indexes(db, USERS_COLL, [
        {"keys": [("email", ASCENDING)], "name": "email"},
    ])
    _log.info("Colecciones e índices asegurados")
