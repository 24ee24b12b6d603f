"""Fixtures comunes: almacén en memoria inyectado y cliente HTTP."""
import copy
import uuid
from typing import Any, Dict, List, Optional, Set, Tuple

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_store
from app.core import busy
from app.core.errors import DocumentNotFound, ServiceError
from app.main import app


class InMemoryDocumentStore:
    """Implementación en memoria de `DocumentStore` para tests.

    - `calls` registra (operación, colección) de cada llamada.
    - `fail_on` contiene (operación, colección) que deben fallar con ServiceError.
    """

    def __init__(self) -> None:
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.calls: List[Tuple[str, str]] = []
        self.fail_on: Set[Tuple[str, str]] = set()

    def _enter(self, op: str, collection: str) -> Dict[str, Dict[str, Any]]:
        self.calls.append((op, collection))
        if (op, collection) in self.fail_on:
            raise ServiceError()
        return self.collections.setdefault(collection, {})

    async def create_document(self, collection: str, fields: Dict[str, Any], document_id: Optional[str] = None) -> str:
        coll = self._enter("create_document", collection)
        doc_id = document_id or uuid.uuid4().hex[:24]
        coll[doc_id] = copy.deepcopy({k: v for k, v in fields.items() if k != "id"})
        return doc_id

    async def get_document(self, collection: str, document_id: str) -> Optional[Dict[str, Any]]:
        coll = self._enter("get_document", collection)
        doc = coll.get(document_id)
        return {**copy.deepcopy(doc), "id": document_id} if doc is not None else None

    async def update_fields(self, collection: str, document_id: str, fields: Dict[str, Any]) -> None:
        coll = self._enter("update_fields", collection)
        if document_id not in coll:
            raise DocumentNotFound()
        coll[document_id].update(copy.deepcopy(fields))

    async def delete_document(self, collection: str, document_id: str) -> None:
        coll = self._enter("delete_document", collection)
        coll.pop(document_id, None)

    async def query(self, collection: str, field: str, op: str, value: Any, order_by: Optional[str] = None):
        coll = self._enter("query", collection)
        out = []
        for doc_id, doc in coll.items():
            current = doc.get(field)
            if op == "array-contains":
                match = isinstance(current, list) and value in current
            else:
                match = current == value
            if match:
                out.append({**copy.deepcopy(doc), "id": doc_id})
        if order_by:
            out.sort(key=lambda d: d.get(order_by) or "", reverse=True)
        return out

    # Helpers de inspección
    def raw(self, collection: str, document_id: str) -> Dict[str, Any]:
        return self.collections[collection][document_id]


@pytest.fixture(autouse=True)
def _reset_busy():
    busy.reset()
    yield
    busy.reset()


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def signup(client):
    """Registra y hace login; devuelve (headers Authorization, user_id)."""

    def _signup(email: str, *, name: str = "Tester", password: str = "secret1",
                security_password: Optional[str] = None) -> Tuple[Dict[str, str], str]:
        return register_and_login(client, email, name=name, password=password, security_password=security_password)

    return _signup


def register_and_login(client: TestClient, email: str, *, name: str = "Tester", password: str = "secret1",
                       security_password: Optional[str] = None) -> Tuple[Dict[str, str], str]:
    body = {"name": name, "email": email, "password": password}
    if security_password is not None:
        body.update(security_password_enabled=True, security_password=security_password)
    r = client.post("/api/auth/register", json=body)
    assert r.status_code == 201, r.text
    r = client.post("/api/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    data = r.json()
    return {"Authorization": f"Bearer {data['access_token']}"}, data["user_id"]
