"""
Document store used by the application layer.

Collections are addressed by name and hold JSON-like dicts keyed by id. The
flow layer never touches the store; callers read from it, run flows, and
write results back themselves.
"""
import copy
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Protocol

logger = logging.getLogger(__name__)


class DocumentNotFoundError(KeyError):
    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"{collection}/{doc_id}")
        self.collection = collection
        self.doc_id = doc_id

    def __str__(self) -> str:
        return f"document not found: {self.collection}/{self.doc_id}"


class DocumentStore(Protocol):
    async def list(self, collection: str, **where: Any) -> List[Dict[str, Any]]:
        ...

    async def get(self, collection: str, doc_id: str) -> Dict[str, Any]:
        ...

    async def create(self, collection: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        ...

    async def update(self, collection: str, doc_id: str, changes: Mapping[str, Any]) -> Dict[str, Any]:
        ...

    async def delete(self, collection: str, doc_id: str) -> None:
        ...


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class InMemoryDocumentStore:
    """Process-local store; documents are copied in and out."""

    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def _collection(self, name: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(name, {})

    async def list(self, collection: str, **where: Any) -> List[Dict[str, Any]]:
        docs = self._collection(collection).values()
        return [
            copy.deepcopy(doc)
            for doc in docs
            if all(doc.get(key) == value for key, value in where.items())
        ]

    async def get(self, collection: str, doc_id: str) -> Dict[str, Any]:
        try:
            return copy.deepcopy(self._collection(collection)[doc_id])
        except KeyError:
            raise DocumentNotFoundError(collection, doc_id) from None

    async def create(self, collection: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        now = _now()
        doc = copy.deepcopy(dict(data))
        doc["id"] = uuid.uuid4().hex
        doc["created_at"] = now
        doc["updated_at"] = now
        self._collection(collection)[doc["id"]] = doc
        logger.info("Created %s/%s", collection, doc["id"])
        return copy.deepcopy(doc)

    async def update(self, collection: str, doc_id: str, changes: Mapping[str, Any]) -> Dict[str, Any]:
        docs = self._collection(collection)
        if doc_id not in docs:
            raise DocumentNotFoundError(collection, doc_id)

        # id and timestamps are owned by the store
        updates = {k: v for k, v in changes.items() if k not in ("id", "created_at", "updated_at")}
        doc = docs[doc_id]
        doc.update(copy.deepcopy(updates))
        doc["updated_at"] = _now()
        logger.info("Updated %s/%s (%s)", collection, doc_id, ", ".join(sorted(updates)) or "no fields")
        return copy.deepcopy(doc)

    async def delete(self, collection: str, doc_id: str) -> None:
        try:
            del self._collection(collection)[doc_id]
        except KeyError:
            raise DocumentNotFoundError(collection, doc_id) from None
        logger.info("Deleted %s/%s", collection, doc_id)
