# cartbill/database.py
import json
import copy
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from .config import Settings, load_settings

# This file holds the document store backends and the process-wide store instance.

logger = logging.getLogger(__name__)

Document = Dict[str, Any]


class DocumentStore(ABC):
    """Async document store addressed by collection and document id."""

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        """Return the document data, or None when it does not exist."""

    @abstractmethod
    async def list(self, collection: str) -> List[Tuple[str, Document]]:
        """Return (id, data) pairs in store order."""

    @abstractmethod
    async def set(self, collection: str, doc_id: str, data: Document, merge: bool = False) -> None:
        """Write a document. With merge=True only the given fields change."""

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> None:
        ...


class MemoryDocumentStore(DocumentStore):
    """In-process store. Documents are copied in and out so callers never share state."""

    def __init__(self):
        self._collections: Dict[str, Dict[str, Document]] = {}

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        doc = self._collections.get(collection, {}).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def list(self, collection: str) -> List[Tuple[str, Document]]:
        docs = self._collections.get(collection, {})
        # ordered by document id, like Firestore
        return [(doc_id, copy.deepcopy(docs[doc_id])) for doc_id in sorted(docs)]

    async def set(self, collection: str, doc_id: str, data: Document, merge: bool = False) -> None:
        docs = self._collections.setdefault(collection, {})
        if merge and doc_id in docs:
            docs[doc_id].update(copy.deepcopy(data))
        else:
            docs[doc_id] = copy.deepcopy(data)

    async def delete(self, collection: str, doc_id: str) -> None:
        self._collections.get(collection, {}).pop(doc_id, None)

    def clear(self) -> None:
        self._collections.clear()


class FirestoreDocumentStore(DocumentStore):
    """Cloud Firestore through firebase-admin's async client."""

    def __init__(self, credentials_json: Optional[str] = None):
        import firebase_admin
        from firebase_admin import credentials, firestore_async

        try:
            firebase_admin.get_app()
        except ValueError:
            if credentials_json:
                try:
                    cert = credentials.Certificate(json.loads(credentials_json))
                    firebase_admin.initialize_app(cert)
                except ValueError as e:
                    logger.error("Failed to parse FIREBASE_CONFIG, falling back to default init: %s", e)
                    firebase_admin.initialize_app()
            else:
                firebase_admin.initialize_app()
        self._db = firestore_async.client()

    def _ref(self, collection: str, doc_id: str):
        return self._db.collection(collection).document(doc_id)

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        snap = await self._ref(collection, doc_id).get()
        return snap.to_dict() if snap.exists else None

    async def list(self, collection: str) -> List[Tuple[str, Document]]:
        return [(snap.id, snap.to_dict()) async for snap in self._db.collection(collection).stream()]

    async def set(self, collection: str, doc_id: str, data: Document, merge: bool = False) -> None:
        await self._ref(collection, doc_id).set(data, merge=merge)

    async def delete(self, collection: str, doc_id: str) -> None:
        await self._ref(collection, doc_id).delete()


_STORE: Optional[DocumentStore] = None


def create_store(settings: Settings) -> DocumentStore:
    if settings.store_backend == "firestore":
        return FirestoreDocumentStore(settings.firebase_config)
    if settings.store_backend == "memory":
        return MemoryDocumentStore()
    raise ValueError(f"unknown STORE_BACKEND: {settings.store_backend}")


def init_store(store: Optional[DocumentStore] = None) -> DocumentStore:
    global _STORE
    _STORE = store if store is not None else create_store(load_settings())
    logger.info("Document store ready: %s", type(_STORE).__name__)
    return _STORE


def get_store() -> DocumentStore:
    """FastAPI dependency returning the process-wide store, created on first use."""
    if _STORE is None:
        return init_store()
    return _STORE
