"""
Document store gateway over the Firebase Admin Firestore client.
"""
import logging
from typing import Any, Optional

import firebase_admin
from firebase_admin import credentials, firestore

from ..config import FirebaseConfig, get_config


logger = logging.getLogger(__name__)

# (field, operator, value) as accepted by Firestore queries
Filter = tuple[str, str, Any]
# (operation, collection path, document id, data); operation is "set" or "update"
Write = tuple[str, str, str, dict[str, Any]]


def get_app(config: Optional[FirebaseConfig] = None) -> firebase_admin.App:
    """Return the default Firebase app, initializing it on first use."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        config = config or get_config().firebase
        if config.credentials_path:
            cred = credentials.Certificate(config.credentials_path)
        else:
            cred = credentials.ApplicationDefault()

        options = {}
        if config.project_id:
            options["projectId"] = config.project_id
        if config.storage_bucket:
            options["storageBucket"] = config.storage_bucket

        logger.info(f"Initializing Firebase app for project {config.project_id or '<default>'}")
        return firebase_admin.initialize_app(cred, options)


class DocumentStore:
    """
    Thin wrapper around Firestore returning plain dicts.
    Every document dict carries its id under ``"id"``.
    """

    SERVER_TIMESTAMP = firestore.SERVER_TIMESTAMP

    def __init__(self, client: Any = None):
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = firestore.client(app=get_app())
        return self._client

    @staticmethod
    def increment(value: int = 1) -> Any:
        """Atomic counter transform for ``update``/``set`` payloads."""
        return firestore.Increment(value)

    def get_documents(
        self,
        path: str,
        filters: Optional[list[Filter]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """
        Query a collection.

        Args:
            path: Collection path, e.g. ``tools`` or ``users/u1/agents/a1/sessionDetails``
            filters: Equality/range/membership filters
            order_by: Field to order by
            descending: Order direction
            limit: Maximum number of documents

        Returns:
            List of document dicts with ``id`` set
        """
        query = self.client.collection(path)
        for field, op, value in filters or []:
            query = query.where(filter=firestore.FieldFilter(field, op, value))
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            query = query.order_by(order_by, direction=direction)
        if limit:
            query = query.limit(limit)

        docs = [{**(snap.to_dict() or {}), "id": snap.id} for snap in query.stream()]
        logger.debug(f"Fetched {len(docs)} documents from {path}")
        return docs

    def get_document(self, path: str, doc_id: str) -> Optional[dict[str, Any]]:
        snap = self.client.collection(path).document(doc_id).get()
        if not snap.exists:
            return None
        return {**(snap.to_dict() or {}), "id": snap.id}

    def add_document(self, path: str, data: dict[str, Any]) -> str:
        """Create a document with a generated id and return the id."""
        _, ref = self.client.collection(path).add(data)
        logger.debug(f"Added document {ref.id} to {path}")
        return ref.id

    def set_document(self, path: str, doc_id: str, data: dict[str, Any], merge: bool = False) -> None:
        self.client.collection(path).document(doc_id).set(data, merge=merge)

    def update_document(self, path: str, doc_id: str, data: dict[str, Any]) -> None:
        self.client.collection(path).document(doc_id).update(data)

    def delete_document(self, path: str, doc_id: str) -> None:
        self.client.collection(path).document(doc_id).delete()

    def new_document_id(self, path: str) -> str:
        """Allocate a document id in ``path`` without writing anything."""
        return self.client.collection(path).document().id

    def write_batch(self, writes: list[Write]) -> None:
        """
        Apply several writes atomically: either all of them land or none do.

        Raises:
            ValueError: Unknown write operation
        """
        batch = self.client.batch()
        for op, path, doc_id, data in writes:
            ref = self.client.collection(path).document(doc_id)
            if op == "set":
                batch.set(ref, data)
            elif op == "update":
                batch.update(ref, data)
            else:
                raise ValueError(f"Unknown batch operation {op!r}")
        batch.commit()
        logger.debug(f"Committed batch of {len(writes)} writes")


def agent_path(user_id: str, agent_id: str, collection: str) -> str:
    """Path of a per-agent analytics subcollection."""
    return f"users/{user_id}/agents/{agent_id}/{collection}"
