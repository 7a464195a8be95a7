"""
Purpose: Uploaded document records with their embedded chunks (in-memory).

At most one document exists per (owner, session_id, type); session_id None
is the owner's global slot. Saving a document for an occupied key replaces
the previous record.

Testing: keyed replace/delete and session cascade.
"""

from __future__ import annotations
from typing import Optional

from ..models import Document, DocumentType


class InMemoryDocumentStore:
    def __init__(self) -> None:
        self._docs: dict[str, Document] = {}

    def find(
        self, owner: str, session_id: Optional[str], doc_type: DocumentType
    ) -> Optional[Document]:
        for doc in self._docs.values():
            if (
                doc.owner == owner
                and doc.session_id == session_id
                and doc.type == DocumentType(doc_type)
            ):
                return doc
        return None

    def get(self, owner: str, document_id: str) -> Optional[Document]:
        doc = self._docs.get(document_id)
        if doc is None or doc.owner != owner:
            return None
        return doc

    def list(self, owner: str, session_id: Optional[str]) -> list[Document]:
        docs = [
            d
            for d in self._docs.values()
            if d.owner == owner and d.session_id == session_id
        ]
        return sorted(docs, key=lambda d: d.created_at, reverse=True)

    def save(self, document: Document) -> Document:
        existing = self.find(document.owner, document.session_id, document.type)
        if existing is not None and existing.id != document.id:
            del self._docs[existing.id]
        self._docs[document.id] = document
        return document

    def delete(self, owner: str, document_id: str) -> Optional[Document]:
        doc = self.get(owner, document_id)
        if doc is not None:
            del self._docs[document_id]
        return doc

    def delete_for_session(self, owner: str, session_id: str) -> list[Document]:
        doomed = self.list(owner, session_id)
        for doc in doomed:
            del self._docs[doc.id]
        return doomed
