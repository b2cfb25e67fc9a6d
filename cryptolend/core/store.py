"""
Document stores consumed by the engine.

The engine never reaches a process-wide connection; it is handed a store. Two
stores ship with the package: one over a SQLAlchemy ``AsyncSession`` and one
kept in memory.
"""
import itertools
import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Any, Dict, List, Optional, Type

from sqlalchemy import inspect as sa_inspect, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cryptolend.core.documents import BaseDocument, get_document_type, utcnow
from cryptolend.core.exceptions import DocumentNotFoundError, DuplicateDocumentError

logger = logging.getLogger(__name__)


class DocumentStore(ABC):
    """Storage collaborator: fetch by id, persist, look up by field"""

    @abstractmethod
    async def find_by_id(self, kind: str, document_id: Any) -> Optional[BaseDocument]:
        """Return the document or None"""

    @abstractmethod
    async def persist(self, document: BaseDocument) -> BaseDocument:
        """Insert or update, assigning id and timestamps; return the stored document"""

    @abstractmethod
    async def query_by_field(self, kind: str, field: str, value: Any) -> Optional[BaseDocument]:
        """Return the first document whose ``field`` equals ``value``, or None"""


def column_keys(model) -> List[str]:
    return [attr.key for attr in sa_inspect(model).column_attrs]


class SqlAlchemyDocumentStore(DocumentStore):
    """
    Store backed by the ORM models of each document kind.

    Writes are flushed, not committed; the session owner commits the unit of
    work (see ``cryptolend.core.database.get_db``).
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _to_document(document_type: Type[BaseDocument], row) -> BaseDocument:
        return document_type.model_construct(
            **{key: getattr(row, key) for key in column_keys(document_type.orm_model)}
        )

    async def find_by_id(self, kind: str, document_id: Any) -> Optional[BaseDocument]:
        document_type = get_document_type(kind)
        if document_id is None or isinstance(document_id, bool):
            return None
        try:
            key = int(document_id)
        except (TypeError, ValueError):
            return None
        row = await self.session.get(document_type.orm_model, key)
        if row is None:
            return None
        return self._to_document(document_type, row)

    async def persist(self, document: BaseDocument) -> BaseDocument:
        document_type = type(document)
        model = document_type.orm_model
        keys = column_keys(model)
        values = {
            key: value for key, value in document.to_stored_attributes().items()
            if key in keys and key not in ("id", "created_at", "updated_at")
        }
        now = utcnow()
        values["updated_at"] = now

        if document.is_new:
            values["created_at"] = now
            row = model(**values)
            self.session.add(row)
        else:
            row = await self.session.get(model, document.id)
            if row is None:
                raise DocumentNotFoundError(document.kind, document.id)
            for key, value in values.items():
                setattr(row, key, value)

        try:
            await self.session.flush()
        except IntegrityError as exc:
            await self.session.rollback()
            if "unique" in str(exc.orig).lower():
                raise DuplicateDocumentError(document.kind, str(exc.orig)) from exc
            raise

        await self.session.refresh(row)
        logger.debug(f"Persisted {document.kind} {row.id}")
        return self._to_document(document_type, row)

    async def query_by_field(self, kind: str, field: str, value: Any) -> Optional[BaseDocument]:
        document_type = get_document_type(kind)
        model = document_type.orm_model
        result = await self.session.execute(
            select(model).where(getattr(model, field) == value).limit(1)
        )
        row = result.scalar_one_or_none()
        if row is None:
            return None
        return self._to_document(document_type, row)


class InMemoryDocumentStore(DocumentStore):
    """Dictionary-backed store enforcing each kind's unique fields"""

    def __init__(self):
        self._documents: Dict[str, Dict[int, BaseDocument]] = defaultdict(dict)
        self._ids = itertools.count(1)

    @staticmethod
    def _copy(document: BaseDocument) -> BaseDocument:
        return type(document).model_construct(**document.to_stored_attributes())

    async def find_by_id(self, kind: str, document_id: Any) -> Optional[BaseDocument]:
        get_document_type(kind)
        document = self._documents[kind].get(document_id)
        return self._copy(document) if document is not None else None

    async def persist(self, document: BaseDocument) -> BaseDocument:
        documents = self._documents[document.kind]
        if not document.is_new and document.id not in documents:
            raise DocumentNotFoundError(document.kind, document.id)

        for field in document.unique_fields:
            value = getattr(document, field, None)
            for other in documents.values():
                if other.id != document.id and getattr(other, field, None) == value:
                    raise DuplicateDocumentError(document.kind, f"{field}={value}")

        now = utcnow()
        attributes = document.to_stored_attributes()
        if document.is_new:
            attributes["id"] = next(self._ids)
            attributes["created_at"] = now
        else:
            attributes["created_at"] = documents[document.id].created_at
        attributes["updated_at"] = now
        stored = type(document).model_construct(**attributes)
        documents[stored.id] = stored
        logger.debug(f"Persisted {document.kind} {stored.id}")
        return self._copy(stored)

    async def query_by_field(self, kind: str, field: str, value: Any) -> Optional[BaseDocument]:
        get_document_type(kind)
        for document in self._documents[kind].values():
            if getattr(document, field, None) == value:
                return self._copy(document)
        return None
