"""
Lifecycle coordinator for document saves.

Each save runs, in order: planning, derivation, field validation, uniqueness
checks, persistence. The first failing stage aborts the save; nothing is
written for a failed attempt and referenced documents are never persisted as a
side effect.
"""
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from cryptolend.core.changes import ChangeSet, SavePlan, plan_save
from cryptolend.core.config import Settings, get_settings
from cryptolend.core.documents import BaseDocument, as_attributes, get_document_type
from cryptolend.core.exceptions import (
    DocumentNotFoundError,
    DuplicateDocumentError,
    UniquenessConflictError,
)
from cryptolend.core.store import DocumentStore
from cryptolend.core.validation import ValidationResult, check_unique, validate_document
from cryptolend.modules.deals.services import DealService
from cryptolend.modules.users.schemas import UserDocument
from cryptolend.modules.users.services import UserService

logger = logging.getLogger(__name__)

Deriver = Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]


class LendingEngine:
    """Validation, derivation and save coordination over an explicit store"""

    def __init__(self, store: DocumentStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or get_settings()
        self.users = UserService(store, self.settings)
        self.deals = DealService(store)
        self._derivers: Dict[str, Deriver] = {
            "expected_completion_date": self.deals.derive_expected_completion_date,
        }

    def validate(self, kind: str, data: Any) -> ValidationResult:
        """Field validation only; no store access"""
        return validate_document(kind, data, settings=self.settings)

    async def check_email_unique(self, email: str, excluding_id: Optional[int] = None) -> ValidationResult:
        return await self.users.check_email_unique(email, excluding_id)

    async def save(self, kind: str, data: Any, change_set: Optional[ChangeSet] = None) -> BaseDocument:
        """
        Validate, derive and persist one document.

        ``data`` is a document or a mapping of attributes. Managed and derived
        attributes in it are ignored. When it carries an ``id`` the stored
        document is loaded and ``data`` is applied over it.
        Without an explicit ``change_set`` the changes are computed against the
        stored state.
        """
        document_type = get_document_type(kind)
        candidate = document_type.drop_managed(document_type.normalize_references(as_attributes(data)))

        previous = None
        document_id = candidate.get("id")
        if document_id is not None:
            stored = await self.store.find_by_id(kind, document_id)
            if stored is None:
                raise DocumentNotFoundError(kind, document_id)
            previous = stored.to_attributes()
            candidate = {**previous, **candidate}

        if change_set is None:
            change_set = ChangeSet.between(previous, candidate)

        plan = plan_save(document_type, previous, change_set, candidate)
        candidate = await self._derive(plan, candidate)

        result = self.validate(kind, candidate)
        if not result.ok:
            logger.warning(f"Rejected {kind} save: {', '.join(str(e) for e in result.errors)}")
        result.raise_for_errors(document_type.display_name)
        document = result.document

        await self._check_unique(plan, document)

        if isinstance(document, UserDocument):
            document = self.users.hash_password(document)

        try:
            saved = await self.store.persist(document)
        except DuplicateDocumentError as exc:
            if not document_type.unique_fields:
                raise
            field = document_type.unique_fields[0]
            logger.warning(f"Store rejected duplicate {kind} {field}")
            raise UniquenessConflictError(field, getattr(document, field)) from exc

        logger.debug(f"Saved {kind} {saved.id}")
        return saved

    async def _derive(self, plan: SavePlan, candidate: Dict[str, Any]) -> Dict[str, Any]:
        for field in plan.derive:
            candidate = await self._derivers[field](candidate)
        return candidate

    async def _check_unique(self, plan: SavePlan, document: BaseDocument) -> None:
        for field in plan.check_unique:
            value = getattr(document, field)
            result = await check_unique(self.store, type(document), field, value, excluding_id=document.id)
            if not result.ok:
                logger.warning(f"{document.display_name} {field} `{value}` already in use")
                raise UniquenessConflictError(field, value)
