"""Validation and derivation engine for crypto-collateralized peer-to-peer loans."""
from cryptolend.core.changes import ChangeSet, SavePlan, plan_save
from cryptolend.core.exceptions import (
    DocumentNotFoundError,
    DuplicateDocumentError,
    FieldError,
    FieldValidationError,
    LendingError,
    ReferenceResolutionError,
    UniquenessConflictError,
    UnknownDocumentKindError,
)
from cryptolend.core.store import DocumentStore, InMemoryDocumentStore, SqlAlchemyDocumentStore
from cryptolend.core.validation import ValidationResult
from cryptolend.engine import LendingEngine

__all__ = [
    "ChangeSet", "SavePlan", "plan_save",
    "DocumentNotFoundError", "DuplicateDocumentError", "FieldError", "FieldValidationError",
    "LendingError", "ReferenceResolutionError", "UniquenessConflictError", "UnknownDocumentKindError",
    "DocumentStore", "InMemoryDocumentStore", "SqlAlchemyDocumentStore",
    "ValidationResult", "LendingEngine",
]
