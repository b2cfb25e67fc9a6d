"""
Error taxonomy for the lending engine.

Every failure is data-level and scoped to a single save attempt; none of these
is meant to take down the hosting process.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class FieldError(BaseModel):
    """One attribute-level violation"""
    field: str
    kind: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class LendingError(Exception):
    """Base class for all engine errors"""


class FieldValidationError(LendingError):
    """One or more attribute-level violations on the document being saved"""

    def __init__(self, display_name: str, errors: List[FieldError]):
        self.display_name = display_name
        self.errors = list(errors)
        super().__init__(
            f"{display_name} validation failed: " + ", ".join(str(error) for error in self.errors)
        )

    @property
    def messages(self) -> Dict[str, str]:
        """Map each failing attribute to its first reason"""
        messages: Dict[str, str] = {}
        for error in self.errors:
            messages.setdefault(error.field, error.message)
        return messages


class ReferenceResolutionError(LendingError):
    """A referenced document could not be found or is incomplete"""

    def __init__(self, message: str, path: Optional[str] = None):
        self.message = message
        self.path = path
        super().__init__(message)


class UniquenessConflictError(LendingError):
    """A uniqueness constraint was violated"""

    def __init__(self, field: str, value: Any):
        self.field = field
        self.value = value
        super().__init__(f"{field}: `{value}` is already in use")


class DocumentNotFoundError(LendingError):
    """A document addressed by id does not exist"""

    def __init__(self, kind: str, document_id: Any):
        self.kind = kind
        self.document_id = document_id
        super().__init__(f"{kind} {document_id} not found")


class DuplicateDocumentError(LendingError):
    """The store rejected a write on a unique constraint"""

    def __init__(self, kind: str, detail: str = ""):
        self.kind = kind
        self.detail = detail
        super().__init__(f"Duplicate {kind} document" + (f": {detail}" if detail else ""))


class UnknownDocumentKindError(LendingError):
    """No document type is registered for a kind"""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Unknown document kind: {kind}")
