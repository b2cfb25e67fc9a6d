"""
Base document type shared by every entity kind.

Documents are pydantic models; constructing one through ``model_validate`` runs
the field validators, while stores rebuild trusted rows with ``model_construct``.
"""
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple, Type

from pydantic import BaseModel, field_validator, model_validator

from cryptolend.core.exceptions import UnknownDocumentKindError

DOCUMENT_TYPES: Dict[str, Type["BaseDocument"]] = {}


def utcnow() -> datetime:
    """Current time as naive UTC, the form every timestamp is stored in"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Any) -> Any:
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def get_document_type(kind: str) -> Type["BaseDocument"]:
    """Look up a registered document type by kind"""
    try:
        return DOCUMENT_TYPES[kind]
    except KeyError:
        raise UnknownDocumentKindError(kind)


class BaseDocument(BaseModel):
    kind: ClassVar[str] = ""
    display_name: ClassVar[str] = ""
    orm_model: ClassVar[Any] = None
    # Attributes holding the id of another document
    reference_fields: ClassVar[Tuple[str, ...]] = ()
    unique_fields: ClassVar[Tuple[str, ...]] = ()
    # Never handed to a store
    transient_fields: ClassVar[Tuple[str, ...]] = ()
    # derived attribute -> reference it is derived from
    derived_fields: ClassVar[Dict[str, str]] = {}
    # Set by the engine or a store, never taken from caller data
    managed_fields: ClassVar[Tuple[str, ...]] = ("created_at", "updated_at")
    required_messages: ClassVar[Dict[str, str]] = {}

    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        if cls.kind:
            DOCUMENT_TYPES[cls.kind] = cls

    @classmethod
    def normalize_references(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Replace referenced documents with their ids"""
        normalized = dict(data)
        for field in cls.reference_fields:
            value = normalized.get(field)
            if isinstance(value, BaseDocument):
                normalized[field] = value.id
        return normalized

    @classmethod
    def drop_managed(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Discard attributes a caller may not write, including derived ones"""
        return {
            name: value for name, value in data.items()
            if name not in cls.managed_fields and name not in cls.derived_fields
        }

    @model_validator(mode="before")
    @classmethod
    def resolve_reference_ids(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return cls.normalize_references(data)
        return data

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def normalize_timestamps(cls, v):
        return to_naive_utc(v)

    @property
    def is_new(self) -> bool:
        return self.id is None

    def to_attributes(self) -> Dict[str, Any]:
        """All declared attributes, including ones excluded from dumps"""
        return {name: getattr(self, name, None) for name in type(self).model_fields}

    def to_stored_attributes(self) -> Dict[str, Any]:
        attributes = self.to_attributes()
        for name in self.transient_fields:
            attributes.pop(name, None)
        return attributes


def as_attributes(data: Any) -> Dict[str, Any]:
    """Accept either a document or a plain mapping of attributes"""
    if isinstance(data, BaseDocument):
        return data.to_attributes()
    return dict(data)
