from typing import TYPE_CHECKING, Any, List, Optional, Type, Union

from pydantic import BaseModel, ValidationError

from cryptolend.core.config import Settings, get_settings
from cryptolend.core.documents import BaseDocument, as_attributes, get_document_type
from cryptolend.core.exceptions import FieldError, FieldValidationError

if TYPE_CHECKING:
    from cryptolend.core.store import DocumentStore


class ValidationResult(BaseModel):
    """Outcome of a validation step: ok with a document, or a list of field errors"""
    ok: bool
    errors: List[FieldError] = []
    document: Optional[Any] = None

    @classmethod
    def success(cls, document: Optional[BaseDocument] = None) -> "ValidationResult":
        return cls(ok=True, document=document)

    @classmethod
    def failure(cls, errors: List[FieldError]) -> "ValidationResult":
        return cls(ok=False, errors=errors)

    @property
    def messages(self) -> dict:
        messages = {}
        for error in self.errors:
            messages.setdefault(error.field, error.message)
        return messages

    def raise_for_errors(self, display_name: str) -> None:
        if not self.ok:
            raise FieldValidationError(display_name, self.errors)


def translate_errors(document_type: Type[BaseDocument], exc: ValidationError) -> List[FieldError]:
    """Convert pydantic errors into ordered field errors"""
    errors = []
    for error in exc.errors():
        loc = error.get("loc") or ()
        field = ".".join(str(part) for part in loc) if loc else "__root__"
        kind = error["type"]
        if kind == "missing":
            kind = "required"
            message = document_type.required_messages.get(field, f"Path `{field}` is required.")
        else:
            message = error["msg"]
        errors.append(FieldError(field=field, kind=kind, message=message))
    return errors


def validate_document(
    kind: Union[str, Type[BaseDocument]],
    data: Any,
    settings: Optional[Settings] = None
) -> ValidationResult:
    """Run the field validators of one document kind over candidate attributes"""
    document_type = get_document_type(kind) if isinstance(kind, str) else kind
    try:
        document = document_type.model_validate(
            as_attributes(data),
            context={"settings": settings or get_settings()}
        )
    except ValidationError as exc:
        return ValidationResult.failure(translate_errors(document_type, exc))
    return ValidationResult.success(document)


async def check_unique(
    store: "DocumentStore",
    document_type: Type[BaseDocument],
    field: str,
    value: Any,
    excluding_id: Optional[int] = None
) -> ValidationResult:
    """Fail when another stored document already holds ``value`` in ``field``"""
    existing = await store.query_by_field(document_type.kind, field, value)
    if existing is not None and existing.id != excluding_id:
        return ValidationResult.failure([
            FieldError(field=field, kind="unique", message=f"`{value}` is already in use")
        ])
    return ValidationResult.success()
