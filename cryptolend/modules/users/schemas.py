from pydantic import Field, ValidationInfo, field_validator
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError
from typing import ClassVar, Optional, Tuple

from cryptolend.core.documents import BaseDocument
from cryptolend.core.security import validate_password_strength
from cryptolend.modules.users.models import User


def normalize_email(value):
    """Trim and lowercase an email address"""
    if isinstance(value, str):
        return value.strip().lower()
    return value


class UserDocument(BaseDocument):
    """
    User document.

    ``password`` is the write-only plaintext candidate; only ``hashed_password``
    reaches a store. A document without either fails with a required error on
    ``password``.
    """
    kind: ClassVar[str] = "user"
    display_name: ClassVar[str] = "User"
    orm_model: ClassVar = User
    unique_fields: ClassVar[Tuple[str, ...]] = ("email",)
    transient_fields: ClassVar[Tuple[str, ...]] = ("password",)
    managed_fields: ClassVar[Tuple[str, ...]] = BaseDocument.managed_fields + ("hashed_password",)

    email: str = Field(..., min_length=3, max_length=200)
    # Declared before password so the password validator can see it
    hashed_password: Optional[str] = Field(None, repr=False)
    password: Optional[str] = Field(None, exclude=True, repr=False, validate_default=True)
    is_admin: bool = False
    is_active: bool = True

    @field_validator('email', mode='before')
    @classmethod
    def normalize_email_input(cls, v):
        return normalize_email(v)

    @field_validator('email')
    @classmethod
    def validate_email_shape(cls, v):
        """Reject anything that is not a bare email address"""
        _, address = validate_email(v)
        if address.lower() != v:
            # validate_email also accepts the "Name <addr>" form
            raise PydanticCustomError(
                'value_error',
                'value is not a valid email address: {reason}',
                {'reason': 'display names are not allowed'}
            )
        return v

    @field_validator('password')
    @classmethod
    def validate_password(cls, v, info: ValidationInfo):
        if v is None:
            if info.data.get('hashed_password') is None:
                raise PydanticCustomError('missing', 'Path `password` is required.')
            return v
        is_valid, error_msg = validate_password_strength(v)
        if not is_valid:
            raise PydanticCustomError('password_strength', error_msg)
        return v
