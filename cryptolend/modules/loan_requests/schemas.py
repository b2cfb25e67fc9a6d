from datetime import datetime, timedelta
from pydantic import Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError
from typing import ClassVar, Optional, Tuple

from cryptolend.core.config import get_settings
from cryptolend.core.documents import BaseDocument, to_naive_utc, utcnow
from cryptolend.modules.loan_requests.models import LoanRequest, LoanRequestStatus

STATUS_VALUES = [status.value for status in LoanRequestStatus]


class LoanRequestDocument(BaseDocument):
    """
    Loan request document.

    ``request_date`` defaults to now and may not lie in the future.
    ``expiry_date`` defaults to ``LOAN_REQUEST_EXPIRY_DAYS`` after the request
    date and must fall strictly after it.
    """
    kind: ClassVar[str] = "loan_request"
    display_name: ClassVar[str] = "LoanRequest"
    orm_model: ClassVar = LoanRequest
    reference_fields: ClassVar[Tuple[str, ...]] = ("borrower_id", "cryptocurrency", "interest_term")

    borrower_id: int
    cryptocurrency: int
    request_amount: float = Field(..., allow_inf_nan=False)
    interest_term: int
    request_date: datetime = Field(default_factory=utcnow)
    expiry_date: Optional[datetime] = Field(None, validate_default=True)
    status: LoanRequestStatus = LoanRequestStatus.PENDING

    @field_validator('request_amount')
    @classmethod
    def validate_request_amount(cls, v):
        if not v > 0:
            raise PydanticCustomError('min', 'Request amount must be greater than 0')
        return v

    @field_validator('request_date', 'expiry_date', mode='before')
    @classmethod
    def normalize_dates(cls, v):
        return to_naive_utc(v)

    @field_validator('request_date')
    @classmethod
    def validate_request_date(cls, v):
        if v > utcnow():
            raise PydanticCustomError('max', 'Request date cannot be in the future')
        return v

    @field_validator('expiry_date')
    @classmethod
    def validate_expiry_date(cls, v, info: ValidationInfo):
        request_date = info.data.get('request_date')
        if request_date is None:
            # request_date already failed; nothing to compare against
            return v
        if v is None:
            settings = (info.context or {}).get('settings') or get_settings()
            return request_date + timedelta(days=settings.LOAN_REQUEST_EXPIRY_DAYS)
        if v <= request_date:
            raise PydanticCustomError('expiry_date', 'Expiry date must be after request date')
        return v

    @field_validator('status', mode='before')
    @classmethod
    def validate_status(cls, v):
        if isinstance(v, LoanRequestStatus):
            return v
        if v not in STATUS_VALUES:
            raise PydanticCustomError(
                'enum',
                '`{value}` is not a valid enum value for path `status`',
                {'value': v}
            )
        return v
