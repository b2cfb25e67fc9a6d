from datetime import datetime
from pydantic import field_validator
from typing import ClassVar, Dict, Optional, Tuple

from cryptolend.core.documents import BaseDocument, to_naive_utc
from cryptolend.modules.deals.models import Deal


class DealDocument(BaseDocument):
    kind: ClassVar[str] = "deal"
    display_name: ClassVar[str] = "Deal"
    orm_model: ClassVar = Deal
    reference_fields: ClassVar[Tuple[str, ...]] = ("lender_id", "loan_details")
    derived_fields: ClassVar[Dict[str, str]] = {"expected_completion_date": "loan_details"}

    lender_id: int
    loan_details: int
    is_complete: bool = False
    expected_completion_date: Optional[datetime] = None

    @field_validator('expected_completion_date', mode='before')
    @classmethod
    def normalize_completion_date(cls, v):
        return to_naive_utc(v)
