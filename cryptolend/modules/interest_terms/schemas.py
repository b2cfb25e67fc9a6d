from pydantic import Field
from typing import ClassVar

from cryptolend.core.documents import BaseDocument
from cryptolend.modules.interest_terms.models import InterestTerm


class InterestTermDocument(BaseDocument):
    kind: ClassVar[str] = "interest_term"
    display_name: ClassVar[str] = "InterestTerm"
    orm_model: ClassVar = InterestTerm

    loan_length: int = Field(..., gt=0, strict=True)
    interest_rate: float = Field(..., ge=0)
