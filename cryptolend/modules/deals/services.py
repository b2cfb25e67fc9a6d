import logging
from datetime import datetime
from typing import Any, Dict, Tuple

from dateutil.relativedelta import relativedelta

from cryptolend.core.documents import utcnow
from cryptolend.core.exceptions import ReferenceResolutionError
from cryptolend.core.store import DocumentStore
from cryptolend.modules.interest_terms.schemas import InterestTermDocument
from cryptolend.modules.loan_requests.schemas import LoanRequestDocument

logger = logging.getLogger(__name__)


def add_months(base: datetime, months: int) -> datetime:
    """
    Calendar month addition.

    A day-of-month past the end of the target month lands on that month's last
    day, so Jan 31 + 1 month is Feb 28 (Feb 29 in leap years).
    """
    return base + relativedelta(months=months)


def is_valid_loan_length(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class DealService:
    """Derives a deal's expected completion date from its loan request's terms"""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def resolve_loan_terms(self, loan_request_id: Any) -> Tuple[LoanRequestDocument, InterestTermDocument]:
        """
        Resolve a loan request and then its interest term.

        Both lookups form one unit: any failure is reported against
        ``loan_details`` and stops the save.
        """
        loan_request = await self.store.find_by_id(LoanRequestDocument.kind, loan_request_id)
        if loan_request is None:
            raise ReferenceResolutionError("LoanRequest document not found", path="loan_details")

        interest_term_id = getattr(loan_request, "interest_term", None)
        if interest_term_id is None:
            raise ReferenceResolutionError("LoanRequest missing interest_term", path="loan_details")

        interest_term = await self.store.find_by_id(InterestTermDocument.kind, interest_term_id)
        if interest_term is None or not is_valid_loan_length(getattr(interest_term, "loan_length", None)):
            raise ReferenceResolutionError("Interest term is missing or invalid", path="loan_details")

        return loan_request, interest_term

    async def calculate_expected_completion_date(self, loan_request_id: Any) -> datetime:
        loan_request, interest_term = await self.resolve_loan_terms(loan_request_id)
        base = getattr(loan_request, "created_at", None) or utcnow()
        return add_months(base, interest_term.loan_length)

    async def derive_expected_completion_date(self, candidate: Dict[str, Any]) -> Dict[str, Any]:
        """Return the candidate attributes with the completion date filled in"""
        expected = await self.calculate_expected_completion_date(candidate["loan_details"])
        logger.info(f"Expected completion for loan request {candidate['loan_details']}: {expected.isoformat()}")
        return {**candidate, "expected_completion_date": expected}
