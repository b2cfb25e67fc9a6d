# Loan requests module
from cryptolend.modules.loan_requests.models import LoanRequest, LoanRequestStatus
from cryptolend.modules.loan_requests.schemas import LoanRequestDocument

__all__ = ["LoanRequest", "LoanRequestStatus", "LoanRequestDocument"]
