# Document modules; importing this package registers every document kind
from cryptolend.modules.users import User, UserDocument, UserService
from cryptolend.modules.cryptocurrencies import Cryptocurrency, CryptocurrencyDocument
from cryptolend.modules.interest_terms import InterestTerm, InterestTermDocument
from cryptolend.modules.loan_requests import LoanRequest, LoanRequestStatus, LoanRequestDocument
from cryptolend.modules.deals import Deal, DealDocument, DealService

__all__ = [
    "User", "UserDocument", "UserService",
    "Cryptocurrency", "CryptocurrencyDocument",
    "InterestTerm", "InterestTermDocument",
    "LoanRequest", "LoanRequestStatus", "LoanRequestDocument",
    "Deal", "DealDocument", "DealService",
]
