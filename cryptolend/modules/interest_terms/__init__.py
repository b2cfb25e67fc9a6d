# Interest terms module
from cryptolend.modules.interest_terms.models import InterestTerm
from cryptolend.modules.interest_terms.schemas import InterestTermDocument

__all__ = ["InterestTerm", "InterestTermDocument"]
