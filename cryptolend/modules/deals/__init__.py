# Deals module
from cryptolend.modules.deals.models import Deal
from cryptolend.modules.deals.schemas import DealDocument
from cryptolend.modules.deals.services import DealService, add_months

__all__ = ["Deal", "DealDocument", "DealService", "add_months"]
