# Cryptocurrencies module
from cryptolend.modules.cryptocurrencies.models import Cryptocurrency
from cryptolend.modules.cryptocurrencies.schemas import CryptocurrencyDocument

__all__ = ["Cryptocurrency", "CryptocurrencyDocument"]
