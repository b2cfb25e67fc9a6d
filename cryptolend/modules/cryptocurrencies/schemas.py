import re
from pydantic import Field, field_validator
from pydantic_core import PydanticCustomError
from typing import ClassVar, Dict

from cryptolend.core.documents import BaseDocument
from cryptolend.modules.cryptocurrencies.models import Cryptocurrency

SYMBOL_PATTERN = re.compile(r"[A-Z]+")


class CryptocurrencyDocument(BaseDocument):
    kind: ClassVar[str] = "cryptocurrency"
    display_name: ClassVar[str] = "Cryptocurrency"
    orm_model: ClassVar = Cryptocurrency
    required_messages: ClassVar[Dict[str, str]] = {"symbol": "Symbol is required"}

    symbol: str = Field(..., min_length=3, max_length=5)
    name: str = Field(..., min_length=1, max_length=50)

    @field_validator('symbol', mode='before')
    @classmethod
    def uppercase_symbol(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator('symbol')
    @classmethod
    def validate_symbol(cls, v):
        if not SYMBOL_PATTERN.fullmatch(v):
            raise PydanticCustomError('regexp', 'Symbol must contain only uppercase letters')
        return v

    @field_validator('name', mode='before')
    @classmethod
    def trim_name(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v
