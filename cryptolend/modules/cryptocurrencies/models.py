from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from cryptolend.core.database import Base


class Cryptocurrency(Base):
    """Collateral currency reference data"""
    __tablename__ = "cryptocurrencies"

    id = Column(Integer, primary_key=True, index=True)
    symbol = Column(String(5), index=True, nullable=False)
    name = Column(String(50), nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Cryptocurrency(id={self.id}, symbol={self.symbol})>"
