from sqlalchemy import Column, Integer, Float, DateTime
from sqlalchemy.sql import func
from cryptolend.core.database import Base


class InterestTerm(Base):
    """Interest rate and duration governing a loan"""
    __tablename__ = "interest_terms"

    id = Column(Integer, primary_key=True, index=True)
    loan_length = Column(Integer, nullable=False)  # months
    interest_rate = Column(Float, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)
