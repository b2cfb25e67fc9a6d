from sqlalchemy import Column, Integer, Float, ForeignKey, DateTime, Enum as SQLEnum
from sqlalchemy.sql import func
from cryptolend.core.database import Base
import enum


class LoanRequestStatus(str, enum.Enum):
    """Loan request status"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    FUNDED = "funded"
    CANCELLED = "cancelled"


class LoanRequest(Base):
    """A borrower's request for funds against a collateral cryptocurrency"""
    __tablename__ = "loan_requests"

    id = Column(Integer, primary_key=True, index=True)
    borrower_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    cryptocurrency = Column("cryptocurrency_id", Integer, ForeignKey("cryptocurrencies.id"), nullable=False)
    request_amount = Column(Float, nullable=False)
    # Nullable: rows written by other collaborators may lack terms
    interest_term = Column("interest_term_id", Integer, ForeignKey("interest_terms.id"), nullable=True)
    request_date = Column(DateTime, nullable=False)
    expiry_date = Column(DateTime, nullable=False)
    status = Column(SQLEnum(LoanRequestStatus), default=LoanRequestStatus.PENDING, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<LoanRequest(id={self.id}, amount={self.request_amount}, status={self.status})>"
