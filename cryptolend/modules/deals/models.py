from sqlalchemy import Column, Integer, Boolean, ForeignKey, DateTime
from sqlalchemy.sql import func
from cryptolend.core.database import Base


class Deal(Base):
    """Agreement binding a lender to a borrower's loan request"""
    __tablename__ = "deals"

    id = Column(Integer, primary_key=True, index=True)
    lender_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    loan_details = Column("loan_request_id", Integer, ForeignKey("loan_requests.id"), nullable=False, index=True)
    is_complete = Column(Boolean, default=False, nullable=False)
    expected_completion_date = Column(DateTime, nullable=True)  # derived from the loan's terms
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Deal(id={self.id}, lender_id={self.lender_id}, loan_request_id={self.loan_details})>"
