import uuid

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from loanlink.db.base import Base
from loanlink.models.types import EncryptedString


class LoanApplication(Base):
    __tablename__ = "loan_applications"
    __table_args__ = (
        CheckConstraint("monthly_income >= 0", name="ck_loan_app_income_nonneg"),
        CheckConstraint("loan_amount > 0", name="ck_loan_app_amount_positive"),
        CheckConstraint("version >= 1", name="ck_loan_app_version_positive"),
        CheckConstraint(
            "status IN ('Pending', 'Approved', 'Rejected')",
            name="ck_loan_app_status",
        ),
        CheckConstraint(
            "application_fee_status IN ('Unpaid', 'Paid')",
            name="ck_loan_app_fee_status",
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    user_email = Column(String(255), nullable=False)
    loan_id = Column(
        UUID(as_uuid=True),
        ForeignKey("loans.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    loan_title = Column(String(255), nullable=False)
    interest_rate = Column(Numeric(6, 2), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    contact_number = Column(String(50), nullable=False)
    national_id = Column(EncryptedString(), nullable=False)
    income_source = Column(String(255), nullable=False)
    monthly_income = Column(Numeric(18, 2), nullable=False)
    loan_amount = Column(Numeric(18, 2), nullable=False)
    reason = Column(Text, nullable=False)
    address = Column(Text, nullable=False)
    notes = Column(Text, nullable=False, default="", server_default="")
    status = Column(String(20), nullable=False, default="Pending", index=True)
    application_fee_status = Column(String(20), nullable=False, default="Unpaid")
    payment_transaction_id = Column(String(255), nullable=True)
    payment_amount = Column(Numeric(18, 2), nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    applicant = relationship("User", lazy="selectin")
    loan = relationship("Loan", lazy="selectin")

    __mapper_args__ = {"version_id_col": version}

    @property
    def payment_details(self) -> dict | None:
        if not self.payment_transaction_id:
            return None
        return {
            "transaction_id": self.payment_transaction_id,
            "amount": self.payment_amount,
            "paid_at": self.paid_at,
        }
