import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import relationship

from loanlink.db.base import Base


class Loan(Base):
    __tablename__ = "loans"
    __table_args__ = (
        CheckConstraint("interest >= 0", name="ck_loans_interest_nonneg"),
        CheckConstraint("max_limit >= 0", name="ck_loans_max_limit_nonneg"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(100), nullable=False, index=True)
    interest = Column(Numeric(6, 2), nullable=False)
    max_limit = Column(Numeric(18, 2), nullable=False)
    required_documents = Column(JSONB, nullable=False, default=list)
    emi_plans = Column(JSONB, nullable=False, default=list)
    images = Column(JSONB, nullable=False, default=list)
    show_on_home = Column(Boolean, nullable=False, default=False, server_default="false", index=True)
    created_by = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    created_by_email = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    creator = relationship("User", lazy="selectin")
