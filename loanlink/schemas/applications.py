from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import Field

from loanlink.schemas.common import CamelModel, UserSummaryDTO


class ApplicationStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class FeeStatus(str, Enum):
    UNPAID = "Unpaid"
    PAID = "Paid"


class ApplicationDecision(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class ApplicationCreate(CamelModel):
    loan_id: UUID
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    contact_number: str = Field(min_length=1, max_length=50)
    national_id: str = Field(min_length=1, max_length=100)
    income_source: str = Field(min_length=1, max_length=255)
    monthly_income: float = Field(ge=0)
    loan_amount: float = Field(gt=0)
    reason: str = Field(min_length=1)
    address: str = Field(min_length=1)
    notes: str = ""


class PaymentDetailsDTO(CamelModel):
    transaction_id: str
    amount: float | None = None
    paid_at: datetime | None = None


class LoanSummaryDTO(CamelModel):
    id: UUID
    title: str
    category: str
    interest: float


class ApplicationDTO(CamelModel):
    id: UUID
    user_id: UUID
    user_email: str
    loan_id: UUID | None = None
    loan_title: str
    interest_rate: float
    first_name: str
    last_name: str
    contact_number: str
    national_id: str
    income_source: str
    monthly_income: float
    loan_amount: float
    reason: str
    address: str
    notes: str = ""
    status: ApplicationStatus
    application_fee_status: FeeStatus
    payment_details: PaymentDetailsDTO | None = None
    approved_at: datetime | None = None
    rejected_at: datetime | None = None
    applicant: UserSummaryDTO | None = None
    loan: LoanSummaryDTO | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ApplicationResponse(CamelModel):
    success: bool = True
    application: ApplicationDTO


class ApplicationCollectionResponse(CamelModel):
    success: bool = True
    applications: list[ApplicationDTO]


class ApplicationListResponse(ApplicationCollectionResponse):
    total_pages: int
    current_page: int
    total: int


class PaymentIntentRequest(CamelModel):
    application_id: UUID


class PaymentIntentResponse(CamelModel):
    success: bool = True
    client_secret: str


class PaymentConfirmRequest(CamelModel):
    application_id: UUID
    payment_intent_id: str = Field(min_length=1, max_length=255)
