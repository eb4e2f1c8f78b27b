from datetime import datetime
from uuid import UUID

from pydantic import Field

from loanlink.schemas.common import CamelModel, UserSummaryDTO


class LoanBase(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    category: str = Field(min_length=1, max_length=100)
    interest: float = Field(ge=0)
    max_limit: float = Field(ge=0)
    required_documents: list[str] = Field(default_factory=list)
    emi_plans: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    show_on_home: bool = False


class LoanCreate(LoanBase):
    pass


class LoanUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, min_length=1)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    interest: float | None = Field(default=None, ge=0)
    max_limit: float | None = Field(default=None, ge=0)
    required_documents: list[str] | None = None
    emi_plans: list[str] | None = None
    images: list[str] | None = None
    show_on_home: bool | None = None


class LoanDTO(LoanBase):
    id: UUID
    created_by: UUID
    created_by_email: str
    creator: UserSummaryDTO | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class LoanResponse(CamelModel):
    success: bool = True
    loan: LoanDTO


class LoanCollectionResponse(CamelModel):
    success: bool = True
    loans: list[LoanDTO]


class LoanListResponse(LoanCollectionResponse):
    total_pages: int
    current_page: int
    total: int
