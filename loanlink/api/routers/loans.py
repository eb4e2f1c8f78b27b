from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from loanlink.api import deps
from loanlink.core.roles import UserRole
from loanlink.schemas.common import MessageResponse, PageParams, page_params, total_pages
from loanlink.schemas.loans import (
    LoanCollectionResponse,
    LoanCreate,
    LoanDTO,
    LoanListResponse,
    LoanResponse,
    LoanUpdate,
)
from loanlink.services import loans as loans_service
from loanlink.services.authz import AuthContext

router = APIRouter(prefix="/loans", tags=["loans"])

require_staff = deps.require_roles(UserRole.MANAGER, UserRole.ADMIN)


def _collection(loans) -> list[LoanDTO]:
    return [LoanDTO.model_validate(loan) for loan in loans]


@router.get("", response_model=LoanListResponse, summary="Browse loan offers")
async def list_loans(
    search: str | None = Query(default=None, max_length=100),
    category: str | None = Query(default=None, max_length=100),
    page: PageParams = Depends(page_params),
    db: AsyncSession = Depends(deps.get_db_session),
) -> LoanListResponse:
    loans, total = await loans_service.list_loans(db, page=page, search=search, category=category)
    return LoanListResponse(
        loans=_collection(loans),
        total_pages=total_pages(total, page.limit),
        current_page=page.page,
        total=total,
    )


@router.get("/featured", response_model=LoanCollectionResponse, summary="Loans shown on the home page")
async def list_featured_loans(
    db: AsyncSession = Depends(deps.get_db_session),
) -> LoanCollectionResponse:
    loans = await loans_service.list_featured_loans(db)
    return LoanCollectionResponse(loans=_collection(loans))


@router.get(
    "/manager/my-loans",
    response_model=LoanCollectionResponse,
    summary="Loans created by the current manager",
)
async def list_my_loans(
    search: str | None = Query(default=None, max_length=100),
    current_user: AuthContext = Depends(deps.require_roles(UserRole.MANAGER)),
    db: AsyncSession = Depends(deps.get_db_session),
) -> LoanCollectionResponse:
    loans = await loans_service.list_manager_loans(db, current_user, search=search)
    return LoanCollectionResponse(loans=_collection(loans))


@router.get("/{loan_id}", response_model=LoanResponse, summary="Get a loan offer")
async def get_loan(
    loan_id: UUID,
    db: AsyncSession = Depends(deps.get_db_session),
) -> LoanResponse:
    loan = await loans_service.get_loan_or_404(db, loan_id)
    return LoanResponse(loan=LoanDTO.model_validate(loan))


@router.post(
    "",
    response_model=LoanResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a loan offer",
)
async def create_loan(
    payload: LoanCreate,
    current_user: AuthContext = Depends(require_staff),
    db: AsyncSession = Depends(deps.get_db_session),
) -> LoanResponse:
    loan = await loans_service.create_loan(db, payload, current_user)
    return LoanResponse(loan=LoanDTO.model_validate(loan))


@router.put("/{loan_id}", response_model=LoanResponse, summary="Update a loan offer")
async def update_loan(
    loan_id: UUID,
    payload: LoanUpdate,
    current_user: AuthContext = Depends(require_staff),
    db: AsyncSession = Depends(deps.get_db_session),
) -> LoanResponse:
    loan = await loans_service.update_loan(db, loan_id, payload, current_user)
    return LoanResponse(loan=LoanDTO.model_validate(loan))


@router.delete("/{loan_id}", response_model=MessageResponse, summary="Delete a loan offer")
async def delete_loan(
    loan_id: UUID,
    current_user: AuthContext = Depends(require_staff),
    db: AsyncSession = Depends(deps.get_db_session),
) -> MessageResponse:
    await loans_service.delete_loan(db, loan_id, current_user)
    return MessageResponse(message="Loan deleted successfully")


@router.patch(
    "/{loan_id}/toggle-home",
    response_model=LoanResponse,
    summary="Flip whether a loan is featured on the home page",
)
async def toggle_home(
    loan_id: UUID,
    current_user: AuthContext = Depends(deps.require_roles(UserRole.ADMIN)),
    db: AsyncSession = Depends(deps.get_db_session),
) -> LoanResponse:
    loan = await loans_service.toggle_show_on_home(db, loan_id, current_user)
    return LoanResponse(loan=LoanDTO.model_validate(loan))
