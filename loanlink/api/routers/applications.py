from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from loanlink.api import deps
from loanlink.core.roles import UserRole
from loanlink.schemas.applications import (
    ApplicationCollectionResponse,
    ApplicationCreate,
    ApplicationDecision,
    ApplicationDTO,
    ApplicationListResponse,
    ApplicationResponse,
    ApplicationStatus,
    PaymentConfirmRequest,
    PaymentIntentRequest,
    PaymentIntentResponse,
)
from loanlink.schemas.common import MessageResponse, PageParams, page_params, total_pages
from loanlink.services import applications as applications_service, payments
from loanlink.services.authz import AuthContext
from loanlink.services.payments import PaymentGateway

router = APIRouter(prefix="/applications", tags=["applications"])

require_borrower = deps.require_roles(UserRole.BORROWER)
require_staff = deps.require_roles(UserRole.MANAGER, UserRole.ADMIN)


@router.post(
    "",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Apply for a loan",
)
async def create_application(
    payload: ApplicationCreate,
    current_user: AuthContext = Depends(require_borrower),
    db: AsyncSession = Depends(deps.get_db_session),
) -> ApplicationResponse:
    application = await applications_service.create_application(db, payload, current_user)
    return ApplicationResponse(application=ApplicationDTO.model_validate(application))


@router.get("", response_model=ApplicationListResponse, summary="List all applications")
async def list_applications(
    status_filter: ApplicationStatus | None = Query(default=None, alias="status"),
    page: PageParams = Depends(page_params),
    current_user: AuthContext = Depends(require_staff),
    db: AsyncSession = Depends(deps.get_db_session),
) -> ApplicationListResponse:
    applications, total = await applications_service.list_applications(
        db, page=page, status=status_filter
    )
    return ApplicationListResponse(
        applications=[ApplicationDTO.model_validate(item) for item in applications],
        total_pages=total_pages(total, page.limit),
        current_page=page.page,
        total=total,
    )


@router.get(
    "/my-applications",
    response_model=ApplicationCollectionResponse,
    summary="List the current borrower's applications",
)
async def list_my_applications(
    current_user: AuthContext = Depends(require_borrower),
    db: AsyncSession = Depends(deps.get_db_session),
) -> ApplicationCollectionResponse:
    applications = await applications_service.list_applications_for_user(db, current_user)
    return ApplicationCollectionResponse(
        applications=[ApplicationDTO.model_validate(item) for item in applications]
    )


@router.post(
    "/create-payment-intent",
    response_model=PaymentIntentResponse,
    summary="Start paying the application fee",
)
async def create_payment_intent(
    payload: PaymentIntentRequest,
    current_user: AuthContext = Depends(deps.require_authenticated_user),
    gateway: PaymentGateway | None = Depends(deps.get_payments),
    db: AsyncSession = Depends(deps.get_db_session),
) -> PaymentIntentResponse:
    client_secret = await payments.create_fee_intent(
        db, gateway, payload.application_id, current_user
    )
    return PaymentIntentResponse(client_secret=client_secret)


@router.post(
    "/confirm-payment",
    response_model=ApplicationResponse,
    summary="Finalize the application fee payment",
)
async def confirm_payment(
    payload: PaymentConfirmRequest,
    current_user: AuthContext = Depends(deps.require_authenticated_user),
    gateway: PaymentGateway | None = Depends(deps.get_payments),
    db: AsyncSession = Depends(deps.get_db_session),
) -> ApplicationResponse:
    application = await payments.confirm_fee_payment(
        db, gateway, payload.application_id, payload.payment_intent_id, current_user
    )
    return ApplicationResponse(application=ApplicationDTO.model_validate(application))


@router.get("/{application_id}", response_model=ApplicationResponse, summary="Get an application")
async def get_application(
    application_id: UUID,
    current_user: AuthContext = Depends(deps.require_authenticated_user),
    db: AsyncSession = Depends(deps.get_db_session),
) -> ApplicationResponse:
    application = await applications_service.get_application_for_actor(
        db, application_id, current_user
    )
    return ApplicationResponse(application=ApplicationDTO.model_validate(application))


@router.patch(
    "/{application_id}/approve",
    response_model=ApplicationResponse,
    summary="Approve an application",
)
async def approve_application(
    application_id: UUID,
    current_user: AuthContext = Depends(require_staff),
    db: AsyncSession = Depends(deps.get_db_session),
) -> ApplicationResponse:
    application = await applications_service.decide_application(
        db, application_id, ApplicationDecision.APPROVE, current_user
    )
    return ApplicationResponse(application=ApplicationDTO.model_validate(application))


@router.patch(
    "/{application_id}/reject",
    response_model=ApplicationResponse,
    summary="Reject an application",
)
async def reject_application(
    application_id: UUID,
    current_user: AuthContext = Depends(require_staff),
    db: AsyncSession = Depends(deps.get_db_session),
) -> ApplicationResponse:
    application = await applications_service.decide_application(
        db, application_id, ApplicationDecision.REJECT, current_user
    )
    return ApplicationResponse(application=ApplicationDTO.model_validate(application))


@router.delete(
    "/{application_id}",
    response_model=MessageResponse,
    summary="Cancel a pending application",
)
async def cancel_application(
    application_id: UUID,
    current_user: AuthContext = Depends(require_borrower),
    db: AsyncSession = Depends(deps.get_db_session),
) -> MessageResponse:
    await applications_service.cancel_application(db, application_id, current_user)
    return MessageResponse(message="Application cancelled successfully")
