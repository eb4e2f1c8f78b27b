from __future__ import annotations

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from loanlink.core.errors import ConcurrentUpdate, NotFound
from loanlink.core.logging import audit_event
from loanlink.models.loan_application import LoanApplication
from loanlink.schemas.applications import (
    ApplicationCreate,
    ApplicationDecision,
    ApplicationStatus,
)
from loanlink.schemas.common import PageParams
from loanlink.services import application_workflow, authz, loans as loans_service
from loanlink.services.authz import AuthContext

logger = logging.getLogger(__name__)

_DECISION_EVENTS = {
    ApplicationDecision.APPROVE: "application.approved",
    ApplicationDecision.REJECT: "application.rejected",
}


async def commit_versioned(db: AsyncSession) -> None:
    """Commit a change to a versioned application, surfacing lost races as 409."""
    try:
        await db.commit()
    except StaleDataError as exc:
        await db.rollback()
        raise ConcurrentUpdate(
            "The loan application was updated by another request. Please refresh and retry."
        ) from exc


async def get_application(db: AsyncSession, application_id: UUID) -> LoanApplication | None:
    stmt = (
        select(LoanApplication)
        .where(LoanApplication.id == application_id)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_application_or_404(db: AsyncSession, application_id: UUID) -> LoanApplication:
    application = await get_application(db, application_id)
    if application is None:
        raise NotFound("Application not found")
    return application


async def get_application_for_actor(
    db: AsyncSession, application_id: UUID, actor: AuthContext
) -> LoanApplication:
    application = await get_application_or_404(db, application_id)
    authz.ensure_owner_or_privileged(actor, application.user_id, authz.APPLICATION_VIEW_BYPASS)
    return application


async def create_application(
    db: AsyncSession, payload: ApplicationCreate, actor: AuthContext
) -> LoanApplication:
    loan = await loans_service.get_loan_or_404(db, payload.loan_id)
    data = payload.model_dump()
    application = LoanApplication(
        **data,
        user_id=actor.id,
        user_email=actor.email,
        loan_title=loan.title,
        interest_rate=loan.interest,
    )
    application_workflow.initialize(application)
    db.add(application)
    await db.commit()
    audit_event(
        "application.created",
        actor_id=str(actor.id),
        application_id=str(application.id),
        loan_id=str(loan.id),
    )
    hydrated = await get_application(db, application.id)
    return hydrated or application


async def list_applications(
    db: AsyncSession,
    *,
    page: PageParams,
    status: ApplicationStatus | None = None,
) -> tuple[list[LoanApplication], int]:
    conditions = []
    if status is not None:
        conditions.append(LoanApplication.status == status.value)

    count_stmt = select(func.count()).select_from(LoanApplication).where(*conditions)
    total = int((await db.execute(count_stmt)).scalar_one())

    stmt = (
        select(LoanApplication)
        .where(*conditions)
        .order_by(LoanApplication.created_at.desc())
        .offset(page.offset)
        .limit(page.limit)
    )
    applications = (await db.execute(stmt)).scalars().all()
    return list(applications), total


async def list_applications_for_user(db: AsyncSession, actor: AuthContext) -> list[LoanApplication]:
    stmt = (
        select(LoanApplication)
        .where(LoanApplication.user_id == actor.id)
        .order_by(LoanApplication.created_at.desc())
    )
    return list((await db.execute(stmt)).scalars().all())


async def decide_application(
    db: AsyncSession,
    application_id: UUID,
    decision: ApplicationDecision,
    actor: AuthContext,
) -> LoanApplication:
    application = await get_application_or_404(db, application_id)
    previous = application.status
    application_workflow.apply_decision(application, decision)
    db.add(application)
    await commit_versioned(db)
    audit_event(
        _DECISION_EVENTS[decision],
        actor_id=str(actor.id),
        application_id=str(application.id),
        old=previous,
        new=application.status,
    )
    hydrated = await get_application(db, application.id)
    return hydrated or application


async def cancel_application(db: AsyncSession, application_id: UUID, actor: AuthContext) -> None:
    application = await get_application_or_404(db, application_id)
    authz.ensure_owner_or_privileged(actor, application.user_id, authz.APPLICATION_CANCEL_BYPASS)
    application_workflow.ensure_cancellable(application)
    await db.delete(application)
    await commit_versioned(db)
    audit_event("application.cancelled", actor_id=str(actor.id), application_id=str(application_id))


async def record_fee_payment(
    db: AsyncSession,
    application: LoanApplication,
    *,
    transaction_id: str,
    amount: Decimal,
    actor: AuthContext,
) -> LoanApplication:
    application_workflow.mark_fee_paid(application, transaction_id=transaction_id, amount=amount)
    db.add(application)
    await commit_versioned(db)
    audit_event(
        "application.fee_paid",
        actor_id=str(actor.id),
        application_id=str(application.id),
        transaction_id=transaction_id,
        amount=str(amount),
    )
    hydrated = await get_application(db, application.id)
    return hydrated or application
