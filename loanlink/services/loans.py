from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from loanlink.core.errors import NotFound
from loanlink.core.logging import audit_event
from loanlink.models.loan import Loan
from loanlink.schemas.common import PageParams
from loanlink.schemas.loans import LoanCreate, LoanUpdate
from loanlink.services import authz
from loanlink.services.authz import AuthContext

logger = logging.getLogger(__name__)

FEATURED_LIMIT = 6


def _search_conditions(search: str | None) -> list:
    if not search:
        return []
    return [
        or_(
            Loan.title.icontains(search, autoescape=True),
            Loan.category.icontains(search, autoescape=True),
        )
    ]


async def get_loan(db: AsyncSession, loan_id: UUID) -> Loan | None:
    stmt = (
        select(Loan)
        .where(Loan.id == loan_id)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_loan_or_404(db: AsyncSession, loan_id: UUID) -> Loan:
    loan = await get_loan(db, loan_id)
    if loan is None:
        raise NotFound("Loan not found")
    return loan


async def list_loans(
    db: AsyncSession,
    *,
    page: PageParams,
    search: str | None = None,
    category: str | None = None,
) -> tuple[list[Loan], int]:
    conditions = _search_conditions(search)
    if category:
        conditions.append(Loan.category == category)

    count_stmt = select(func.count()).select_from(Loan).where(*conditions)
    total = int((await db.execute(count_stmt)).scalar_one())

    stmt = (
        select(Loan)
        .where(*conditions)
        .order_by(Loan.created_at.desc())
        .offset(page.offset)
        .limit(page.limit)
    )
    loans = (await db.execute(stmt)).scalars().all()
    return list(loans), total


async def list_featured_loans(db: AsyncSession) -> list[Loan]:
    stmt = (
        select(Loan)
        .where(Loan.show_on_home.is_(True))
        .order_by(Loan.created_at.desc())
        .limit(FEATURED_LIMIT)
    )
    return list((await db.execute(stmt)).scalars().all())


async def list_manager_loans(
    db: AsyncSession, actor: AuthContext, *, search: str | None = None
) -> list[Loan]:
    conditions = [Loan.created_by == actor.id, *_search_conditions(search)]
    stmt = select(Loan).where(*conditions).order_by(Loan.created_at.desc())
    return list((await db.execute(stmt)).scalars().all())


async def create_loan(db: AsyncSession, payload: LoanCreate, actor: AuthContext) -> Loan:
    loan = Loan(
        **payload.model_dump(),
        created_by=actor.id,
        created_by_email=actor.email,
    )
    db.add(loan)
    await db.commit()
    audit_event("loan.created", actor_id=str(actor.id), loan_id=str(loan.id))
    hydrated = await get_loan(db, loan.id)
    return hydrated or loan


async def update_loan(
    db: AsyncSession, loan_id: UUID, payload: LoanUpdate, actor: AuthContext
) -> Loan:
    loan = await get_loan_or_404(db, loan_id)
    authz.ensure_owner_or_privileged(
        actor,
        loan.created_by,
        authz.LOAN_MUTATION_BYPASS,
        message="Not authorized to update this loan",
    )
    changes = payload.model_dump(exclude_unset=True)
    for field, value in changes.items():
        if value is None:
            continue
        setattr(loan, field, value)
    db.add(loan)
    await db.commit()
    audit_event(
        "loan.updated",
        actor_id=str(actor.id),
        loan_id=str(loan.id),
        fields=sorted(changes),
    )
    hydrated = await get_loan(db, loan.id)
    return hydrated or loan


async def delete_loan(db: AsyncSession, loan_id: UUID, actor: AuthContext) -> None:
    loan = await get_loan_or_404(db, loan_id)
    authz.ensure_owner_or_privileged(
        actor,
        loan.created_by,
        authz.LOAN_MUTATION_BYPASS,
        message="Not authorized to delete this loan",
    )
    await db.delete(loan)
    await db.commit()
    audit_event("loan.deleted", actor_id=str(actor.id), loan_id=str(loan_id))


async def toggle_show_on_home(db: AsyncSession, loan_id: UUID, actor: AuthContext) -> Loan:
    loan = await get_loan_or_404(db, loan_id)
    loan.show_on_home = not loan.show_on_home
    db.add(loan)
    await db.commit()
    audit_event(
        "loan.home_toggled",
        actor_id=str(actor.id),
        loan_id=str(loan.id),
        show_on_home=loan.show_on_home,
    )
    hydrated = await get_loan(db, loan.id)
    return hydrated or loan
