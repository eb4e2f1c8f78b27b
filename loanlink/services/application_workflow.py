"""Status and fee transitions for loan applications.

An application starts as ``(Pending, Unpaid)``. Staff move the status to Approved or
Rejected; the owning borrower may cancel (delete) it while it is still Pending. The fee
moves from Unpaid to Paid only after the payment provider confirms the charge, and a Paid
fee is never reverted.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from loanlink.core.errors import AlreadyPaid, InvalidState
from loanlink.models.loan_application import LoanApplication
from loanlink.schemas.applications import ApplicationDecision, ApplicationStatus, FeeStatus


def _now() -> datetime:
    return datetime.now(timezone.utc)


def initialize(application: LoanApplication) -> LoanApplication:
    application.status = ApplicationStatus.PENDING.value
    application.application_fee_status = FeeStatus.UNPAID.value
    application.payment_transaction_id = None
    application.payment_amount = None
    application.paid_at = None
    application.approved_at = None
    application.rejected_at = None
    return application


def apply_decision(
    application: LoanApplication,
    decision: ApplicationDecision,
    *,
    at: datetime | None = None,
) -> LoanApplication:
    # Re-deciding an already decided application overwrites status and timestamp.
    stamp = at or _now()
    if decision is ApplicationDecision.APPROVE:
        application.status = ApplicationStatus.APPROVED.value
        application.approved_at = stamp
    elif decision is ApplicationDecision.REJECT:
        application.status = ApplicationStatus.REJECTED.value
        application.rejected_at = stamp
    else:  # pragma: no cover - enum is exhaustive
        raise InvalidState(f"Unknown decision: {decision}")
    return application


def can_cancel(application: LoanApplication) -> bool:
    return application.status == ApplicationStatus.PENDING.value


def ensure_cancellable(application: LoanApplication) -> None:
    if not can_cancel(application):
        raise InvalidState("Can only cancel pending applications", status=application.status)


def is_fee_paid(application: LoanApplication) -> bool:
    return application.application_fee_status == FeeStatus.PAID.value


def ensure_fee_unpaid(application: LoanApplication) -> None:
    if is_fee_paid(application):
        raise AlreadyPaid()


def mark_fee_paid(
    application: LoanApplication,
    *,
    transaction_id: str,
    amount: Decimal,
    paid_at: datetime | None = None,
) -> LoanApplication:
    ensure_fee_unpaid(application)
    application.application_fee_status = FeeStatus.PAID.value
    application.payment_transaction_id = transaction_id
    application.payment_amount = amount
    application.paid_at = paid_at or _now()
    return application
