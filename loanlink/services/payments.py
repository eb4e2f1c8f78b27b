"""Application-fee payments through the provider's payment-intent protocol.

The flow has two steps. ``create_fee_intent`` asks the provider for an intent and hands the
client secret to the browser; nothing is written locally. ``confirm_fee_payment`` asks the
provider for the intent's status and, only when it reports ``succeeded``, records the fee
as Paid. Each call is one provider round trip; callers retry by calling again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from uuid import UUID

import stripe
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from loanlink.core.errors import (
    PaymentNotSuccessful,
    PaymentProviderError,
    PaymentServiceUnavailable,
)
from loanlink.core.settings import settings
from loanlink.models.loan_application import LoanApplication
from loanlink.services import application_workflow, applications as applications_service
from loanlink.services.authz import AuthContext

logger = logging.getLogger(__name__)

SUCCEEDED = "succeeded"


@dataclass(slots=True, frozen=True)
class PaymentIntent:
    id: str
    status: str
    client_secret: str | None = None


def _to_intent(raw: stripe.PaymentIntent) -> PaymentIntent:
    # StripeObject exposes fields as attributes, not as a dict.
    return PaymentIntent(
        id=raw.id,
        status=raw.status,
        client_secret=getattr(raw, "client_secret", None),
    )


class PaymentGateway:
    """Thin async wrapper over the blocking Stripe SDK."""

    def __init__(self, api_key: str) -> None:
        self._api_key = api_key

    async def create_intent(
        self, *, amount_cents: int, currency: str, metadata: dict[str, str]
    ) -> PaymentIntent:
        raw = await run_in_threadpool(
            stripe.PaymentIntent.create,
            amount=amount_cents,
            currency=currency,
            metadata=metadata,
            api_key=self._api_key,
        )
        return _to_intent(raw)

    async def retrieve_intent(self, intent_id: str) -> PaymentIntent:
        raw = await run_in_threadpool(
            stripe.PaymentIntent.retrieve,
            intent_id,
            api_key=self._api_key,
        )
        return _to_intent(raw)


@lru_cache(maxsize=4)
def _gateway_for_key(api_key: str) -> PaymentGateway:
    return PaymentGateway(api_key)


def get_payment_gateway() -> PaymentGateway | None:
    """Resolve the configured gateway; ``None`` means payments are switched off."""
    if not settings.stripe_secret_key:
        return None
    return _gateway_for_key(settings.stripe_secret_key)


def fee_amount() -> Decimal:
    return (Decimal(settings.application_fee_cents) / Decimal(100)).quantize(Decimal("0.01"))


def _require_gateway(gateway: PaymentGateway | None) -> PaymentGateway:
    if gateway is None:
        raise PaymentServiceUnavailable()
    return gateway


async def create_fee_intent(
    db: AsyncSession,
    gateway: PaymentGateway | None,
    application_id: UUID,
    actor: AuthContext,
) -> str:
    provider = _require_gateway(gateway)
    application = await applications_service.get_application_or_404(db, application_id)
    application_workflow.ensure_fee_unpaid(application)
    intent = await provider.create_intent(
        amount_cents=settings.application_fee_cents,
        currency=settings.application_fee_currency,
        metadata={"applicationId": str(application.id), "userEmail": actor.email},
    )
    logger.info("Created payment intent id=%s application_id=%s", intent.id, application.id)
    if not intent.client_secret:
        raise PaymentProviderError("Payment provider did not return a client secret")
    return intent.client_secret


async def confirm_fee_payment(
    db: AsyncSession,
    gateway: PaymentGateway | None,
    application_id: UUID,
    payment_intent_id: str,
    actor: AuthContext,
) -> LoanApplication:
    provider = _require_gateway(gateway)
    application = await applications_service.get_application_or_404(db, application_id)
    application_workflow.ensure_fee_unpaid(application)
    intent = await provider.retrieve_intent(payment_intent_id)
    if intent.status != SUCCEEDED:
        logger.info(
            "Payment intent not settled id=%s status=%s application_id=%s",
            intent.id,
            intent.status,
            application.id,
        )
        raise PaymentNotSuccessful(status=intent.status)
    return await applications_service.record_fee_payment(
        db,
        application,
        transaction_id=intent.id,
        amount=fee_amount(),
        actor=actor,
    )
