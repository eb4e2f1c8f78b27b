from __future__ import annotations

from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from loanlink.core.context import set_user_id
from loanlink.core.errors import Forbidden, Unauthenticated
from loanlink.core.roles import UserRole, UserStatus
from loanlink.core.security import decode_token
from loanlink.core.settings import settings
from loanlink.db.session import get_db
from loanlink.models import User
from loanlink.services import authz
from loanlink.services.authz import AuthContext
from loanlink.services.payments import PaymentGateway, get_payment_gateway

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


async def get_db_session(db: AsyncSession = Depends(get_db)) -> AsyncSession:
    return db


def extract_token(request: Request, bearer: str | None) -> str | None:
    """The session cookie wins over the Authorization header."""
    return request.cookies.get(settings.token_cookie_name) or bearer or None


async def resolve_user(db: AsyncSession, token: str | None) -> AuthContext:
    if not token:
        raise Unauthenticated("Authentication required")
    try:
        payload = decode_token(token, expected_type="access")
        user_id = UUID(str(payload.get("sub")))
    except ValueError as exc:
        raise Unauthenticated("Invalid token") from exc

    user = await db.get(User, user_id)
    if user is None:
        raise Unauthenticated("User not found")
    if user.status == UserStatus.SUSPENDED.value:
        raise Forbidden("Account suspended", reason=user.suspend_reason)
    set_user_id(str(user.id))
    return AuthContext(user=user)


async def get_current_user(
    request: Request,
    bearer: str | None = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> AuthContext:
    return await resolve_user(db, extract_token(request, bearer))


async def require_authenticated_user(
    current_user: AuthContext = Depends(get_current_user),
) -> AuthContext:
    """Simple guard to require an authenticated user (no role checks)."""
    return current_user


def require_roles(*roles: UserRole):
    allowed = UserRole.normalize(roles)

    async def dependency(
        current_user: AuthContext = Depends(require_authenticated_user),
    ) -> AuthContext:
        authz.ensure_role(current_user, allowed)
        return current_user

    return dependency


def get_payments() -> PaymentGateway | None:
    return get_payment_gateway()
