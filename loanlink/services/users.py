from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from loanlink.core.errors import NotFound
from loanlink.core.logging import audit_event
from loanlink.core.roles import SELF_ASSIGNABLE_ROLES, UserRole, UserStatus
from loanlink.models.user import User
from loanlink.schemas.common import PageParams
from loanlink.schemas.users import LoginRequest
from loanlink.services.authz import AuthContext

logger = logging.getLogger(__name__)


def _search_conditions(search: str | None) -> list:
    if not search:
        return []
    return [
        or_(
            User.name.icontains(search, autoescape=True),
            User.email.icontains(search, autoescape=True),
        )
    ]


def _initial_role(requested: UserRole | None) -> UserRole:
    if requested in SELF_ASSIGNABLE_ROLES:
        return requested
    return UserRole.BORROWER


async def get_user(db: AsyncSession, user_id: UUID) -> User | None:
    return await db.get(User, user_id)


async def get_user_or_404(db: AsyncSession, user_id: UUID) -> User:
    user = await get_user(db, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


async def get_user_by_firebase_uid(db: AsyncSession, firebase_uid: str) -> User | None:
    stmt = select(User).where(User.firebase_uid == firebase_uid)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def login_or_register(db: AsyncSession, payload: LoginRequest) -> tuple[User, bool]:
    """Return the user bound to the external identity, creating it on first login."""
    user = await get_user_by_firebase_uid(db, payload.firebase_uid)
    if user is not None:
        return user, False

    user = User(
        name=payload.name,
        email=str(payload.email),
        photo_url=payload.photo_url or "",
        firebase_uid=payload.firebase_uid,
        role=_initial_role(payload.role).value,
        status=UserStatus.ACTIVE.value,
        suspend_reason="",
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("Registered user id=%s role=%s", user.id, user.role)
    return user, True


async def list_users(
    db: AsyncSession,
    *,
    page: PageParams,
    search: str | None = None,
) -> tuple[list[User], int]:
    conditions = _search_conditions(search)
    count_stmt = select(func.count()).select_from(User).where(*conditions)
    total = int((await db.execute(count_stmt)).scalar_one())

    stmt = (
        select(User)
        .where(*conditions)
        .order_by(User.created_at.desc())
        .offset(page.offset)
        .limit(page.limit)
    )
    users = (await db.execute(stmt)).scalars().all()
    return list(users), total


async def change_role(
    db: AsyncSession, user_id: UUID, role: UserRole, *, actor: AuthContext
) -> User:
    user = await get_user_or_404(db, user_id)
    previous = user.role
    user.role = role.value
    db.add(user)
    await db.commit()
    await db.refresh(user)
    audit_event(
        "user.role_changed",
        actor_id=str(actor.id),
        user_id=str(user.id),
        old=previous,
        new=user.role,
    )
    return user


async def suspend_user(
    db: AsyncSession, user_id: UUID, reason: str, *, actor: AuthContext
) -> User:
    user = await get_user_or_404(db, user_id)
    user.status = UserStatus.SUSPENDED.value
    user.suspend_reason = reason
    db.add(user)
    await db.commit()
    await db.refresh(user)
    audit_event("user.suspended", actor_id=str(actor.id), user_id=str(user.id), reason=reason)
    return user


async def activate_user(db: AsyncSession, user_id: UUID, *, actor: AuthContext) -> User:
    user = await get_user_or_404(db, user_id)
    user.status = UserStatus.ACTIVE.value
    user.suspend_reason = ""
    db.add(user)
    await db.commit()
    await db.refresh(user)
    audit_event("user.activated", actor_id=str(actor.id), user_id=str(user.id))
    return user
