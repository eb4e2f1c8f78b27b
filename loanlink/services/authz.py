from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable
from uuid import UUID

from loanlink.core.errors import Forbidden
from loanlink.core.roles import STAFF_ROLES, UserRole
from loanlink.models.user import User


@dataclass(slots=True, frozen=True)
class AuthContext:
    """Request-scoped identity produced once the credential has been verified."""

    user: User

    @property
    def id(self) -> UUID:
        return self.user.id

    @property
    def email(self) -> str:
        return self.user.email

    @property
    def role(self) -> UserRole:
        return UserRole(self.user.role)


# Roles that may act on a resource they do not own.
LOAN_MUTATION_BYPASS = frozenset({UserRole.ADMIN})
APPLICATION_VIEW_BYPASS = STAFF_ROLES
APPLICATION_CANCEL_BYPASS: frozenset[UserRole] = frozenset()


def has_role(actor: AuthContext, allowed: Iterable[UserRole | str]) -> bool:
    return actor.role in UserRole.normalize(allowed)


def ensure_role(actor: AuthContext, allowed: Iterable[UserRole | str]) -> None:
    if not has_role(actor, allowed):
        raise Forbidden("Access denied")


def is_owner_or_privileged(
    actor: AuthContext,
    owner_id: UUID | str | None,
    bypass_roles: Iterable[UserRole | str] = (),
) -> bool:
    if actor.role in UserRole.normalize(bypass_roles):
        return True
    if owner_id is None:
        return False
    return str(owner_id) == str(actor.id)


def ensure_owner_or_privileged(
    actor: AuthContext,
    owner_id: UUID | str | None,
    bypass_roles: Iterable[UserRole | str] = (),
    *,
    message: str = "Not authorized",
) -> None:
    if not is_owner_or_privileged(actor, owner_id, bypass_roles):
        raise Forbidden(message)
