from enum import Enum
from typing import Iterable


class UserRole(str, Enum):
    BORROWER = "borrower"
    MANAGER = "manager"
    ADMIN = "admin"

    @classmethod
    def normalize(cls, values: Iterable["UserRole | str"]) -> frozenset["UserRole"]:
        """Return the set of valid roles, ignoring unknown values."""
        roles: set[UserRole] = set()
        for value in values:
            try:
                roles.add(cls(value))
            except ValueError:
                continue
        return frozenset(roles)


class UserStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


STAFF_ROLES = frozenset({UserRole.MANAGER, UserRole.ADMIN})

# Roles a caller may pick for themselves on first login.
SELF_ASSIGNABLE_ROLES = frozenset({UserRole.BORROWER, UserRole.MANAGER})
