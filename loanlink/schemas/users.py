from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field

from loanlink.core.roles import UserRole, UserStatus
from loanlink.schemas.common import CamelModel


class UserDTO(CamelModel):
    id: UUID
    name: str
    email: str
    photo_url: str = Field(default="", alias="photoURL")
    role: UserRole
    status: UserStatus
    suspend_reason: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserResponse(CamelModel):
    success: bool = True
    user: UserDTO


class UserListResponse(CamelModel):
    success: bool = True
    users: list[UserDTO]
    total_pages: int
    current_page: int
    total: int


class RoleUpdateRequest(CamelModel):
    role: UserRole


class SuspendRequest(CamelModel):
    suspend_reason: str = Field(default="", max_length=1000)


class LoginRequest(CamelModel):
    email: EmailStr
    firebase_uid: str = Field(min_length=1, max_length=128)
    name: str = Field(min_length=1, max_length=255)
    photo_url: str | None = Field(default=None, alias="photoURL", max_length=1024)
    role: UserRole | None = None


class LoginResponse(CamelModel):
    success: bool = True
    token: str
    user: UserDTO
