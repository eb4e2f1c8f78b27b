from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from loanlink.api import deps
from loanlink.core.roles import UserRole
from loanlink.schemas.common import PageParams, page_params, total_pages
from loanlink.schemas.users import (
    RoleUpdateRequest,
    SuspendRequest,
    UserDTO,
    UserListResponse,
    UserResponse,
)
from loanlink.services import users as users_service
from loanlink.services.authz import AuthContext

router = APIRouter(prefix="/users", tags=["users"])

require_admin = deps.require_roles(UserRole.ADMIN)


@router.get("", response_model=UserListResponse, summary="List users")
async def list_users(
    search: str | None = Query(default=None, max_length=100),
    page: PageParams = Depends(page_params),
    current_user: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(deps.get_db_session),
) -> UserListResponse:
    users, total = await users_service.list_users(db, page=page, search=search)
    return UserListResponse(
        users=[UserDTO.model_validate(user) for user in users],
        total_pages=total_pages(total, page.limit),
        current_page=page.page,
        total=total,
    )


@router.patch("/{user_id}/role", response_model=UserResponse, summary="Change a user's role")
async def update_role(
    user_id: UUID,
    payload: RoleUpdateRequest,
    current_user: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(deps.get_db_session),
) -> UserResponse:
    user = await users_service.change_role(db, user_id, payload.role, actor=current_user)
    return UserResponse(user=UserDTO.model_validate(user))


@router.patch("/{user_id}/suspend", response_model=UserResponse, summary="Suspend a user")
async def suspend_user(
    user_id: UUID,
    payload: SuspendRequest,
    current_user: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(deps.get_db_session),
) -> UserResponse:
    user = await users_service.suspend_user(
        db, user_id, payload.suspend_reason, actor=current_user
    )
    return UserResponse(user=UserDTO.model_validate(user))


@router.patch("/{user_id}/activate", response_model=UserResponse, summary="Reactivate a user")
async def activate_user(
    user_id: UUID,
    current_user: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(deps.get_db_session),
) -> UserResponse:
    user = await users_service.activate_user(db, user_id, actor=current_user)
    return UserResponse(user=UserDTO.model_validate(user))
