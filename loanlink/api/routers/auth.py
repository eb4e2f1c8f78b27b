from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from loanlink.api import deps
from loanlink.core.limiter import limiter
from loanlink.core.logging import audit_event
from loanlink.core.security import create_access_token
from loanlink.core.settings import settings
from loanlink.schemas.common import MessageResponse
from loanlink.schemas.users import LoginRequest, LoginResponse, UserDTO, UserResponse
from loanlink.services import users as users_service
from loanlink.services.authz import AuthContext

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_token_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.token_cookie_name,
        value=token,
        max_age=settings.token_cookie_max_age_seconds,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


@router.post("/login", response_model=LoginResponse)
@limiter.limit(lambda: f"{settings.rate_limit_per_minute}/minute")
async def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(deps.get_db_session),
) -> LoginResponse:
    """Create-or-fetch the user bound to an external identity and issue a session token."""
    user, created = await users_service.login_or_register(db, payload)
    token = create_access_token(str(user.id), email=user.email, role=user.role)
    _set_token_cookie(response, token)
    audit_event("auth.login", user_id=str(user.id), created=created)
    return LoginResponse(token=token, user=UserDTO.model_validate(user))


@router.get("/me", response_model=UserResponse)
async def read_me(
    current_user: AuthContext = Depends(deps.require_authenticated_user),
) -> UserResponse:
    return UserResponse(user=UserDTO.model_validate(current_user.user))


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response) -> MessageResponse:
    response.delete_cookie(
        key=settings.token_cookie_name,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )
    return MessageResponse(message="Logged out successfully")
