from fastapi import APIRouter

from loanlink.api.routers import applications, auth, health, loans, users

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(loans.router)
api_router.include_router(applications.router)

__all__ = ["api_router"]
