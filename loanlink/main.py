from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.middleware import SlowAPIMiddleware

from loanlink.api import api_router
from loanlink.core.errors import register_exception_handlers
from loanlink.core.limiter import limiter
from loanlink.core.logging import configure_logging
from loanlink.core.settings import settings
from loanlink.events import register_event_handlers
from loanlink.middlewares.request_context import RequestContextMiddleware
from loanlink.middlewares.security_headers import SecurityHeadersMiddleware


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="LoanLink API", version="0.1.0")
    register_exception_handlers(app)
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(SecurityHeadersMiddleware, enable_hsts=settings.enable_hsts)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.include_router(api_router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        return {"message": "LoanLink API is running"}

    register_event_handlers(app)
    return app


app = create_app()
