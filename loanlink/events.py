import logging

from fastapi import FastAPI

from loanlink.core.settings import settings
from loanlink.db.init_db import init_db

logger = logging.getLogger(__name__)


def register_event_handlers(app: FastAPI) -> None:
    @app.on_event("startup")
    async def on_startup() -> None:
        logger.info("Application startup")
        if not settings.stripe_secret_key:
            logger.warning("STRIPE_SECRET_KEY not set; payment features are disabled")
        await init_db()

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        logger.info("Application shutdown")
