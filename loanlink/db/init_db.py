import asyncio
import logging

from sqlalchemy import select

from loanlink.core.roles import UserRole, UserStatus
from loanlink.core.settings import settings
from loanlink.db.session import AsyncSessionLocal
from loanlink.models.user import User

logger = logging.getLogger(__name__)


async def init_db() -> None:
    """
    Seed a bootstrap admin when one is configured.
    """
    if not settings.seed_admin_email or not settings.seed_admin_firebase_uid:
        logger.info("No bootstrap admin configured; skipping seed")
        return

    async with AsyncSessionLocal() as session:
        stmt = select(User).where(User.firebase_uid == settings.seed_admin_firebase_uid)
        result = await session.execute(stmt)
        user = result.scalar_one_or_none()

        if user is None:
            session.add(
                User(
                    name=settings.seed_admin_name,
                    email=settings.seed_admin_email,
                    photo_url="",
                    firebase_uid=settings.seed_admin_firebase_uid,
                    role=UserRole.ADMIN.value,
                    status=UserStatus.ACTIVE.value,
                    suspend_reason="",
                )
            )
            await session.commit()
            logger.info("Bootstrap admin created email=%s", settings.seed_admin_email)
        elif user.role != UserRole.ADMIN.value:
            user.role = UserRole.ADMIN.value
            await session.commit()
            logger.info("Bootstrap admin promoted email=%s", user.email)
        else:
            logger.info("Bootstrap admin already exists")


if __name__ == "__main__":
    asyncio.run(init_db())
