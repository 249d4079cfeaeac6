"""Startup provisioning: schema creation and the bootstrap administrator"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.api.auth import get_password_hash
from app.config import settings
from app.database import Base, SessionLocal, engine
from app.models.user import User, UserRole

logger = structlog.get_logger()


async def ensure_bootstrap_admin(db: AsyncSession) -> User:
    """
    Make sure an administrator exists.

    If any admin is already provisioned it is returned untouched. Otherwise
    the account registered under the configured email is promoted, or
    created with the configured password when it does not exist yet.
    """
    result = await db.execute(select(User).where(User.role == UserRole.ADMIN).limit(1))
    admin = result.scalar_one_or_none()
    if admin:
        return admin

    result = await db.execute(select(User).where(User.email == settings.bootstrap_admin_email))
    user = result.scalar_one_or_none()

    if user:
        user.role = UserRole.ADMIN
        logger.info("Promoted bootstrap admin", email=user.email)
    else:
        user = User(
            email=settings.bootstrap_admin_email,
            hashed_password=get_password_hash(settings.bootstrap_admin_password),
            role=UserRole.ADMIN,
        )
        db.add(user)
        logger.info("Created bootstrap admin", email=user.email)

    await db.commit()
    await db.refresh(user)
    return user


async def init_db() -> None:
    """Create tables when configured to and provision the admin account"""
    if settings.create_tables_on_startup:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async with SessionLocal() as db:
        await ensure_bootstrap_admin(db)
