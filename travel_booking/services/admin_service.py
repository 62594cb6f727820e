"""Admin service for back-office accounts."""

import logging
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import utcnow
from ..core.exceptions import ConflictError
from ..core.security import hash_password
from ..models.admin import Admin

logger = logging.getLogger(__name__)


class AdminService:
    """Service for admin accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, admin_id: UUID) -> Admin | None:
        stmt = (
            select(Admin)
            .where(Admin.admin_id == admin_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Admin | None:
        stmt = (
            select(Admin)
            .where(func.lower(Admin.email) == email.strip().lower())
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, email: str, password: str, name: str) -> Admin:
        """
        Create an admin account.

        Raises:
            ConflictError: If an admin with the same email already exists
        """
        if await self.get_by_email(email):
            raise ConflictError(message="An admin with this email already exists")

        admin = Admin(email=email.strip().lower(), password_hash=hash_password(password), name=name)
        self.db.add(admin)
        try:
            await self.db.flush()
        except IntegrityError as e:
            raise ConflictError(message="An admin with this email already exists") from e

        logger.info("Admin created", extra={"admin_id": str(admin.admin_id), "email": admin.email})
        return admin

    async def record_login(self, admin: Admin) -> None:
        admin.last_login = utcnow()
        self.db.add(admin)
        await self.db.flush()

    async def change_password(self, admin_id: UUID, new_password: str) -> None:
        stmt = (
            update(Admin)
            .where(Admin.admin_id == admin_id)
            .values(password_hash=hash_password(new_password))
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(stmt)
        logger.info("Admin password changed", extra={"admin_id": str(admin_id)})
