"""Authentication service issuing access tokens for admins and travelers."""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from ..core.security import create_access_token, verify_password
from ..schemas.auth import (
    AuthenticatedUser,
    ChangePasswordRequest,
    CurrentUser,
    LoginRequest,
    LoginResult,
    Role,
)
from .admin_service import AdminService
from .traveler_service import TravelerService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


class AuthService:
    """Service for credential checks and token issuance."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.admin_service = AdminService(db)
        self.traveler_service = TravelerService(db)

    async def login_admin(self, request: LoginRequest) -> LoginResult:
        """
        Authenticate an admin.

        Raises:
            AuthenticationError: If the email or password is wrong
            AuthorizationError: If the account is deactivated
        """
        admin = await self.admin_service.get_by_email(request.email)
        if not admin or not verify_password(request.password, admin.password_hash):
            logger.warning("Admin login failed", extra={"email": request.email})
            raise AuthenticationError(INVALID_CREDENTIALS)
        if not admin.is_active:
            raise AuthorizationError("Account is deactivated")

        await self.admin_service.record_login(admin)
        await self.db.commit()

        logger.info("Admin logged in", extra={"admin_id": str(admin.admin_id)})
        return self._issue(str(admin.admin_id), admin.email, admin.name, Role.ADMIN)

    async def login_traveler(self, request: LoginRequest) -> LoginResult:
        """
        Authenticate a traveler.

        Auto-provisioned accounts stay locked until a booking is confirmed.

        Raises:
            AuthenticationError: If the email or password is wrong
            AuthorizationError: If the account has not been activated
        """
        traveler = await self.traveler_service.get_by_email(request.email)
        if not traveler or not verify_password(request.password, traveler.password_hash):
            logger.warning("Traveler login failed", extra={"email": request.email})
            raise AuthenticationError(INVALID_CREDENTIALS)
        if not traveler.is_active:
            raise AuthorizationError(
                "Account is not active yet. It will be activated once a booking is confirmed."
            )

        await self.traveler_service.record_login(traveler)
        await self.db.commit()

        logger.info("Traveler logged in", extra={"traveler_id": str(traveler.traveler_id)})
        return self._issue(str(traveler.traveler_id), traveler.email, traveler.name, Role.TRAVELER)

    async def change_password(self, user: CurrentUser, request: ChangePasswordRequest) -> None:
        """
        Replace the caller's password.

        Raises:
            NotFoundError: If the account behind the token no longer exists
            ValidationError: If the current password is wrong
        """
        account_id = UUID(user.id)
        if user.is_admin:
            account = await self.admin_service.get_by_id(account_id)
        else:
            account = await self.traveler_service.get_by_id(account_id)
        if account is None:
            raise NotFoundError(resource_type=user.role.value, resource_id=user.id)

        if not verify_password(request.current_password, account.password_hash):
            logger.warning("Password change rejected", extra={"user_id": user.id, "role": user.role.value})
            raise ValidationError("Current password is incorrect")

        if user.is_admin:
            await self.admin_service.change_password(account_id, request.new_password)
        else:
            await self.traveler_service.change_password(account_id, request.new_password)
        await self.db.commit()

    @staticmethod
    def _issue(user_id: str, email: str, name: str, role: Role) -> LoginResult:
        token = create_access_token(subject=user_id, role=role.value, email=email, name=name)
        return LoginResult(
            token=token,
            user=AuthenticatedUser(id=user_id, email=email, name=name, role=role),
        )
