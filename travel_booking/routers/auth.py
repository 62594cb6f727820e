"""Authentication router for admins and travelers."""

from fastapi import APIRouter
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import CurrentUserDep, DatabaseSession
from ..schemas.auth import ChangePasswordRequest, CurrentUser, LoginRequest, LoginResult
from ..schemas.common import ApiResponse
from ..services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/admin/login", response_model=ApiResponse[LoginResult])
async def admin_login(
    request: LoginRequest,
    db: AsyncSession = DatabaseSession,
) -> ApiResponse[LoginResult]:
    result = await AuthService(db).login_admin(request)
    return ApiResponse(message="Login successful", data=result)


@router.post("/traveler/login", response_model=ApiResponse[LoginResult])
async def traveler_login(
    request: LoginRequest,
    db: AsyncSession = DatabaseSession,
) -> ApiResponse[LoginResult]:
    """
    Log a traveler in.

    Accounts created by booking submission are rejected with 403 until a
    booking is confirmed or an admin activates them.
    """
    result = await AuthService(db).login_traveler(request)
    return ApiResponse(message="Login successful", data=result)


@router.get("/me", response_model=ApiResponse[CurrentUser])
async def me(user: CurrentUser = CurrentUserDep) -> ApiResponse[CurrentUser]:
    """Return the identity carried by the caller's token."""
    return ApiResponse(data=user)


@router.post("/change-password", response_model=ApiResponse[None])
async def change_password(
    request: ChangePasswordRequest,
    user: CurrentUser = CurrentUserDep,
    db: AsyncSession = DatabaseSession,
) -> ApiResponse[None]:
    """Change the caller's own password; the current one must be supplied."""
    await AuthService(db).change_password(user, request)
    return ApiResponse(message="Password changed successfully")
