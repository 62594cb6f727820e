"""Authentication-related Pydantic schemas."""

from enum import Enum
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from ..core.security import PASSWORD_SYMBOLS


class Role(str, Enum):
    """Roles carried in access tokens."""
    ADMIN = "admin"
    TRAVELER = "traveler"


class LoginRequest(BaseModel):
    """Credentials for admin or traveler login."""

    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., min_length=1, max_length=255, description="Account password")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class AuthenticatedUser(BaseModel):
    """Public view of the logged-in account."""

    id: str
    email: str
    name: str
    role: Role


class LoginResult(BaseModel):
    """Access token plus the account it was issued for."""

    token: str
    token_type: str = "bearer"
    user: AuthenticatedUser


class CurrentUser(BaseModel):
    """Identity decoded from a verified bearer token."""

    id: str
    email: str
    name: str = ""
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def owns(self, traveler_id) -> bool:
        """True if this is the traveler with the given ID, in any UUID spelling."""
        if self.role != Role.TRAVELER:
            return False
        try:
            return UUID(str(traveler_id)) == UUID(self.id)
        except ValueError:
            return False


class ChangePasswordRequest(BaseModel):
    """Replace the caller's password after proving they know the current one."""

    current_password: str = Field(..., min_length=1, max_length=255)
    new_password: str = Field(..., min_length=8, max_length=255)
    confirm_password: str = Field(..., min_length=1, max_length=255)

    @field_validator("new_password")
    @classmethod
    def check_strength(cls, v: str) -> str:
        if not any(c.isupper() for c in v):
            raise ValueError("New password must contain at least one uppercase letter")
        if not any(c.islower() for c in v):
            raise ValueError("New password must contain at least one lowercase letter")
        if not any(c.isdigit() for c in v):
            raise ValueError("New password must contain at least one number")
        if not any(c in PASSWORD_SYMBOLS for c in v):
            raise ValueError("New password must contain at least one special character (!@#$%^&*)")
        return v

    @model_validator(mode="after")
    def check_confirmation(self):
        if self.confirm_password != self.new_password:
            raise ValueError("Password confirmation does not match")
        return self
