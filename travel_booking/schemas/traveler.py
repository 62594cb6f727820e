"""Traveler-related Pydantic schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Traveler(BaseModel):
    """Traveler response schema; never exposes the password hash."""

    traveler_id: str = Field(..., description="Unique traveler ID")
    email: str = Field(..., description="Traveler email")
    name: str = Field(..., description="Traveler name")
    contact: str = Field(..., description="Traveler contact")
    is_active: bool = Field(..., description="Whether the account can log in")
    created_at: datetime = Field(..., description="Account creation time")
    last_login: Optional[datetime] = Field(None, description="Last successful login")
