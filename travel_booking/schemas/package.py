"""Package-related Pydantic schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ..models.package import PackageStatus


class Package(BaseModel):
    """Package response schema."""

    package_id: str = Field(..., description="Unique package ID")
    title: str = Field(..., description="Package title")
    description: Optional[str] = Field(None, description="Package description")
    no_of_days: int = Field(..., ge=1, description="Trip length in days")
    base_price: Optional[float] = Field(None, ge=0, description="Starting price")
    status: PackageStatus = Field(..., description="Publication status")
    is_active: bool = Field(..., description="Whether the package is active")
    is_template: bool = Field(..., description="Whether the package is a template")
    created_at: datetime = Field(..., description="Creation time")


class UpdatePackageStatusRequest(BaseModel):
    """Request schema for publishing or unpublishing a package."""

    status: PackageStatus = Field(..., description="Target publication status")
