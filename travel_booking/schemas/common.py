"""Common Pydantic schemas: response envelopes and pagination."""

from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class FieldError(BaseModel):
    """Validation error for a single field."""

    field: str = Field(..., description="Dotted path to the invalid field")
    message: str = Field(..., description="Validation error message")


class ApiResponse(BaseModel, Generic[T]):
    """Uniform success envelope."""

    success: bool = Field(True, description="Whether the request succeeded")
    message: Optional[str] = Field(None, description="Human-readable summary")
    data: Optional[T] = Field(None, description="Response payload")


class ErrorResponse(BaseModel):
    """Uniform error envelope."""

    success: bool = Field(False, description="Always false for errors")
    message: str = Field(..., description="Human-readable error summary")
    errors: Optional[List[Any]] = Field(None, description="Field-level errors")


class PaginatedResponse(BaseModel, Generic[T]):
    """Success envelope for list endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(True, description="Whether the request succeeded")
    data: List[T] = Field(default_factory=list, description="Page of results")
    page: int = Field(..., ge=1, description="Current page (1-based)")
    limit: int = Field(..., ge=1, le=100, description="Items per page")
    total: int = Field(..., ge=0, description="Total matching items")
    total_pages: int = Field(..., ge=0, alias="totalPages", description="Number of pages")

    @classmethod
    def build(cls, items: List[T], page: int, limit: int, total: int) -> "PaginatedResponse[T]":
        total_pages = (total + limit - 1) // limit
        return cls(data=items, page=page, limit=limit, total=total, total_pages=total_pages)
