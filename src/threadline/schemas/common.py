"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel, Field


class PageInfo(BaseModel):
    """Offset pagination metadata returned by list endpoints."""

    page: int = Field(..., ge=1, description="1-based page number.")
    limit: int = Field(..., ge=1, description="Maximum items per page.")
    total: int = Field(..., ge=0, description="Total matching items.")
    has_more: bool = Field(..., description="Whether later pages exist.")


class ErrorResponse(BaseModel):
    """Body of an error response."""

    detail: str
