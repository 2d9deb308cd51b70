"""Shared DTOs for the Companion Chat API."""
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class BaseDTO(BaseModel):
    """Base DTO with common configuration."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class ErrorResponse(BaseDTO):
    """Error response DTO."""

    error: str = Field(description="Error kind")
    error_code: str = Field(description="Error code")
    detail: str = Field(description="Human-readable error message")
    status_code: int = Field(description="HTTP status code")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Additional error details")


class HealthCheckResponse(BaseDTO):
    """Health check response DTO."""

    status: str = Field(description="Service status")
    version: str = Field(default="0.1.0")
