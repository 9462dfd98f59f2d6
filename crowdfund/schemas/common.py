"""Common Pydantic schemas."""
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = {
        "from_attributes": True,
        "validate_assignment": True,
    }


class MessageResponse(BaseSchema):
    """Generic success response."""

    status: str = Field("success", description="Outcome")
    message: str = Field(..., description="Human readable message")


class ErrorResponse(BaseSchema):
    """Error response schema."""

    error: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Error code")
    details: Dict[str, Any] = Field(default_factory=dict, description="Error details")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class HealthResponse(BaseSchema):
    """Health check response."""

    status: str = Field(..., description="Overall health status")
    version: str = Field(..., description="Application version")
