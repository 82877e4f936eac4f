"""
API response models for the FastAPI application.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from bookstore.errors import ErrorKind


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")
    kind: Optional[ErrorKind] = Field(None, description="Kind of failure")
    detail: Optional[str] = Field(None, description="Additional error details")
    status_code: int = Field(..., description="HTTP status code")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    database_status: str = Field(..., description="Database connection status")
