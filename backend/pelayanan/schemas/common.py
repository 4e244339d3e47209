"""
Pelayanan Backend — Shared Response Schemas
=============================================

What:  Error and health payloads shared by every router.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "Status tidak valid",
            "details": {"field": "status", "allowed": ["PENGAJUAN_BARU", ...]},
            "request_id": "1a2b3c4d"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class MethodNotAllowedResponse(BaseModel):
    message: str
    allowed_methods: List[str]


class HealthResponse(BaseModel):
    """Health check response: service status plus database connectivity."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
