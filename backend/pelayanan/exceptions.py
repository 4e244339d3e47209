"""
Pelayanan Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions mapped to HTTP responses.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) turn them into
       structured JSON error bodies.

Exception Hierarchy:
    PelayananError (base)
    ├── ValidationError        → 400 Bad Request
    ├── AuthenticationError    → 401 Unauthorized
    ├── ForbiddenError         → 403 Forbidden
    ├── NotFoundError          → 404 Not Found
    ├── StatusConflictError    → 409 Conflict
    ├── AuditLogError          → 500 Internal Server Error
    └── DatabaseError          → 500 Internal Server Error

Delivery failures of a notification channel are NOT exceptions: dispatchers
return `DispatchResult(success=False)` and the workflow records it.
"""

from typing import Any, Dict, List, Optional


class PelayananError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for client errors)
    """

    def __init__(
        self,
        message: str = "Terjadi kesalahan internal server",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(PelayananError):
    """
    Raised when client input fails a business rule.

    When:    Unknown status value, status unchanged, malformed NIK or tracking
             query, blank login fields.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validasi gagal",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(PelayananError):
    """Bad admin credentials or a missing/invalid bearer token. HTTP 401."""

    def __init__(
        self,
        message: str = "Username atau password salah",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(PelayananError):
    """The caller proved the wrong identity (e.g. NIK suffix mismatch). HTTP 403."""

    def __init__(
        self,
        message: str = "Akses ditolak",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(PelayananError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that into
    this exception so routes stay free of HTTP branching.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        message: str = "Pengajuan tidak ditemukan",
        resource: str = "submission",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class StatusConflictError(PelayananError):
    """
    The submission changed between read and conditional write.

    When:    Another administrator updated the same submission concurrently,
             so the compare-and-swap matched no row.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        expected_status: str,
        actual_status: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Status pengajuan telah berubah menjadi {actual_status}. "
            "Muat ulang data lalu coba lagi."
        )
        ctx = context or {}
        ctx.update(expected_status=expected_status, actual_status=actual_status)
        super().__init__(message=message, context=ctx)
        self.expected_status = expected_status
        self.actual_status = actual_status


class AuditLogError(PelayananError):
    """
    One or more notification log rows could not be written.

    The status change is already committed when this is raised; only the
    audit trail is incomplete. The response is a generic 500 and the failed
    channels are logged server-side.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        failed_channels: List[str],
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["failed_channels"] = failed_channels
        super().__init__(
            message="Gagal mencatat log notifikasi",
            context=ctx,
        )
        self.failed_channels = failed_channels


class DatabaseError(PelayananError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; the underlying
    error is logged server-side only.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Terjadi kesalahan database. Silakan coba lagi.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
