"""
Custom domain exceptions for consistent error handling.

These exceptions are mapped to HTTP status codes by the global exception handler
in main.py.
"""
from fastapi import HTTPException, status


class DomainError(HTTPException):
    """Base class for all domain-specific errors."""
    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST, details: dict | None = None):
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.details = details or {}


class NotFoundError(DomainError):
    """Resource not found (404)."""
    def __init__(self, resource_type: str, identifier: str, details: dict | None = None):
        message = f"{resource_type} not found: {identifier}"
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND, details=details)


class ValidationError(DomainError):
    """Validation error (400)."""
    def __init__(self, message: str, field: str | None = None, details: dict | None = None):
        if field:
            message = f"Validation error on {field}: {message}"
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class PermissionDeniedError(DomainError):
    """Permission denied (403)."""
    def __init__(self, message: str = "Permission denied", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_403_FORBIDDEN, details=details)


class UnauthorizedError(DomainError):
    """Unauthorized access (401)."""
    def __init__(self, message: str = "Unauthorized", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_401_UNAUTHORIZED, details=details)


class ConflictError(DomainError):
    """Resource conflict (409)."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_409_CONFLICT, details=details)


# ── Order lifecycle ─────────────────────────────────────────────────

class InvalidTransitionError(ConflictError):
    """Illegal order status change (409)."""
    def __init__(self, old_status: str, new_status: str, reason: str):
        super().__init__(
            reason,
            details={"old_status": old_status, "new_status": new_status},
        )


class InvalidStateError(ConflictError):
    """Operation not allowed in the order's current status (409)."""
    def __init__(self, message: str, current_status: str):
        super().__init__(message, details={"current_status": current_status})


class InvalidAmountError(DomainError):
    """Monetary amount outside the allowed range (400)."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class DuplicateRefundError(ConflictError):
    """A refund already exists for the order (409)."""
    def __init__(self, order_id: int):
        super().__init__(
            "Refund request already exists for this order",
            details={"order_id": order_id},
        )
