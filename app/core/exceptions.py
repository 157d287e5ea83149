"""Custom application exceptions.

Every exception carries a stable ``kind`` (the error family callers branch on)
and ``code`` (the specific failure), rendered next to ``detail`` by the
application's exception handler.
"""

from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    kind: str = "internal_error"
    code: str = "InternalError"

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, headers=headers)

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.detail, "kind": self.kind, "code": self.code}


# ==================== VALIDATION ====================


class ValidationError(AppException):
    """Malformed input."""

    kind = "validation_error"
    code = "ValidationError"

    def __init__(self, detail: str = "Validation failed", errors: list[dict[str, Any]] | None = None) -> None:
        self.errors = errors
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


class InvalidDateRange(ValidationError):
    code = "InvalidDateRange"

    def __init__(self, detail: str = "End date must be after start date") -> None:
        super().__init__(detail)


class AmountMismatch(ValidationError):
    code = "AmountMismatch"

    def __init__(self, expected: int, received: int) -> None:
        super().__init__(f"Payment amount {received} does not match the booking total {expected}")


class MissingProof(ValidationError):
    code = "MissingProof"

    def __init__(self, detail: str = "GCash payments require a reference number and a proof image") -> None:
        super().__init__(detail)


# ==================== CONFLICT ====================


class ConflictError(AppException):
    """Invariant violation or mismatched state transition."""

    kind = "conflict_error"
    code = "ConflictError"

    def __init__(self, detail: str = "The request conflicts with the current state") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class InvalidTransition(ConflictError):
    code = "InvalidTransition"

    def __init__(self, resource: str, current: str, target: str, reason: str | None = None) -> None:
        detail = f"Invalid {resource} transition: {current} → {target}"
        if reason:
            detail = f"{detail} ({reason})"
        self.current = current
        self.target = target
        super().__init__(detail)


class CapacityExceeded(ConflictError):
    code = "CapacityExceeded"

    def __init__(self, detail: str = "Room occupancy would fall outside its capacity") -> None:
        super().__init__(detail)


class InvalidCapacityChange(ConflictError):
    code = "InvalidCapacityChange"

    def __init__(self, capacity: int, occupied: int) -> None:
        super().__init__(
            f"Cannot set capacity to {capacity}: room currently has {occupied} occupant(s)"
        )


class OverlappingRequest(ConflictError):
    code = "OverlappingRequest"

    def __init__(self, detail: str = "You already have a pending, approved or active room assignment") -> None:
        super().__init__(detail)


class RoomUnavailable(ConflictError):
    code = "RoomUnavailable"

    def __init__(self, detail: str = "Room is under maintenance and cannot be booked") -> None:
        super().__init__(detail)


class PaymentNotVerified(ConflictError):
    code = "PaymentNotVerified"

    def __init__(self, detail: str = "Assignment cannot be activated before its payment is verified") -> None:
        super().__init__(detail)


class AssignmentNotApproved(ConflictError):
    code = "AssignmentNotApproved"

    def __init__(self, detail: str = "Payments can only be submitted for approved assignments") -> None:
        super().__init__(detail)


class DuplicatePayment(ConflictError):
    code = "DuplicatePayment"

    def __init__(self, detail: str = "A payment is already pending or verified for this assignment") -> None:
        super().__init__(detail)


class ActivationConflict(ConflictError):
    code = "ActivationConflict"

    def __init__(self, detail: str = "Payment could not be verified because the assignment could not be activated") -> None:
        super().__init__(detail)


# ==================== ACCESS ====================


class NotFoundError(AppException):
    """Resource not found exception."""

    kind = "not_found"
    code = "NotFound"

    def __init__(self, resource: str = "Resource", identifier: str | None = None) -> None:
        detail = f"{resource} not found"
        if identifier:
            detail = f"{resource} with ID '{identifier}' not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class AuthenticationError(AppException):
    """Authentication failed exception."""

    kind = "authentication_error"
    code = "AuthenticationFailed"

    def __init__(self, detail: str = "Authentication failed") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(AppException):
    """Authorization denied exception."""

    kind = "authorization_error"
    code = "Forbidden"

    def __init__(self, detail: str = "You don't have permission to access this resource") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class RateLimitExceeded(AppException):
    """Rate limit exceeded exception."""

    kind = "rate_limited"
    code = "RateLimitExceeded"

    def __init__(self, detail: str = "Too many requests. Please try again later.") -> None:
        super().__init__(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=detail)
