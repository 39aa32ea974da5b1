"""Custom exception hierarchy for the Kongklang bot."""

from __future__ import annotations


class AppError(Exception):
    """Base application error with a stable machine-readable code."""

    def __init__(self, message: str, code: str, status_code: int = 400) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        """Serialize the error in the API standard shape."""
        return {"error": self.message, "code": self.code}


class ValidationError(AppError):
    """Raised when a value cannot be stored as given."""

    def __init__(self, reason: str) -> None:
        super().__init__(message=reason, code="INVALID_INPUT", status_code=422)


class NotFoundError(AppError):
    """Raised when a requested resource does not exist."""

    def __init__(self, resource: str) -> None:
        super().__init__(message=f"{resource} not found", code="NOT_FOUND", status_code=404)


class UnauthorizedError(AppError):
    """Raised when the caller is not authenticated."""

    def __init__(self, reason: str = "Unauthorized") -> None:
        super().__init__(message=reason, code="UNAUTHORIZED", status_code=401)


class InvalidSignatureError(AppError):
    """Raised when a webhook body does not match its signature header."""

    def __init__(self, reason: str = "Invalid webhook signature") -> None:
        super().__init__(message=reason, code="INVALID_SIGNATURE", status_code=400)


class UpstreamLookupError(AppError):
    """Raised when the chat platform cannot answer a profile lookup."""

    def __init__(self, reason: str = "Profile lookup failed") -> None:
        super().__init__(message=reason, code="UPSTREAM_LOOKUP_FAILED", status_code=502)


class StoreError(AppError):
    """Raised when the ledger store cannot be reached or rejects a query."""

    def __init__(self, reason: str = "Database request failed") -> None:
        super().__init__(message=reason, code="STORE_ERROR", status_code=503)
