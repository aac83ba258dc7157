"""
Error types for api_client.

Only failures that originate in this package are defined here. Transport
failures (``httpx.RequestError``) and decode failures
(``pydantic.ValidationError``) reach the caller unchanged.
"""

from typing import Any, Dict, Optional


class ApiClientError(Exception):
    """Base exception for all api_client errors."""

    def __init__(
        self,
        message: str,
        code: str = "API000",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to structured dictionary."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }


class GenerationError(ApiClientError):
    """An endpoint descriptor was rejected while generating operations.

    Raised before any operation of the set is bound, so a client class is
    never left partially generated.
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        placeholder: Optional[str] = None,
    ):
        super().__init__(
            message,
            code="API001",
            details={"operation": operation, "placeholder": placeholder},
        )
        self.operation = operation
        self.placeholder = placeholder


class AuthError(ApiClientError):
    """Failure inside a pre-request hook.

    Hooks raise this for expired credentials or failed token refreshes.
    The pipeline does not catch it; it aborts the call before any network I/O.
    """

    def __init__(self, message: str, scheme: Optional[str] = None):
        super().__init__(message, code="API002", details={"scheme": scheme})
        self.scheme = scheme


__all__ = [
    "ApiClientError",
    "GenerationError",
    "AuthError",
]
