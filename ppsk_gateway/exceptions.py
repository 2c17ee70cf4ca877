"""
Exception hierarchy for the PPSK gateway.

Provides structured error handling with a consistent JSON response format
shared by the HTTP routes and the MCP tools.
"""

from typing import Any, Dict, Optional


class GatewayError(Exception):
    """
    Base exception class for all gateway errors.

    Every error raised by the managers inherits from this class so the
    outer surfaces can turn it into a response without inspecting types.
    """

    error_code: str = "GATEWAY_ERROR"
    http_status: int = 500

    def __init__(
        self,
        error_code: str,
        message: str,
        http_status: int,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize gateway exception.

        Args:
            error_code: Machine-readable error code (e.g., "WLAN_NOT_FOUND")
            message: Human-readable error message
            http_status: HTTP status code (400, 404, 409, 500)
            details: Additional error details as dict
        """
        self.error_code = error_code
        self.message = message
        self.http_status = http_status
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to structured JSON response dict.

        Returns:
            Dict with keys: success, error, message, http_status, details
        """
        return {
            "success": False,
            "error": self.error_code,
            "message": self.message,
            "http_status": self.http_status,
            "details": self.details,
        }


class ValidationError(GatewayError):
    """
    Raised when caller-supplied input violates a contract.

    Examples: PPSK password outside 8-63 characters, no network id
    available for a new PPSK, missing required field.

    HTTP Status: 400 Bad Request
    Error Code: VALIDATION_ERROR
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            error_code="VALIDATION_ERROR",
            message=message,
            http_status=400,
            details={"field": field} if field else None,
        )


class NotFoundError(GatewayError):
    """
    Raised when the referenced WLAN does not exist on the controller.

    HTTP Status: 404 Not Found
    Error Code: WLAN_NOT_FOUND
    """

    def __init__(self, wlan_id: str):
        super().__init__(
            error_code="WLAN_NOT_FOUND",
            message=f"WLAN not found: {wlan_id}",
            http_status=404,
            details={"wlan_id": wlan_id},
        )


class ConflictError(GatewayError):
    """
    Raised when a PPSK password already exists on the target WLAN.

    The details carry the WLAN id only, never the password.

    HTTP Status: 409 Conflict
    Error Code: PPSK_CONFLICT
    """

    def __init__(self, wlan_id: str):
        super().__init__(
            error_code="PPSK_CONFLICT",
            message="PPSK password already exists on this WLAN.",
            http_status=409,
            details={"wlan_id": wlan_id},
        )


class AuthenticationError(GatewayError):
    """
    Raised when the login exchange with the controller fails.

    This occurs when:
    - Credentials are rejected
    - The controller is unreachable or times out during login

    HTTP Status: 500 (surfaced generically)
    Error Code: CONTROLLER_AUTH_FAILED
    """

    def __init__(self, original_error: str, details: Optional[Dict[str, Any]] = None):
        error_details = {"original_error": original_error}
        if details:
            error_details.update(details)

        super().__init__(
            error_code="CONTROLLER_AUTH_FAILED",
            message=f"Controller login failed: {original_error}",
            http_status=500,
            details=error_details,
        )


class RemoteError(GatewayError):
    """
    Raised when a controller call fails after login.

    This occurs when:
    - The transport fails or times out
    - The controller answers with an error or a non-2xx status
    - The response body is not the expected {"data": [...]} envelope

    HTTP Status: 500 (surfaced generically)
    Error Code: CONTROLLER_REMOTE_ERROR
    """

    def __init__(self, operation: str, original_error: str):
        super().__init__(
            error_code="CONTROLLER_REMOTE_ERROR",
            message=f"Controller call '{operation}' failed: {original_error}",
            http_status=500,
            details={"operation": operation, "original_error": original_error},
        )
