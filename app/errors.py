from typing import Any, Dict, Optional


class HotelFinderError(Exception):
    """Base error rendered by the API exception handlers."""

    status_code: int = 500
    code: Optional[str] = None

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.message}
        if self.code:
            payload["code"] = self.code
        return payload


class ClientInputError(HotelFinderError):
    """Search request is missing required fields or carries malformed ones."""

    status_code = 400
    code = "INVALID_INPUT"

    def __init__(self, message: str = "Missing required parameters", details: Any = None):
        super().__init__(message)
        self.details = details

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        if self.details is not None:
            payload["details"] = self.details
        return payload


class AuthError(HotelFinderError):
    """Token exchange failed or the provider rejected our bearer token."""

    status_code = 401
    code = "AUTH_ERROR"

    def __init__(self, message: str = "Authentication failed. Please try again."):
        super().__init__(message)


class UpstreamError(HotelFinderError):
    """Any other provider failure, relayed with the provider's status."""

    def __init__(self, details: str, status_code: Optional[int] = None,
                 message: str = "Failed to fetch hotel offers"):
        super().__init__(message, status_code=status_code or 500)
        self.details = details

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message, "details": self.details}
