from typing import Optional, Any


class BotSuiteError(Exception):
    """
    Base exception for the bot suite application.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ValidationError(BotSuiteError):
    """
    Raised when a required field is missing or input is rejected.
    """
    def __init__(self, message: str = "Validation error", details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=400, details=details)


class AuthenticationError(BotSuiteError):
    """
    Raised when authentication fails or no session is present.
    """
    def __init__(self, message: str = "Not authenticated", details: Optional[Any] = None):
        super().__init__(message, code="AUTHENTICATION_FAILED", status_code=401, details=details)


class ResourceNotFoundError(BotSuiteError):
    """
    Raised when a requested resource is not found.
    """
    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)


class NotConfiguredError(BotSuiteError):
    """
    Raised when a bot has no model or API key configured.
    """
    def __init__(self, message: str = "Bot API not configured", details: Optional[Any] = None):
        super().__init__(message, code="NOT_CONFIGURED", status_code=501, details=details)


class UpstreamError(BotSuiteError):
    """
    Raised when the generative API answers with a non-success status.
    The upstream status code and error body are relayed unchanged.
    """
    def __init__(self, status_code: int, details: Optional[Any] = None, message: str = "Bot request failed"):
        super().__init__(message, code="UPSTREAM_ERROR", status_code=status_code, details=details)


class BotRequestError(BotSuiteError):
    """
    Raised when extraction, upload or the API call fails unexpectedly.
    """
    def __init__(self, message: str = "Bot request failed", details: Optional[Any] = None):
        super().__init__(message, code="BOT_REQUEST_FAILED", status_code=500, details=details)
