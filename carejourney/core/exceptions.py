from typing import Optional, Any

class CareJourneyError(Exception):
    """
    Base exception for CareJourney application.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)

class ResourceNotFoundError(CareJourneyError):
    """
    Raised when a requested resource is not found.
    """
    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)

class AuthorizationError(CareJourneyError):
    """
    Raised when a bearer token or one-time token is rejected,
    or when a user acts on a record they do not own.
    """
    def __init__(self, message: str = "Unauthorized request", details: Optional[Any] = None):
        super().__init__(message, code="UNAUTHORIZED", status_code=403, details=details)

class ValidationError(CareJourneyError):
    """
    Raised when input validation fails.
    """
    def __init__(self, message: str = "Validation error", details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=422, details=details)

class ConflictError(CareJourneyError):
    """
    Raised when a record would collide with an existing one.
    """
    def __init__(self, message: str = "Resource already exists", details: Optional[Any] = None):
        super().__init__(message, code="CONFLICT", status_code=409, details=details)

class PayloadTooLargeError(CareJourneyError):
    """
    Raised when an uploaded file exceeds the configured size limit.
    """
    def __init__(self, message: str = "File too large", details: Optional[Any] = None):
        super().__init__(message, code="PAYLOAD_TOO_LARGE", status_code=413, details=details)

class ExternalServiceError(CareJourneyError):
    """
    Raised when an external service (e.g., object storage) fails.
    """
    def __init__(self, message: str = "External service error", details: Optional[Any] = None):
        super().__init__(message, code="EXTERNAL_SERVICE_ERROR", status_code=502, details=details)
