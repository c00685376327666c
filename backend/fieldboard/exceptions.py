class AppException(Exception):
    """Base exception for all application errors."""

    status_code = 500

    def __init__(self, message: str = "An application error occurred"):
        self.message = message
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Raised when the caller has no valid session."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized."):
        super().__init__(message)


class ValidationError(AppException):
    """Raised when input validation fails."""

    status_code = 400

    def __init__(self, message: str = "Validation failed"):
        super().__init__(message)


class ResourceNotFoundError(AppException):
    """Raised when no row owned by the caller matches."""

    status_code = 404

    def __init__(self, resource: str = "Resource", identifier: str = ""):
        message = f"{resource} not found."
        if identifier:
            message = f"{resource} '{identifier}' not found."
        super().__init__(message)


class ShareCodeAllocationError(AppException):
    """Raised when every share code attempt hit a uniqueness collision."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Failed to allocate a unique share code after {attempts} attempts.")
