"""
Custom exceptions for the Storefront platform
"""


class StorefrontException(Exception):
    """Base exception for all Storefront errors"""
    status_code = 500

    def __init__(self, message: str, code: str = "STOREFRONT_ERROR", status_code: int = None):
        self.message = message
        self.code = code
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationException(StorefrontException):
    """Exception raised for missing or malformed input"""
    status_code = 400

    def __init__(self, message: str, field: str = None):
        self.field = field
        super().__init__(
            message=message,
            code="VALIDATION_ERROR"
        )


class NotFoundException(StorefrontException):
    """Exception raised when a referenced entity does not exist"""
    status_code = 404

    def __init__(self, resource: str, identifier=None):
        self.resource = resource
        self.identifier = identifier
        super().__init__(
            message=f"{resource} not found",
            code="NOT_FOUND"
        )


class ConflictException(StorefrontException):
    """Exception raised when a uniqueness constraint is violated"""
    status_code = 409

    def __init__(self, message: str, retryable: bool = True):
        self.retryable = retryable
        super().__init__(
            message=message,
            code="CONFLICT"
        )


class AuthenticationException(StorefrontException):
    """Exception raised for bad credentials or reset tokens"""
    status_code = 400

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(
            message=message,
            code="AUTHENTICATION_ERROR"
        )


class PermissionException(StorefrontException):
    """Exception raised when a protected endpoint is called without a valid token"""
    status_code = 401

    def __init__(self, message: str = "Not authorized"):
        super().__init__(
            message=message,
            code="NOT_AUTHORIZED"
        )
