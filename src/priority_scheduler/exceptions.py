"""
Service-layer exceptions
"""


class ServiceError(Exception):
    """Base exception for service-layer errors"""

    def __init__(self, message: str, error_code: str | None = None):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class ResourceNotFoundError(ServiceError):
    """Raised when a requested resource is not found"""

    def __init__(self, resource_type: str, resource_id: str):
        self.resource_id = resource_id
        message = f"{resource_type} with ID {resource_id} not found"
        super().__init__(message, "RESOURCE_NOT_FOUND")


class ValidationError(ServiceError):
    """Raised when validation fails"""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message, "VALIDATION_ERROR")
