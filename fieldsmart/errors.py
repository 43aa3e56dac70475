"""Error taxonomy shared by resolvers, validators, services and handlers."""

from fastapi import status


class AppError(Exception):
    """Base class for errors that map onto a response envelope."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingTenantError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Tenant ID not found"


class MissingUserError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "User ID not found"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class InactiveTenantError(ForbiddenError):
    """Tenant does not exist or is suspended/cancelled."""

    default_message = "Tenant is not active"


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation error"


class MissingFieldError(ValidationError):
    """One or more required fields were absent or blank."""

    def __init__(self, fields: list[str]):
        self.fields = list(fields)
        super().__init__(f"Missing required fields: {', '.join(self.fields)}")


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class PersistenceError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Database error"


class UpstreamServiceError(AppError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Upstream service error"


class UpstreamTimeoutError(UpstreamServiceError):
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    default_message = "Upstream service timed out"
