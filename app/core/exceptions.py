from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthorizationError(ServiceError):
    """Actor lacks the capability required for a mutation."""

    def __init__(self, message: str = "Not authorized to perform this action") -> None:
        super().__init__(message, status.HTTP_403_FORBIDDEN)


class NotFoundError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class InvalidStateTransitionError(ServiceError):
    """Requested transition is not allowed from the record's current state. Nothing was changed."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)


class StorageError(ServiceError):
    """Transient persistence failure; the caller may retry."""

    def __init__(self, message: str = "Storage temporarily unavailable, please retry") -> None:
        super().__init__(message, status.HTTP_503_SERVICE_UNAVAILABLE)
