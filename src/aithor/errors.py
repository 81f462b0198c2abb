"""Exception types shared by the store, the API client and the reader."""

from __future__ import annotations

from typing import Optional


class AithorError(Exception):
    """Base class for every error raised by aithor."""


class NotAuthenticatedError(AithorError):
    """No token in the session; raised before any network call."""

    def __init__(self, message: str = "No authentication token found") -> None:
        super().__init__(message)


class AuthenticationFailedError(AithorError):
    """The login endpoint rejected the credentials."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message)


class RequestFailedError(AithorError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UnauthorizedError(RequestFailedError):
    def __init__(self, message: str = "Unauthorized - Please login again") -> None:
        super().__init__(message, status_code=401)


class ForbiddenError(RequestFailedError):
    def __init__(self, message: str = "Not authorized to access this book") -> None:
        super().__init__(message, status_code=403)


class NotFoundError(RequestFailedError):
    def __init__(self, message: str = "Not found") -> None:
        super().__init__(message, status_code=404)


class NotReadyError(RequestFailedError):
    """The book has not finished processing yet."""

    def __init__(
        self, message: str = "Book is not ready yet", status_code: Optional[int] = 400
    ) -> None:
        super().__init__(message, status_code=status_code)


class MalformedResponseError(AithorError):
    """The server answered with a body that does not match the expected shape."""


class StorageUnavailableError(AithorError):
    """The local store could not be used (not initialized, disk errors, ...)."""


class DuplicateKeyError(AithorError):
    def __init__(self, collection: str, key: str) -> None:
        super().__init__(f"{collection} record {key!r} already exists")
        self.collection = collection
        self.key = key
