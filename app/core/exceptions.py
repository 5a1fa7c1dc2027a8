"""
Typed application errors.

Every service raises one of these instead of a bare ``Exception`` so the HTTP
layer can map failures to a status code from the ``kind`` alone.
"""

from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    UPSTREAM = "upstream"
    INTERNAL = "internal"


STATUS_CODES = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.CONFLICT: 409,
    ErrorKind.VALIDATION: 400,
    ErrorKind.UPSTREAM: 502,
    ErrorKind.INTERNAL: 500,
}


class AppException(Exception):
    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, kind: ErrorKind = None):
        self.message = message
        if kind is not None:
            self.kind = kind
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]


class NotFoundError(AppException):
    kind = ErrorKind.NOT_FOUND


class ProductNotFoundError(NotFoundError):
    pass


class UnauthorizedError(AppException):
    kind = ErrorKind.UNAUTHORIZED


class ConflictError(AppException):
    kind = ErrorKind.CONFLICT


class InvalidInputError(AppException):
    kind = ErrorKind.VALIDATION


class ProductNotSubscribableError(InvalidInputError):
    pass


class UpstreamError(AppException):
    """A call to the payment provider failed."""

    kind = ErrorKind.UPSTREAM


class CheckoutError(UpstreamError):
    pass
