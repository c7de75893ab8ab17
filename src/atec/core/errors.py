"""
Use-Case Errors

The single failure type leaving a service. The HTTP layer maps ErrorKind to a
status code; the message is shown to the caller as-is.
"""

from __future__ import annotations

import enum
from http import HTTPStatus


class ErrorKind(enum.Enum):
    """Failure category."""

    BAD_REQUEST = HTTPStatus.BAD_REQUEST
    UNAUTHORIZED = HTTPStatus.UNAUTHORIZED
    FORBIDDEN = HTTPStatus.FORBIDDEN
    NOT_FOUND = HTTPStatus.NOT_FOUND
    TOO_MANY_REQUESTS = HTTPStatus.TOO_MANY_REQUESTS
    INTERNAL = HTTPStatus.INTERNAL_SERVER_ERROR

    @property
    def status_code(self) -> int:
        return int(self.value)

    @property
    def error_code(self) -> str:
        return self.value.phrase


INTERNAL_ERROR_MESSAGE = "internal server error"


class UsecaseError(Exception):
    """Tagged use-case failure."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"UsecaseError({self.kind.name}, {self.message!r})"

    @classmethod
    def bad_request(cls, message: str) -> UsecaseError:
        return cls(ErrorKind.BAD_REQUEST, message)

    @classmethod
    def unauthorized(cls, message: str = "unauthorized") -> UsecaseError:
        return cls(ErrorKind.UNAUTHORIZED, message)

    @classmethod
    def forbidden(cls, message: str = "forbidden") -> UsecaseError:
        return cls(ErrorKind.FORBIDDEN, message)

    @classmethod
    def not_found(cls, message: str = "not found") -> UsecaseError:
        return cls(ErrorKind.NOT_FOUND, message)

    @classmethod
    def too_many_requests(cls, message: str = "too many requests") -> UsecaseError:
        return cls(ErrorKind.TOO_MANY_REQUESTS, message)

    @classmethod
    def internal(cls, message: str = INTERNAL_ERROR_MESSAGE) -> UsecaseError:
        return cls(ErrorKind.INTERNAL, message)
