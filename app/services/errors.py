"""Tagged failures raised by the auth core and the resource services."""

from enum import Enum


class ErrorKind(str, Enum):
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"


# HTTP status for each kind; the API layer is the only consumer.
STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
}


class ServiceError(Exception):
    """A recoverable domain failure: a kind plus a user-readable message."""

    def __init__(self, kind: ErrorKind, message: str, field: str | None = None) -> None:
        self.kind = kind
        self.message = message
        self.field = field
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    def __repr__(self) -> str:
        return f"ServiceError({self.kind.value!r}, {self.message!r})"


def bad_request(message: str, field: str | None = None) -> ServiceError:
    return ServiceError(ErrorKind.BAD_REQUEST, message, field)


def unauthorized(message: str) -> ServiceError:
    return ServiceError(ErrorKind.UNAUTHORIZED, message)


def forbidden(message: str) -> ServiceError:
    return ServiceError(ErrorKind.FORBIDDEN, message)


def not_found(message: str) -> ServiceError:
    return ServiceError(ErrorKind.NOT_FOUND, message)


def conflict(message: str, field: str | None = None) -> ServiceError:
    return ServiceError(ErrorKind.CONFLICT, message, field)
