"""Failure taxonomy and the decoder that turns HTTP responses into ApiError."""

import json
from enum import Enum, IntEnum

from pydantic import BaseModel, ConfigDict, ValidationError


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    API = "api"
    MALFORMED_RESPONSE = "malformed_response"
    TRANSPORT = "transport"


class ResponseCode(IntEnum):
    """Coarse classification of a non-2xx status."""

    UNKNOWN = -1
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    CONFLICT = 409
    UNPROCESSABLE_ENTITY = 422
    INTERNAL_SERVER_ERROR = 500
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503

    @classmethod
    def from_status(cls, status: int) -> "ResponseCode":
        try:
            return cls(status)
        except ValueError:
            return cls.UNKNOWN


class ErrorDetail(BaseModel):
    model_config = ConfigDict(frozen=True)

    resource: str | None = None
    field: str | None = None
    code: str | None = None
    message: str | None = None


class ClientError(BaseModel):
    """The conventional ``{message, documentation_url, errors}`` error body."""

    model_config = ConfigDict(frozen=True)

    message: str | None = None
    documentation_url: str | None = None
    # Usually detail objects, but some endpoints send plain strings.
    errors: tuple[ErrorDetail | str, ...] | None = None


class GitHubApiFailure(Exception):
    kind: ErrorKind


class ValidationFailure(GitHubApiFailure):
    """Caller input breaks a domain rule, or a resource is confirmed absent."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, cause: "ApiError | None" = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class ApiError(GitHubApiFailure):
    kind = ErrorKind.API

    def __init__(
        self,
        http_code: int,
        raw_error: str,
        error: ClientError | None,
        method: str,
        path: str,
    ) -> None:
        self.http_code = http_code
        self.response_code = ResponseCode.from_status(http_code)
        self.raw_error = raw_error
        self.error = error
        self.method = method
        self.path = path
        detail = error.message if error is not None and error.message else raw_error
        super().__init__(f"{method} {path} failed with HTTP {http_code}: {detail}")

    @property
    def message(self) -> str | None:
        return self.error.message if self.error is not None else None

    @property
    def documentation_url(self) -> str | None:
        return self.error.documentation_url if self.error is not None else None

    def is_empty_repository(self) -> bool:
        """A 409 whose message is exactly ``Git Repository is empty.``; the API has no other signal."""
        return self.response_code == ResponseCode.CONFLICT and self.message == "Git Repository is empty."


class MalformedResponse(GitHubApiFailure):
    """A 2xx body that does not match the expected entity shape."""

    kind = ErrorKind.MALFORMED_RESPONSE

    def __init__(self, target: str, message: str, field: str | None = None, value: object = None) -> None:
        self.target = target
        self.field = field
        self.value = value
        where = f" (field '{field}', value {value!r})" if field else ""
        super().__init__(f"Cannot decode {target}{where}: {message}")


class TransportFailure(GitHubApiFailure):
    """The exchange could not be completed; the underlying error is chained."""

    kind = ErrorKind.TRANSPORT


def _parse_client_error(body: bytes) -> ClientError | None:
    try:
        data = json.loads(body)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    try:
        return ClientError.model_validate(data)
    except ValidationError:
        return None


def decode_error(status: int, body: bytes, method: str, path: str) -> ApiError:
    """Build an ApiError for a failed response.

    The error envelope is parsed best-effort: when it is missing or unparsable
    the raw body is still kept verbatim on the returned error.
    """
    raw = body.decode("utf-8", errors="replace")
    return ApiError(status, raw, _parse_client_error(body), method, path)


def is_success(status: int) -> bool:
    return 200 <= status < 300


def raise_for_status(status: int, body: bytes, method: str, path: str) -> None:
    if not is_success(status):
        raise decode_error(status, body, method, path)
