"""Error types raised by the client.

Every error carries a machine-readable ``error`` code, a human ``message``
and the HTTP ``status_code`` of the response that caused it (``None`` for
errors detected locally or at the transport level).
"""

import json
from typing import Any

import httpx


class AirtableError(Exception):
    default_error = "UNEXPECTED_ERROR"
    default_message = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        error: str | None = None,
        status_code: int | None = None,
        body: str | None = None,
    ):
        self.error = error or self.default_error
        self.message = message or self.default_message
        self.status_code = status_code
        self.body = body
        super().__init__(self.message)

    def __str__(self) -> str:
        out = f"{self.message}({self.error})"
        if self.status_code is not None:
            out += f"[Http code {self.status_code}]"
        return out

    def __repr__(self) -> str:
        return f"{type(self).__name__}(error={self.error!r}, message={self.message!r}, status_code={self.status_code!r})"


class InvalidParametersError(AirtableError, ValueError):
    default_error = "INVALID_PARAMETERS"
    default_message = "Invalid parameters"


class ConfigurationError(AirtableError, ValueError):
    default_error = "INVALID_CONFIGURATION"
    default_message = "Invalid configuration"


class AuthenticationRequiredError(AirtableError):
    default_error = "AUTHENTICATION_REQUIRED"
    default_message = "You should provide valid api key to perform this operation"


class RateLimitError(AirtableError):
    default_error = "TOO_MANY_REQUESTS"
    default_message = "You have made too many requests in a short period of time. Please retry your request later"


class RemoteError(AirtableError):
    pass


class NotAuthorizedError(RemoteError):
    default_error = "NOT_AUTHORIZED"
    default_message = "You are not authorized to perform this operation"


class NotFoundError(RemoteError):
    default_error = "NOT_FOUND"
    default_message = "Could not find what you are looking for"


class RequestTooLargeError(RemoteError):
    default_error = "REQUEST_TOO_LARGE"
    default_message = "Request body is too large"


class InvalidRequestError(RemoteError):
    default_error = "INVALID_REQUEST_UNKNOWN"
    default_message = "Could not process the request"


class ServerError(RemoteError):
    default_error = "SERVER_ERROR"
    default_message = "Try again. If the problem persists, contact support."


class TransportError(AirtableError):
    default_error = "CONNECTION_ERROR"
    default_message = "Could not reach the API"


class RequestTimeoutError(TransportError):
    default_error = "REQUEST_TIMEOUT"
    default_message = "The request timed out"


# status -> (class, fixed code or None to read it from the body)
_STATUS_ERRORS: dict[int, tuple[type[AirtableError], str | None]] = {
    401: (AuthenticationRequiredError, "AUTHENTICATION_REQUIRED"),
    403: (NotAuthorizedError, "NOT_AUTHORIZED"),
    404: (NotFoundError, None),
    413: (RequestTooLargeError, "REQUEST_TOO_LARGE"),
    422: (InvalidRequestError, None),
    429: (RateLimitError, "TOO_MANY_REQUESTS"),
    500: (ServerError, "SERVER_ERROR"),
    503: (ServerError, "SERVICE_UNAVAILABLE"),
}


def _error_details(payload: Any) -> tuple[str | None, str | None]:
    if not isinstance(payload, dict):
        return None, None
    err = payload.get("error")
    if isinstance(err, dict):
        return err.get("type"), err.get("message")
    if isinstance(err, str):
        return err, payload.get("message")
    return None, payload.get("message")


def error_from_response(response: httpx.Response) -> AirtableError:
    """Build the error matching a non-2xx response."""
    text = response.text
    try:
        payload = json.loads(text) if text else None
    except ValueError:
        payload = None
    code, message = _error_details(payload)

    status = response.status_code
    cls, fixed_code = _STATUS_ERRORS.get(status, (RemoteError, None))
    if status == 503:
        message = message or "The service is temporarily unavailable. Please retry shortly."
    return cls(
        message=message,
        error=fixed_code or code,
        status_code=status,
        body=text,
    )
