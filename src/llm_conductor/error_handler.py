"""Classification of raised failures into the error taxonomy.

``classify`` is a pure mapping: it inspects the exception type, any HTTP
status it carries, and as a last resort its message. It never performs I/O.
"""

import re
from typing import Optional

import httpx

from .errors import (
    AuthenticationError,
    BadRequestError,
    LLMConductorError,
    NetworkError,
    RateLimitError,
    ServerError,
    TransportError,
    TransportTimeoutError,
)

# Message patterns checked only when neither type nor status decided the kind
_MESSAGE_PATTERNS = [
    (re.compile(r"rate.?limit|too many requests", re.IGNORECASE), RateLimitError),
    (re.compile(r"timed? ?out", re.IGNORECASE), TransportTimeoutError),
    (re.compile(r"service.*unavailable|overloaded", re.IGNORECASE), ServerError),
    (re.compile(r"connection.*(reset|refused)", re.IGNORECASE), NetworkError),
]


def classify(error: BaseException) -> LLMConductorError:
    """Map a raised error to a classified error.

    Args:
        error: Exception raised by an SDK, the HTTP client, or this package

    Returns:
        Classified error carrying kind, retryability and status
    """
    if isinstance(error, LLMConductorError):
        return error

    message = str(error) or type(error).__name__

    if _is_timeout(error):
        return TransportTimeoutError(message)

    status = status_of(error)
    if status is not None:
        return _from_status(status, message)

    if _is_connection_failure(error):
        return NetworkError(message)

    for pattern, error_cls in _MESSAGE_PATTERNS:
        if pattern.search(message):
            return error_cls(message)

    return TransportError(f"{type(error).__name__}: {message}")


def is_retryable(error: BaseException) -> bool:
    """Whether RetryPolicy should attempt the call again after ``error``."""
    return classify(error).retryable


def status_of(error: BaseException) -> Optional[int]:
    """Extract an HTTP status from an SDK or HTTP client exception."""
    status = getattr(error, "status_code", None)
    if isinstance(status, int):
        return status

    response = getattr(error, "response", None)
    status = getattr(response, "status_code", None)
    if isinstance(status, int):
        return status

    # google.api_core exceptions expose the HTTP status as ``code``
    code = getattr(error, "code", None)
    if isinstance(code, int) and 100 <= code < 600:
        return code

    return None


def _from_status(status: int, message: str) -> LLMConductorError:
    if status == 429:
        return RateLimitError(message, status=status)
    if status == 408:
        return TransportTimeoutError(message, status=status)
    if status in (401, 403):
        return AuthenticationError(message, status=status)
    if status >= 500:
        return ServerError(message, status=status)
    if status >= 400:
        return BadRequestError(message, status=status)
    return TransportError(message, status=status)


def _class_names(error: BaseException) -> list[str]:
    return [cls.__name__ for cls in type(error).__mro__]


def _is_timeout(error: BaseException) -> bool:
    if isinstance(error, (httpx.TimeoutException, TimeoutError)):
        return True
    return any("Timeout" in name for name in _class_names(error))


def _is_connection_failure(error: BaseException) -> bool:
    if isinstance(error, (httpx.TransportError, ConnectionError)):
        return True
    return any("Connection" in name for name in _class_names(error))
