"""Error taxonomy shared by every client."""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Classified failure kinds reported in ``Response.metadata["error"]``."""

    CONFIGURATION = "configuration"
    UNSUPPORTED_VENDOR = "unsupported_vendor"
    PROMPT = "prompt"
    TOKEN_LIMIT = "token_limit"
    TIMEOUT = "timeout"
    NETWORK = "network"
    RATE_LIMIT = "rate_limit"
    SERVER_ERROR = "server_error"
    BAD_REQUEST = "bad_request"
    AUTHENTICATION = "authentication"
    UNKNOWN = "unknown"


class LLMConductorError(Exception):
    """Base class for all classified errors.

    Attributes:
        kind: Classified error kind
        retryable: Whether RetryPolicy may attempt the call again
        status: Transport status code, when one was available
    """

    kind = ErrorKind.UNKNOWN
    retryable = False

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status

    def to_dict(self) -> dict:
        """Serializable form stored in response metadata."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "status": self.status,
            "retryable": self.retryable,
        }


class ConfigurationError(LLMConductorError):
    """A required setting is missing or invalid."""

    kind = ErrorKind.CONFIGURATION


class UnsupportedVendorError(LLMConductorError, ValueError):
    """Vendor is not in the supported set."""

    kind = ErrorKind.UNSUPPORTED_VENDOR


class PromptError(LLMConductorError, ValueError):
    """Prompt shape, template type or template data is invalid."""

    kind = ErrorKind.PROMPT


class TokenLimitError(LLMConductorError):
    """Normalized content exceeds the configured token ceiling."""

    kind = ErrorKind.TOKEN_LIMIT


class TransportError(LLMConductorError):
    """Failure raised during the HTTP exchange."""

    kind = ErrorKind.UNKNOWN


class TransportTimeoutError(TransportError):
    kind = ErrorKind.TIMEOUT
    retryable = True


class NetworkError(TransportError):
    kind = ErrorKind.NETWORK
    retryable = True


class RateLimitError(TransportError):
    kind = ErrorKind.RATE_LIMIT
    retryable = True


class ServerError(TransportError):
    kind = ErrorKind.SERVER_ERROR
    retryable = True


class BadRequestError(TransportError):
    kind = ErrorKind.BAD_REQUEST


class AuthenticationError(TransportError):
    kind = ErrorKind.AUTHENTICATION
