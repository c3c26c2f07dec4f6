"""
Tests for error classification
"""

import httpx
import pytest

from conftest import StatusError
from llm_conductor.error_handler import classify, is_retryable, status_of
from llm_conductor.errors import ConfigurationError, ErrorKind, PromptError


def http_status_error(status):
    request = httpx.Request("POST", "https://api.example.com/v1/chat/completions")
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError(f"status {status}", request=request, response=response)


class APITimeoutError(Exception):
    """Named like SDK timeout errors without sharing a base class."""


class APIConnectionError(Exception):
    """Named like SDK connection errors without sharing a base class."""


class TestClassify:
    """Tests for mapping raised errors to kinds."""

    @pytest.mark.parametrize(
        "status, kind, retryable",
        [
            (429, ErrorKind.RATE_LIMIT, True),
            (408, ErrorKind.TIMEOUT, True),
            (500, ErrorKind.SERVER_ERROR, True),
            (503, ErrorKind.SERVER_ERROR, True),
            (401, ErrorKind.AUTHENTICATION, False),
            (403, ErrorKind.AUTHENTICATION, False),
            (400, ErrorKind.BAD_REQUEST, False),
            (404, ErrorKind.BAD_REQUEST, False),
        ],
    )
    def test_status_codes(self, status, kind, retryable):
        for error in (http_status_error(status), StatusError(status)):
            classified = classify(error)
            assert classified.kind == kind
            assert classified.retryable is retryable
            assert classified.status == status

    @pytest.mark.parametrize(
        "error",
        [
            httpx.ReadTimeout("read timed out"),
            TimeoutError("deadline"),
            APITimeoutError("Request timed out."),
        ],
    )
    def test_timeouts(self, error):
        classified = classify(error)
        assert classified.kind == ErrorKind.TIMEOUT
        assert classified.retryable

    @pytest.mark.parametrize(
        "error",
        [
            httpx.ConnectError("connection refused"),
            ConnectionResetError("reset by peer"),
            APIConnectionError("Connection error."),
        ],
    )
    def test_network_failures(self, error):
        classified = classify(error)
        assert classified.kind == ErrorKind.NETWORK
        assert classified.retryable

    @pytest.mark.parametrize(
        "message, kind",
        [
            ("Rate limit exceeded, please retry", ErrorKind.RATE_LIMIT),
            ("The model is overloaded", ErrorKind.SERVER_ERROR),
            ("operation timed out", ErrorKind.TIMEOUT),
        ],
    )
    def test_message_patterns(self, message, kind):
        assert classify(RuntimeError(message)).kind == kind

    def test_unknown_errors_are_fatal(self):
        classified = classify(RuntimeError("something odd"))

        assert classified.kind == ErrorKind.UNKNOWN
        assert not classified.retryable
        assert "RuntimeError" in classified.message

    def test_classified_errors_pass_through(self):
        error = ConfigurationError("missing key")
        assert classify(error) is error

    def test_prompt_errors_are_fatal(self):
        assert not is_retryable(PromptError("bad prompt"))

    def test_to_dict(self):
        assert classify(StatusError(429, "slow down")).to_dict() == {
            "kind": "rate_limit",
            "message": "slow down",
            "status": 429,
            "retryable": True,
        }


class TestStatusOf:
    """Tests for HTTP status extraction."""

    def test_direct_status_code(self):
        assert status_of(StatusError(502)) == 502

    def test_response_status_code(self):
        assert status_of(http_status_error(418)) == 418

    def test_integer_code_attribute(self):
        error = RuntimeError("quota")
        error.code = 429
        assert status_of(error) == 429

    def test_non_http_code_ignored(self):
        error = RuntimeError("grpc")
        error.code = 8
        assert status_of(error) is None
