"""
Shared test fixtures
"""

from types import SimpleNamespace

import pytest

from llm_conductor.config import Configuration, ProviderSettings, reset_configuration
from llm_conductor.retry import RetryPolicy


class RecordingSleep:
    """Stands in for time.sleep and records requested delays."""

    def __init__(self):
        self.delays = []

    def __call__(self, seconds):
        self.delays.append(seconds)


@pytest.fixture(autouse=True)
def isolated_configuration(monkeypatch, tmp_path):
    """Keep tests away from the real environment and keys file."""
    monkeypatch.setattr("llm_conductor.config.KEYS_FILE", tmp_path / "missing.env")
    reset_configuration()
    yield
    reset_configuration()


@pytest.fixture
def configuration():
    """Configuration with API keys for every vendor."""
    return Configuration(
        max_retries=3,
        retry_delay=0.5,
        providers={
            "openai": ProviderSettings(api_key="sk-openai"),
            "anthropic": ProviderSettings(api_key="sk-ant"),
            "gemini": ProviderSettings(api_key="gemini-key"),
            "openrouter": ProviderSettings(api_key="sk-or"),
            "zai": ProviderSettings(api_key="zai-key"),
            "groq": ProviderSettings(api_key="gsk-groq"),
        },
    )


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def retry_policy(sleep):
    """Retry policy that never actually sleeps."""
    return RetryPolicy(max_retries=3, base_delay=0.5, jitter=False, sleep=sleep)


def openai_completion(text="Hi", prompt_tokens=3, completion_tokens=1):
    """Object shaped like an OpenAI chat completion."""
    usage = None
    if prompt_tokens is not None:
        usage = SimpleNamespace(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens)
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=text))],
        usage=usage,
    )


class StatusError(Exception):
    """Exception carrying an HTTP status, like SDK status errors."""

    def __init__(self, status_code, message="request failed"):
        super().__init__(message)
        self.status_code = status_code
