"""Base class and contract for vendor clients."""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from ..config import Configuration, apply_log_levels, get_configuration
from ..content import VendorDescriptor, extract_text, format_content, is_text_part
from ..error_handler import classify
from ..errors import ConfigurationError, LLMConductorError, PromptError, TokenLimitError
from ..prompts import render_prompt
from ..response import Response
from ..retry import Result, RetryPolicy
from ..tokens import TokenCalculator
from ..vendors import get_descriptor


@dataclass
class Completion:
    """Raw outcome of one successful vendor call."""

    text: str
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    raw_response: Any = None


class BaseClient(ABC):
    """Abstract base class for vendor clients.

    Each vendor implementation supplies the SDK/HTTP client and the payload
    envelope; prompt normalization, token accounting, retries and error
    conversion are shared here. Neither entry point raises on service
    failures: errors come back as a failed ``Response``.
    """

    vendor: str  # key into vendors.DESCRIPTORS

    def __init__(
        self,
        model: str,
        type: Optional[str] = None,
        configuration: Optional[Configuration] = None,
        retry_policy: Optional[RetryPolicy] = None,
        **options: Any,
    ) -> None:
        """Initialize client.

        Args:
            model: Model identifier sent to the vendor
            type: Prompt template type used by ``generate``
            configuration: Settings (default: process-wide configuration)
            retry_policy: Retry override (default: built from configuration)
            **options: Vendor passthrough options (temperature, max_tokens, ...)
        """
        self.model = str(model)
        self.type = type
        self.configuration = configuration or get_configuration()
        self.options = options
        self.retry_policy = retry_policy or RetryPolicy.from_configuration(self.configuration)
        self.token_calculator = TokenCalculator()

        apply_log_levels(self.configuration)
        self.logger = logging.getLogger(f"llm_conductor.clients.{self.vendor}")

        self._client = None
        self._client_lock = threading.Lock()

    @property
    def descriptor(self) -> VendorDescriptor:
        return get_descriptor(self.vendor)

    @property
    def settings(self):
        return self.configuration.provider(self.vendor)

    @property
    def timeout(self) -> float:
        return self.configuration.timeout_for(self.vendor)

    @property
    def base_url(self) -> Optional[str]:
        return self.settings.base_url or self.descriptor.base_url

    @property
    def api_key(self) -> Optional[str]:
        """Configured API key.

        Raises:
            ConfigurationError: If the vendor requires a key and none is set
        """
        key = self.settings.api_key
        if not key and self.descriptor.requires_api_key:
            env = " or ".join(self.descriptor.api_key_env)
            raise ConfigurationError(f"No API key configured for {self.vendor}. Set {env}.")
        return key

    @property
    def client(self):
        """Vendor SDK/HTTP client, created once on first use."""
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    self._client = self._build_client()
        return self._client

    def generate(self, data: Any) -> Response:
        """Render the client's prompt template against ``data`` and send it.

        A string ``data`` is sent as-is.
        """
        if isinstance(data, str):
            return self.generate_from_prompt(data)

        try:
            if self.type is None:
                raise PromptError("No prompt type specified and data is not a string")
            prompt = render_prompt(self.type, data)
        except PromptError as e:
            self.logger.error(f"{self.vendor} prompt rendering failed: {e}")
            return Response.from_error(e, model=self.model, vendor=self.vendor)

        return self.generate_from_prompt(prompt)

    def generate_from_prompt(self, prompt: Any) -> Response:
        """Normalize ``prompt`` for this vendor, send it, and return a Response.

        Args:
            prompt: Plain text, ``{"text", "images"}`` mapping, or content parts

        Returns:
            Response; ``success`` is false when the call failed
        """
        label = f"{self.vendor}:{self.model}"

        try:
            parts = format_content(prompt, self.descriptor)
            estimated_input = self.token_calculator.calculate(extract_text(parts))
            self._check_token_limit(estimated_input)
        except LLMConductorError as e:
            self.logger.error(f"{label} rejected prompt: {e}")
            return Response.from_error(e, model=self.model, vendor=self.vendor)

        self.logger.info(f"Sending {label} request ({len(parts)} content parts)")
        result = self.retry_policy.run(lambda: self._attempt(parts), label=label)

        if not result.ok:
            self.logger.error(f"{label} request failed: {result.error}")
            return Response.from_error(
                result.error,
                model=self.model,
                vendor=self.vendor,
                attempts=result.attempts,
                input_tokens=estimated_input,
                estimated_input_tokens=estimated_input,
            )

        completion = result.value
        output = completion.text or ""
        # Vendor usage includes image tokens
        has_images = any(not is_text_part(part) for part in parts)
        input_tokens = completion.input_tokens
        if input_tokens is None or has_images:
            input_tokens = estimated_input
        output_tokens = completion.output_tokens
        if output_tokens is None:
            output_tokens = self.token_calculator.calculate(output)

        vendor_usage = {}
        if completion.input_tokens is not None:
            vendor_usage["vendor_input_tokens"] = completion.input_tokens

        self.logger.debug(
            f"{label} completed in {result.attempts} attempt(s): "
            f"{input_tokens} input / {output_tokens} output tokens"
        )
        return Response(
            output=output,
            model=self.model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            success=bool(output),
            metadata={
                "vendor": self.vendor,
                "attempts": result.attempts,
                "estimated_input_tokens": estimated_input,
                **vendor_usage,
            },
            vendor=self.vendor,
        )

    def generate_simple(self, prompt: Any) -> Response:
        """Alias of ``generate_from_prompt``."""
        return self.generate_from_prompt(prompt)

    def _attempt(self, parts: list[dict]) -> Result:
        try:
            return Result(value=self._complete(parts))
        except Exception as e:  # converted to a classified error, never re-raised
            return Result(error=classify(e))

    def _check_token_limit(self, tokens: int) -> None:
        limit = self.options.get("max_input_tokens") or self.settings.max_input_tokens
        if limit and tokens > limit:
            raise TokenLimitError(
                f"Prompt is ~{tokens} tokens, over the {limit} token limit for {self.model}"
            )

    def _message_content(self, parts: list[dict]):
        """Single text part as a plain string, anything else as a part list."""
        if len(parts) == 1 and is_text_part(parts[0]):
            return parts[0]["text"]
        return parts

    def _request_options(self, *names: str) -> dict:
        """Passthrough options that were set, restricted to ``names``."""
        return {name: self.options[name] for name in names if self.options.get(name) is not None}

    @abstractmethod
    def _build_client(self):
        """Create the vendor SDK or HTTP client."""
        ...

    @abstractmethod
    def _complete(self, parts: list[dict]) -> Completion:
        """Send formatted content parts and return the completion.

        Exceptions raised here are classified by the caller.
        """
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model!r}, type={self.type!r})"
