"""Immutable result of a generation call."""

import json
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .errors import LLMConductorError
from .tokens import TokenCalculator


@dataclass(frozen=True)
class Response:
    """Normalized response from any vendor.

    Failed calls are also returned as a Response, with ``success`` false and
    the classified error in ``metadata["error"]``.
    """

    output: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    success: bool = True
    metadata: Mapping[str, Any] = field(default_factory=dict)
    vendor: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata or {})))

    @classmethod
    def from_error(
        cls,
        error: LLMConductorError,
        model: str,
        vendor: Optional[str] = None,
        attempts: int = 0,
        input_tokens: int = 0,
        **metadata: Any,
    ) -> "Response":
        """Build the failure value for a classified error."""
        return cls(
            output="",
            model=model,
            input_tokens=input_tokens,
            output_tokens=0,
            success=False,
            metadata={"error": error.to_dict(), "attempts": attempts, **metadata},
            vendor=vendor,
        )

    @property
    def total_tokens(self) -> int:
        return (self.input_tokens or 0) + (self.output_tokens or 0)

    @property
    def error(self) -> Optional[Mapping[str, Any]]:
        return self.metadata.get("error")

    @property
    def estimated_cost(self) -> Optional[float]:
        """Approximate USD cost, or None if the model has no pricing entry."""
        if not self.model or self.total_tokens <= 0:
            return None
        cost = TokenCalculator().estimate_cost(self.input_tokens, self.output_tokens, self.model)
        return cost["total_cost"] if cost else None

    def parse_json(self) -> Any:
        """Parse the output as JSON, tolerating a surrounding code fence.

        Returns:
            Parsed value, or None for failed responses

        Raises:
            ValueError: If the output is not valid JSON
        """
        if not self.success or not self.output:
            return None

        text = self.extract_code_block("json") or self.output.strip()
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Failed to parse JSON response: {e}") from e

    def extract_code_block(self, language: Optional[str] = None) -> Optional[str]:
        """Return the contents of the first fenced code block, if any."""
        if not self.output:
            return None

        if language:
            pattern = rf"```{re.escape(language)}\s*(.*?)```"
        else:
            pattern = r"```(?:\w*)\s*(.*?)```"

        match = re.search(pattern, self.output, re.DOTALL)
        return match.group(1).strip() if match else None
