"""Approximate token accounting.

Token counts are estimated from text length rather than produced by a real
tokenizer. The estimate is deterministic and never decreases as text grows.
"""

import math
from typing import Optional

CHARS_PER_TOKEN = 4

# Approximate pricing per 1K tokens (USD), matched by model-name prefix
PRICING = {
    "gpt-3.5-turbo": {"input": 0.0015, "output": 0.002},
    "gpt-4": {"input": 0.03, "output": 0.06},
    "gpt-4-turbo": {"input": 0.01, "output": 0.03},
    "gpt-4o": {"input": 0.005, "output": 0.015},
    "gpt-4o-mini": {"input": 0.00015, "output": 0.0006},
    "claude-3-haiku": {"input": 0.00025, "output": 0.00125},
    "claude-3-sonnet": {"input": 0.003, "output": 0.015},
    "claude-3-5-sonnet": {"input": 0.003, "output": 0.015},
    "claude-3-opus": {"input": 0.015, "output": 0.075},
    "gemini-1.5-flash": {"input": 0.000075, "output": 0.0003},
    "gemini-1.5-pro": {"input": 0.00125, "output": 0.005},
}


def count_tokens(text: Optional[str]) -> int:
    """Estimate the number of tokens in ``text``."""
    if not text:
        return 0
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def pricing_for(model: Optional[str]) -> Optional[dict]:
    """Pricing entry with the longest prefix matching ``model``."""
    if not model:
        return None
    matches = [prefix for prefix in PRICING if model.startswith(prefix)]
    if not matches:
        return None
    return PRICING[max(matches, key=len)]


class TokenCalculator:
    """Token estimates and cost approximations for responses."""

    def calculate(self, content) -> int:
        """Estimate tokens for text content (``None`` counts as zero)."""
        if content is None:
            return 0
        return count_tokens(str(content))

    def estimate_cost(
        self,
        input_tokens: int,
        output_tokens: int,
        model: Optional[str],
    ) -> Optional[dict]:
        """Approximate USD cost of a call.

        Returns:
            Dict with input_cost, output_cost, total_cost and currency,
            or None when the model has no pricing entry
        """
        pricing = pricing_for(model)
        if pricing is None:
            return None

        input_cost = (input_tokens / 1000.0) * pricing["input"]
        output_cost = (output_tokens / 1000.0) * pricing["output"]
        return {
            "input_cost": input_cost,
            "output_cost": output_cost,
            "total_cost": input_cost + output_cost,
            "currency": "USD",
        }
