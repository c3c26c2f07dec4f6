"""Anthropic Claude client."""

from anthropic import Anthropic

from .base import BaseClient, Completion

DEFAULT_MAX_TOKENS = 4096


class AnthropicClient(BaseClient):
    """Anthropic Messages API client.

    Images are placed before the text part, as Anthropic recommends.
    Image ``detail`` is not supported and is dropped by the formatter.
    """

    vendor = "anthropic"

    def _build_client(self) -> Anthropic:
        return Anthropic(
            api_key=self.api_key,
            base_url=self.base_url,
            timeout=self.timeout,
            max_retries=0,
        )

    def _complete(self, parts: list[dict]) -> Completion:
        request = {
            "model": self.model,
            "max_tokens": self.options.get("max_tokens") or DEFAULT_MAX_TOKENS,
            "messages": [{"role": "user", "content": self._message_content(parts)}],
        }
        # System prompt is a separate field in the Anthropic API
        if self.options.get("system"):
            request["system"] = self.options["system"]
        request.update(self._request_options("temperature", "top_p"))

        response = self.client.messages.create(**request)

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        usage = getattr(response, "usage", None)
        return Completion(
            text=text,
            input_tokens=getattr(usage, "input_tokens", None),
            output_tokens=getattr(usage, "output_tokens", None),
            raw_response=response,
        )
