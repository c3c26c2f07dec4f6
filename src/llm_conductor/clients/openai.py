"""OpenAI and OpenAI-compatible clients (OpenRouter, Groq)."""

from openai import OpenAI

from .base import BaseClient, Completion


class OpenAIClient(BaseClient):
    """OpenAI chat completions client."""

    vendor = "openai"

    def _build_client(self) -> OpenAI:
        return OpenAI(
            api_key=self.api_key,
            base_url=self.base_url,
            organization=self.settings.organization,
            timeout=self.timeout,
            max_retries=0,
        )

    def _payload(self, parts: list[dict]) -> dict:
        payload = {
            "model": self.model,
            "messages": self._messages(parts),
        }
        payload.update(self._request_options("temperature", "max_tokens", "top_p"))
        return payload

    def _messages(self, parts: list[dict]) -> list[dict]:
        messages = []
        if self.options.get("system"):
            messages.append({"role": "system", "content": self.options["system"]})
        messages.append({"role": "user", "content": self._message_content(parts)})
        return messages

    def _complete(self, parts: list[dict]) -> Completion:
        response = self.client.chat.completions.create(**self._payload(parts))

        usage = getattr(response, "usage", None)
        return Completion(
            text=response.choices[0].message.content or "",
            input_tokens=getattr(usage, "prompt_tokens", None),
            output_tokens=getattr(usage, "completion_tokens", None),
            raw_response=response,
        )


class OpenRouterClient(OpenAIClient):
    """OpenRouter client, routed to the highest-throughput provider."""

    vendor = "openrouter"

    def _build_client(self) -> OpenAI:
        return OpenAI(
            api_key=self.api_key,
            base_url=self.base_url,
            timeout=self.timeout,
            max_retries=0,
        )

    def _payload(self, parts: list[dict]) -> dict:
        payload = super()._payload(parts)
        payload["extra_body"] = {"provider": {"sort": "throughput"}}
        return payload


class GroqClient(OpenAIClient):
    """Groq client over its OpenAI-compatible endpoint."""

    vendor = "groq"

    def _build_client(self) -> OpenAI:
        return OpenAI(
            api_key=self.api_key,
            base_url=self.base_url,
            timeout=self.timeout,
            max_retries=0,
        )
