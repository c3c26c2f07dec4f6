"""Z.ai client for GLM models, including the GLM-4.5V vision model.

Z.ai speaks the OpenAI chat completions format under a ``/v4/`` path, so the
request goes straight over HTTP instead of through an SDK.
"""

import httpx

from .base import BaseClient, Completion


class ZaiClient(BaseClient):
    """Z.ai chat completions client."""

    vendor = "zai"

    def _build_client(self) -> httpx.Client:
        headers = {"Content-Type": "application/json"}
        headers.update(self.descriptor.auth_headers(self.api_key))
        return httpx.Client(
            base_url=self.base_url.rstrip("/") + "/",
            headers=headers,
            timeout=self.timeout,
        )

    def _complete(self, parts: list[dict]) -> Completion:
        messages = []
        if self.options.get("system"):
            messages.append({"role": "system", "content": self.options["system"]})
        messages.append({"role": "user", "content": self._message_content(parts)})

        payload = {"model": self.model, "messages": messages}
        payload.update(self._request_options("temperature", "max_tokens", "top_p"))

        response = self.client.post("chat/completions", json=payload)
        response.raise_for_status()
        data = response.json()

        usage = data.get("usage") or {}
        return Completion(
            text=data["choices"][0]["message"]["content"] or "",
            input_tokens=usage.get("prompt_tokens"),
            output_tokens=usage.get("completion_tokens"),
            raw_response=data,
        )
