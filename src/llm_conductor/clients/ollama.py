"""Ollama client for local or self-hosted models."""

import ollama

from ..content import extract_text, is_text_part, parse_data_url
from ..errors import PromptError
from .base import BaseClient, Completion


class OllamaClient(BaseClient):
    """Ollama chat client.

    Ollama takes a single text message with base64 images alongside it, so
    image parts must carry ``data:`` URLs (local files converted by
    ``ImageProcessor``). Remote image URLs are rejected.
    """

    vendor = "ollama"

    def _build_client(self) -> ollama.Client:
        return ollama.Client(host=self.base_url, timeout=self.timeout)

    def _message(self, parts: list[dict]) -> dict:
        message = {"role": "user", "content": extract_text(parts)}

        images = []
        for part in parts:
            if is_text_part(part):
                continue
            inline = parse_data_url(part.get("url") or "")
            if inline is None:
                raise PromptError(
                    "Ollama only accepts inline images; pass a data URL or a local file"
                )
            images.append(inline[1])

        if images:
            message["images"] = images
        return message

    def _complete(self, parts: list[dict]) -> Completion:
        messages = []
        if self.options.get("system"):
            messages.append({"role": "system", "content": self.options["system"]})
        messages.append(self._message(parts))

        options = self._request_options("temperature", "top_p")
        if self.options.get("max_tokens"):
            options["num_predict"] = self.options["max_tokens"]

        response = self.client.chat(
            model=self.model,
            messages=messages,
            options=options or None,
        )

        return Completion(
            text=response["message"]["content"] or "",
            input_tokens=response.get("prompt_eval_count"),
            output_tokens=response.get("eval_count"),
            raw_response=response,
        )
