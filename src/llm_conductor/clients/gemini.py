"""Google Gemini client."""

import base64

import google.generativeai as genai
from google.ai import generativelanguage as glm

from .base import BaseClient, Completion


class GeminiClient(BaseClient):
    """Google Gemini implementation.

    Text parts are ``{"text": ...}``; images become ``file_data`` (remote
    URLs) or ``inline_data`` (data URLs) parts placed before the text.

    Each client owns its ``GenerativeServiceClient`` with its own key and
    endpoint, so ``genai.configure`` and its process-wide state are never used.
    """

    vendor = "gemini"

    def _build_client(self) -> glm.GenerativeServiceClient:
        return glm.GenerativeServiceClient(
            client_options={"api_key": self.api_key, "api_endpoint": self.base_url},
            transport="rest",
        )

    def _request(self, parts: list[dict]) -> genai.protos.GenerateContentRequest:
        request = genai.protos.GenerateContentRequest(
            model=f"models/{self.model}",
            contents=[genai.protos.Content(role="user", parts=[_proto_part(p) for p in parts])],
        )
        if self.options.get("system"):
            request.system_instruction = genai.protos.Content(
                parts=[genai.protos.Part(text=self.options["system"])]
            )

        config = self._request_options("temperature", "top_p")
        if self.options.get("max_tokens"):
            config["max_output_tokens"] = self.options["max_tokens"]
        if config:
            request.generation_config = genai.protos.GenerationConfig(**config)
        return request

    def _complete(self, parts: list[dict]) -> Completion:
        response = self.client.generate_content(request=self._request(parts), timeout=self.timeout)

        text = ""
        if response.candidates:
            text = "".join(part.text for part in response.candidates[0].content.parts)

        usage = response.usage_metadata
        return Completion(
            text=text,
            input_tokens=usage.prompt_token_count if usage else None,
            output_tokens=usage.candidates_token_count if usage else None,
            raw_response=response,
        )


def _proto_part(part: dict) -> genai.protos.Part:
    if "inline_data" in part:
        inline = part["inline_data"]
        return genai.protos.Part(
            inline_data=genai.protos.Blob(
                mime_type=inline["mime_type"], data=base64.b64decode(inline["data"])
            )
        )
    if "file_data" in part:
        return genai.protos.Part(file_data=genai.protos.FileData(**part["file_data"]))
    return genai.protos.Part(text=part.get("text", ""))
