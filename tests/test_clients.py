"""
Tests for vendor client payloads and response parsing
"""

import base64
import json
import threading
import time
from types import SimpleNamespace

import httpx
import pytest

from conftest import openai_completion
from llm_conductor.clients.anthropic import AnthropicClient
from llm_conductor.clients.gemini import GeminiClient
from llm_conductor.clients.ollama import OllamaClient
from llm_conductor.clients.openai import GroqClient, OpenAIClient, OpenRouterClient
from llm_conductor.clients.zai import ZaiClient
from llm_conductor.config import Configuration

IMAGE_URL = "https://example.com/chart.png"
DATA_URL = "data:image/png;base64,iVBORw0KGgo="


class Recorder:
    """Callable that records keyword arguments and returns a fixed value."""

    def __init__(self, result):
        self.result = result
        self.calls = []

    def __call__(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        return self.result


class TestOpenAICompatible:
    """Tests for the OpenAI, OpenRouter and Groq clients."""

    def test_sdk_client_settings(self, configuration, monkeypatch):
        built = Recorder(SimpleNamespace())
        monkeypatch.setattr("llm_conductor.clients.openai.OpenAI", built)
        configuration = configuration.with_provider("openai", organization="org-1", timeout=5.0)

        OpenAIClient("gpt-4o", configuration=configuration).client

        assert built.calls[0][1] == {
            "api_key": "sk-openai",
            "base_url": "https://api.openai.com/v1",
            "organization": "org-1",
            "timeout": 5.0,
            "max_retries": 0,
        }

    def test_client_is_built_once(self, configuration, monkeypatch):
        built = Recorder(SimpleNamespace())
        monkeypatch.setattr("llm_conductor.clients.openai.OpenAI", built)
        client = OpenAIClient("gpt-4o", configuration=configuration)

        assert client.client is client.client
        assert len(built.calls) == 1

    def test_client_is_built_once_across_threads(self, configuration, monkeypatch):
        built = []

        def slow_openai(**kwargs):
            time.sleep(0.05)
            sdk = SimpleNamespace(**kwargs)
            built.append(sdk)
            return sdk

        monkeypatch.setattr("llm_conductor.clients.openai.OpenAI", slow_openai)
        client = OpenAIClient("gpt-4o", configuration=configuration)
        barrier = threading.Barrier(8)
        seen = []

        def worker():
            barrier.wait()
            seen.append(client.client)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(built) == 1
        assert len(seen) == 8
        assert all(sdk is built[0] for sdk in seen)

    def test_openrouter_routes_by_throughput(self, configuration):
        create = Recorder(openai_completion())
        client = OpenRouterClient("meta-llama/llama-3-70b", configuration=configuration)
        client._client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))

        response = client.generate_simple({"text": "Describe", "images": IMAGE_URL})
        payload = create.calls[0][1]

        assert response.vendor == "openrouter"
        assert payload["extra_body"] == {"provider": {"sort": "throughput"}}
        assert payload["messages"][0]["content"][1]["type"] == "image_url"

    def test_groq_uses_its_endpoint(self, configuration, monkeypatch):
        built = Recorder(SimpleNamespace())
        monkeypatch.setattr("llm_conductor.clients.openai.OpenAI", built)

        GroqClient("llama-3.1-8b-instant", configuration=configuration).client

        assert built.calls[0][1]["base_url"] == "https://api.groq.com/openai/v1"
        assert built.calls[0][1]["api_key"] == "gsk-groq"


class TestAnthropicClient:
    """Tests for the Anthropic client."""

    @pytest.fixture
    def create(self):
        return Recorder(
            SimpleNamespace(
                content=[
                    SimpleNamespace(type="text", text="Two "),
                    SimpleNamespace(type="tool_use", text="ignored"),
                    SimpleNamespace(type="text", text="bars"),
                ],
                usage=SimpleNamespace(input_tokens=20, output_tokens=2),
            )
        )

    def test_request_and_response(self, configuration, create):
        client = AnthropicClient("claude-3-5-sonnet-latest", configuration=configuration, system="Terse")
        client._client = SimpleNamespace(messages=SimpleNamespace(create=create))

        response = client.generate_simple({"text": "How many bars?", "images": DATA_URL})
        request = create.calls[0][1]

        assert response.output == "Two bars"
        assert (response.input_tokens, response.output_tokens) == (4, 2)
        assert response.metadata["vendor_input_tokens"] == 20
        assert request["max_tokens"] == 4096
        assert request["system"] == "Terse"
        assert request["messages"][0]["content"] == [
            {
                "type": "image",
                "source": {"type": "base64", "media_type": "image/png", "data": "iVBORw0KGgo="},
            },
            {"type": "text", "text": "How many bars?"},
        ]

    def test_max_tokens_option(self, configuration, create):
        client = AnthropicClient("claude-3-haiku", configuration=configuration, max_tokens=100)
        client._client = SimpleNamespace(messages=SimpleNamespace(create=create))

        client.generate_simple("Hi")

        assert create.calls[0][1]["max_tokens"] == 100
        assert create.calls[0][1]["messages"][0]["content"] == "Hi"


class TestGeminiClient:
    """Tests for the Gemini client."""

    @pytest.fixture
    def service(self, monkeypatch):
        generate_content = Recorder(
            SimpleNamespace(
                candidates=[
                    SimpleNamespace(
                        content=SimpleNamespace(
                            parts=[SimpleNamespace(text="A rising "), SimpleNamespace(text="line")]
                        )
                    )
                ],
                usage_metadata=SimpleNamespace(prompt_token_count=260, candidates_token_count=4),
            )
        )
        built = Recorder(SimpleNamespace(generate_content=generate_content))
        monkeypatch.setattr(
            "llm_conductor.clients.gemini.glm", SimpleNamespace(GenerativeServiceClient=built)
        )
        return SimpleNamespace(built=built, generate_content=generate_content)

    def test_request_and_response(self, configuration, service):
        client = GeminiClient("gemini-1.5-flash", configuration=configuration, temperature=0.5)
        response = client.generate_simple({"text": "Trend?", "images": IMAGE_URL})
        kwargs = service.generate_content.calls[0][1]
        request = kwargs["request"]
        parts = request.contents[0].parts

        assert response.output == "A rising line"
        assert response.input_tokens == 2
        assert response.metadata["vendor_input_tokens"] == 260
        assert response.output_tokens == 4
        assert request.model == "models/gemini-1.5-flash"
        assert request.contents[0].role == "user"
        assert parts[0].file_data.file_uri == IMAGE_URL
        assert parts[0].file_data.mime_type == "image/png"
        assert parts[1].text == "Trend?"
        assert request.generation_config.temperature == pytest.approx(0.5)
        assert kwargs["timeout"] == 30.0

    def test_inline_images_are_decoded(self, configuration, service):
        client = GeminiClient("gemini-1.5-flash", configuration=configuration, system="Terse")
        client.generate_simple({"text": "What?", "images": DATA_URL})
        request = service.generate_content.calls[0][1]["request"]

        assert request.contents[0].parts[0].inline_data.mime_type == "image/png"
        assert request.contents[0].parts[0].inline_data.data == base64.b64decode("iVBORw0KGgo=")
        assert request.system_instruction.parts[0].text == "Terse"

    def test_each_client_has_its_own_key_and_endpoint(self, configuration, service):
        proxied = configuration.with_provider(
            "gemini", api_key="other-key", base_url="https://gemini-proxy.internal"
        )

        GeminiClient("gemini-1.5-flash", configuration=configuration).client
        GeminiClient("gemini-1.5-pro", configuration=proxied).client

        options = [kwargs["client_options"] for _, kwargs in service.built.calls]
        assert options == [
            {"api_key": "gemini-key", "api_endpoint": "https://generativelanguage.googleapis.com"},
            {"api_key": "other-key", "api_endpoint": "https://gemini-proxy.internal"},
        ]



class TestOllamaClient:
    """Tests for the Ollama client."""

    @pytest.fixture
    def chat(self):
        return Recorder({"message": {"content": "Hello!"}, "prompt_eval_count": 7, "eval_count": 2})

    def test_text_and_inline_images(self, chat):
        client = OllamaClient("llava", configuration=Configuration())
        client._client = SimpleNamespace(chat=chat)

        response = client.generate_simple({"text": "What is shown?", "images": DATA_URL})
        kwargs = chat.calls[0][1]

        assert response.success
        assert (response.input_tokens, response.output_tokens) == (4, 2)
        assert response.metadata["vendor_input_tokens"] == 7
        assert kwargs["model"] == "llava"
        assert kwargs["messages"] == [
            {"role": "user", "content": "What is shown?", "images": ["iVBORw0KGgo="]}
        ]
        assert kwargs["options"] is None

    def test_remote_image_rejected(self, chat, retry_policy):
        client = OllamaClient("llava", configuration=Configuration(), retry_policy=retry_policy)
        client._client = SimpleNamespace(chat=chat)

        response = client.generate_simple({"text": "What?", "images": IMAGE_URL})

        assert response.error["kind"] == "prompt"
        assert response.metadata["attempts"] == 1
        assert chat.calls == []

    def test_no_api_key_needed(self, monkeypatch):
        built = Recorder(SimpleNamespace())
        monkeypatch.setattr("llm_conductor.clients.ollama.ollama", SimpleNamespace(Client=built))

        OllamaClient("llama3", configuration=Configuration()).client

        assert built.calls[0][1] == {"host": "http://localhost:11434", "timeout": 30.0}

    def test_max_tokens_becomes_num_predict(self, chat):
        client = OllamaClient("llama3", configuration=Configuration(), max_tokens=64)
        client._client = SimpleNamespace(chat=chat)

        client.generate_simple("Hi")

        assert chat.calls[0][1]["options"] == {"num_predict": 64}


class TestZaiClient:
    """Tests for the Z.ai HTTP client."""

    def test_auth_headers(self, configuration):
        client = ZaiClient("glm-4.5", configuration=configuration)

        assert client.client.headers["Authorization"] == "Bearer zai-key"
        assert str(client.client.base_url) == "https://api.z.ai/api/paas/v4/"

    def test_request_and_response(self, configuration):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(
                200,
                json={
                    "choices": [{"message": {"content": "GLM says hi"}}],
                    "usage": {"prompt_tokens": 9, "completion_tokens": 3},
                },
            )

        client = ZaiClient("glm-4.5v", configuration=configuration)
        client._client = httpx.Client(
            base_url="https://api.z.ai/api/paas/v4/", transport=httpx.MockTransport(handler)
        )

        response = client.generate_simple({"text": "Describe", "images": [{"url": IMAGE_URL, "detail": "low"}]})
        body = json.loads(requests[0].content)

        assert response.output == "GLM says hi"
        assert (response.input_tokens, response.output_tokens) == (2, 3)
        assert response.metadata["vendor_input_tokens"] == 9
        assert requests[0].url == "https://api.z.ai/api/paas/v4/chat/completions"
        assert body["model"] == "glm-4.5v"
        assert body["messages"][0]["content"][1] == {
            "type": "image_url",
            "image_url": {"url": IMAGE_URL, "detail": "low"},
        }

    def test_server_errors_are_retried(self, configuration, retry_policy):
        statuses = [502, 200]

        def handler(request):
            status = statuses.pop(0)
            if status != 200:
                return httpx.Response(status, json={"error": "bad gateway"})
            return httpx.Response(200, json={"choices": [{"message": {"content": "ok"}}]})

        client = ZaiClient("glm-4.5", configuration=configuration, retry_policy=retry_policy)
        client._client = httpx.Client(
            base_url="https://api.z.ai/api/paas/v4/", transport=httpx.MockTransport(handler)
        )

        response = client.generate_simple("Hi")

        assert response.success
        assert response.metadata["attempts"] == 2
        assert response.input_tokens == 1
