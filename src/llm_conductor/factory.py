"""Vendor resolution and client construction."""

import importlib
import logging
import re
from typing import Any, Optional

from .clients.base import BaseClient
from .config import Configuration, get_configuration
from .errors import UnsupportedVendorError

logger = logging.getLogger(__name__)


class ClientFactory:
    """Resolves a vendor from an explicit name or the model name, then builds its client."""

    # Ordered model patterns -> vendor; first match wins, so specific patterns go first
    MODEL_PATTERNS = [
        (re.compile(r"/"), "openrouter"),  # e.g. "meta-llama/llama-3-70b", "anthropic/claude-3"
        (re.compile(r"claude", re.IGNORECASE), "anthropic"),
        (re.compile(r"^(ft:)?((chat)?gpt|o\d)", re.IGNORECASE), "openai"),  # fine-tunes: "ft:gpt-4o-mini:org::id"
        (re.compile(r"gemini", re.IGNORECASE), "gemini"),
        (re.compile(r"glm", re.IGNORECASE), "zai"),
    ]

    # Local inference is the catch-all
    FALLBACK_VENDOR = "ollama"

    VENDOR_ALIASES = {
        "claude": "anthropic",
        "gpt": "openai",
        "google": "gemini",
        "z.ai": "zai",
        "glm": "zai",
    }

    # Vendor -> client class path (imported lazily so unused SDKs are never loaded)
    CLIENTS = {
        "openai": "llm_conductor.clients.openai.OpenAIClient",
        "anthropic": "llm_conductor.clients.anthropic.AnthropicClient",
        "gemini": "llm_conductor.clients.gemini.GeminiClient",
        "ollama": "llm_conductor.clients.ollama.OllamaClient",
        "openrouter": "llm_conductor.clients.openai.OpenRouterClient",
        "zai": "llm_conductor.clients.zai.ZaiClient",
        "groq": "llm_conductor.clients.openai.GroqClient",
    }

    @classmethod
    def build(
        cls,
        model: str,
        type: Optional[str] = None,
        vendor: Optional[str] = None,
        configuration: Optional[Configuration] = None,
        **options: Any,
    ) -> BaseClient:
        """Build a fresh client for ``model``.

        Args:
            model: Model identifier
            type: Prompt template type for template-driven generation
            vendor: Explicit vendor (skips model pattern matching)
            configuration: Settings passed through to the client
            **options: Vendor passthrough options

        Returns:
            Configured client instance

        Raises:
            UnsupportedVendorError: If the vendor is not supported
        """
        vendor_name = cls.determine_vendor(model, vendor)
        client_cls = cls.client_class(vendor_name)

        logger.debug(f"Building {client_cls.__name__}: vendor={vendor_name}, model={model}")
        return client_cls(
            model=model,
            type=type,
            configuration=configuration or get_configuration(),
            **options,
        )

    @classmethod
    def determine_vendor(cls, model: Optional[str], vendor: Optional[str] = None) -> str:
        """Resolve the canonical vendor name.

        An explicit vendor is used verbatim (case-insensitive, aliases
        allowed). Otherwise the model name is matched against
        ``MODEL_PATTERNS`` in order, falling back to Ollama.

        Raises:
            UnsupportedVendorError: If an explicit vendor is not supported
        """
        if vendor:
            name = str(vendor).strip().lower()
            name = cls.VENDOR_ALIASES.get(name, name)
            if name not in cls.CLIENTS:
                raise UnsupportedVendorError(
                    f"Unsupported vendor: {vendor}. "
                    f"Supported vendors: {', '.join(cls.CLIENTS)}"
                )
            return name

        model_name = str(model or "")
        for pattern, vendor_name in cls.MODEL_PATTERNS:
            if pattern.search(model_name):
                return vendor_name

        return cls.FALLBACK_VENDOR

    @classmethod
    def client_class(cls, vendor: str) -> type:
        try:
            class_path = cls.CLIENTS[vendor]
        except KeyError:
            raise UnsupportedVendorError(f"Unsupported vendor: {vendor}") from None

        module_path, class_name = class_path.rsplit(".", 1)
        module = importlib.import_module(module_path)
        return getattr(module, class_name)

    @classmethod
    def register_client(cls, vendor: str, class_path: str) -> None:
        """Register a custom client class for ``vendor``.

        The vendor also needs an entry in ``vendors.DESCRIPTORS``.
        """
        cls.CLIENTS[vendor.lower()] = class_path
        logger.info(f"Registered client: {vendor} -> {class_path}")
