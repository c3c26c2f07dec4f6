"""Unified completions across LLM vendors (OpenAI, Anthropic, Gemini, Ollama, OpenRouter, Z.ai, Groq)."""

from .conductor import build_client, generate
from .config import Configuration, ProviderSettings, get_configuration, load_configuration
from .data_builder import CompanyDataBuilder, DataBuilder, WebContentDataBuilder
from .errors import ErrorKind, LLMConductorError, PromptError, UnsupportedVendorError
from .factory import ClientFactory
from .prompts import TEMPLATES
from .response import Response
from .vendors import DESCRIPTORS

__version__ = "0.1.0"

SUPPORTED_VENDORS = tuple(DESCRIPTORS)
SUPPORTED_PROMPT_TYPES = tuple(TEMPLATES)

__all__ = [
    "ClientFactory",
    "CompanyDataBuilder",
    "Configuration",
    "DataBuilder",
    "ErrorKind",
    "LLMConductorError",
    "PromptError",
    "ProviderSettings",
    "Response",
    "SUPPORTED_PROMPT_TYPES",
    "SUPPORTED_VENDORS",
    "UnsupportedVendorError",
    "WebContentDataBuilder",
    "build_client",
    "generate",
    "get_configuration",
    "load_configuration",
]
