"""Vendor descriptor registry.

One ``VendorDescriptor`` per supported vendor. Content formatting, auth
headers, default endpoints and API key lookup all read from this table.
"""

from typing import Optional

from .content import VendorDescriptor, guess_media_type, parse_data_url
from .errors import UnsupportedVendorError


# OpenAI-style image parts (OpenAI, OpenRouter, Z.ai, Groq)

def openai_image_url(url: str) -> dict:
    return {"type": "image_url", "image_url": {"url": url}}


def openai_image_hash(url: str, detail: Optional[str] = None) -> dict:
    image_url = {"url": url}
    if detail:
        image_url["detail"] = detail
    return {"type": "image_url", "image_url": image_url}


# Anthropic: URL source, or base64 source for inline data URLs

def anthropic_image_url(url: str) -> dict:
    inline = parse_data_url(url)
    if inline:
        media_type, data = inline
        return {
            "type": "image",
            "source": {"type": "base64", "media_type": media_type, "data": data},
        }
    return {"type": "image", "source": {"type": "url", "url": url}}


def anthropic_image_hash(url: str, detail: Optional[str] = None) -> dict:
    return anthropic_image_url(url)


# Gemini: bare text parts, file_data for remote URLs, inline_data otherwise

def gemini_text(text: str) -> dict:
    return {"text": text}


def gemini_image_url(url: str) -> dict:
    inline = parse_data_url(url)
    if inline:
        media_type, data = inline
        return {"inline_data": {"mime_type": media_type, "data": data}}
    return {"file_data": {"mime_type": guess_media_type(url), "file_uri": url}}


def gemini_image_hash(url: str, detail: Optional[str] = None) -> dict:
    return gemini_image_url(url)


# Ollama: images travel beside the text, the envelope unpacks these parts

def ollama_image_url(url: str) -> dict:
    return {"type": "image", "url": url}


def ollama_image_hash(url: str, detail: Optional[str] = None) -> dict:
    return ollama_image_url(url)


DESCRIPTORS = {
    "openai": VendorDescriptor(
        name="openai",
        format_image_url=openai_image_url,
        format_image_hash=openai_image_hash,
        supports_detail=True,
        base_url="https://api.openai.com/v1",
        base_url_env=("OPENAI_BASE_URL",),
        api_key_env=("OPENAI_API_KEY",),
        default_model="gpt-4o-mini",
    ),
    "anthropic": VendorDescriptor(
        name="anthropic",
        format_image_url=anthropic_image_url,
        format_image_hash=anthropic_image_hash,
        images_before_text=True,
        base_url="https://api.anthropic.com",
        base_url_env=("ANTHROPIC_BASE_URL",),
        auth_scheme="x-api-key",
        api_key_env=("ANTHROPIC_API_KEY",),
        default_model="claude-3-5-sonnet-latest",
    ),
    "gemini": VendorDescriptor(
        name="gemini",
        format_image_url=gemini_image_url,
        format_image_hash=gemini_image_hash,
        format_text=gemini_text,
        images_before_text=True,
        base_url="https://generativelanguage.googleapis.com",
        auth_scheme="x-goog-api-key",
        api_key_env=("GEMINI_API_KEY", "GOOGLE_API_KEY"),
        default_model="gemini-1.5-flash",
        part_keys=frozenset({"text", "inline_data", "file_data"}),
    ),
    "ollama": VendorDescriptor(
        name="ollama",
        format_image_url=ollama_image_url,
        format_image_hash=ollama_image_hash,
        base_url="http://localhost:11434",
        base_url_env=("OLLAMA_ADDRESS", "OLLAMA_HOST"),
        auth_scheme="none",
        requires_api_key=False,
        default_model="llama3",
    ),
    "openrouter": VendorDescriptor(
        name="openrouter",
        format_image_url=openai_image_url,
        format_image_hash=openai_image_hash,
        supports_detail=True,
        base_url="https://openrouter.ai/api/v1",
        base_url_env=("OPENROUTER_BASE_URL",),
        api_key_env=("OPENROUTER_API_KEY",),
        default_model="openai/gpt-4o-mini",
    ),
    "zai": VendorDescriptor(
        name="zai",
        format_image_url=openai_image_url,
        format_image_hash=openai_image_hash,
        supports_detail=True,
        base_url="https://api.z.ai/api/paas/v4",
        base_url_env=("ZAI_BASE_URL",),
        api_key_env=("ZAI_API_KEY",),
        default_model="glm-4.5",
    ),
    "groq": VendorDescriptor(
        name="groq",
        format_image_url=openai_image_url,
        format_image_hash=openai_image_hash,
        base_url="https://api.groq.com/openai/v1",
        base_url_env=("GROQ_BASE_URL",),
        api_key_env=("GROQ_API_KEY",),
        default_model="llama-3.1-8b-instant",
    ),
}


def get_descriptor(vendor: str) -> VendorDescriptor:
    """Look up the descriptor for a canonical vendor name.

    Raises:
        UnsupportedVendorError: If the vendor has no descriptor
    """
    try:
        return DESCRIPTORS[vendor]
    except KeyError:
        raise UnsupportedVendorError(
            f"Unsupported vendor: {vendor}. Supported vendors: {', '.join(DESCRIPTORS)}"
        ) from None
