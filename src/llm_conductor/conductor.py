"""Caller-facing entry points."""

import logging
from typing import Any, Optional

from .clients.base import BaseClient
from .config import Configuration, get_configuration
from .factory import ClientFactory
from .response import Response
from .vendors import DESCRIPTORS

logger = logging.getLogger(__name__)


def build_client(
    model: str,
    type: Optional[str] = None,
    vendor: Optional[str] = None,
    configuration: Optional[Configuration] = None,
    **options: Any,
) -> BaseClient:
    """Build a client for ``model``, inferring the vendor when not given.

    Examples:
        client = build_client("gpt-4o-mini", type="summarize_text")
        client = build_client("llama3", vendor="ollama")
        response = client.generate({"text": "..."})
    """
    return ClientFactory.build(
        model=model,
        type=type,
        vendor=vendor,
        configuration=configuration,
        **options,
    )


def generate(
    model: Optional[str] = None,
    prompt: Any = None,
    data: Any = None,
    type: Optional[str] = None,
    vendor: Optional[str] = None,
    configuration: Optional[Configuration] = None,
    **options: Any,
) -> Response:
    """Generate a completion from a direct prompt or a prompt template.

    Supply exactly one of:
      - ``prompt``: text, ``{"text": ..., "images": ...}``, or content parts
      - ``data`` and ``type``: template data and template type

    Args:
        model: Model identifier; defaults to the vendor's configured default
            model, then the global default (prompt path only)
        prompt: Direct prompt
        data: Template data
        type: Template type (extract_links, analyze_content, ...)
        vendor: Explicit vendor (inferred from the model otherwise)
        configuration: Settings (default: process-wide configuration)
        **options: Vendor passthrough options

    Returns:
        Response; failed calls have ``success`` false and ``metadata["error"]``

    Raises:
        ValueError: If the argument combination is invalid
        UnsupportedVendorError: If the vendor is not supported
    """
    has_prompt = prompt is not None
    has_template = data is not None or type is not None

    if has_prompt and has_template:
        raise ValueError("Pass either prompt or data and type, not both")
    if not has_prompt and (data is None or type is None):
        raise ValueError(
            "Invalid arguments. Use either generate(prompt='text') "
            "or generate(type='custom', data={...})"
        )

    configuration = configuration or get_configuration()

    if has_prompt:
        model = model or _default_model(vendor, configuration)
        client = build_client(model, type="direct", vendor=vendor, configuration=configuration, **options)
        logger.info(f"Generating with {client.vendor}:{client.model} (direct prompt)")
        return client.generate_simple(prompt)

    if not model:
        raise ValueError("model is required for template-based generation")
    client = build_client(model, type=type, vendor=vendor, configuration=configuration, **options)
    logger.info(f"Generating with {client.vendor}:{client.model} (template {type})")
    return client.generate(data)


def _default_model(vendor: Optional[str], configuration: Configuration) -> str:
    if vendor:
        name = ClientFactory.determine_vendor(None, vendor)
        descriptor = DESCRIPTORS.get(name)
        return (
            configuration.provider(name).default_model
            or (descriptor.default_model if descriptor else None)
            or configuration.default_model
        )
    return configuration.default_model
