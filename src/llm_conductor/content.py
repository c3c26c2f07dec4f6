"""Prompt normalization into vendor content parts.

A caller prompt comes in one of three shapes (plain text, text plus images,
or already-formatted parts). ``format_content`` turns any of them into the
ordered list of content parts a vendor expects, driven entirely by that
vendor's ``VendorDescriptor``.
"""

import mimetypes
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Union
from urllib.parse import urlparse

from .errors import PromptError

ImageRef = Union[str, Mapping[str, Any]]

DETAIL_LEVELS = ("low", "high", "auto")

_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[^,]*)?;base64,(?P<data>.*)$", re.DOTALL)


@dataclass(frozen=True)
class PlainText:
    text: str


@dataclass(frozen=True)
class Structured:
    """Text instruction with one or more images."""

    text: str = ""
    images: tuple = ()


@dataclass(frozen=True)
class RawParts:
    """Vendor-shaped content parts supplied by the caller as-is."""

    parts: tuple = ()


Prompt = Union[PlainText, Structured, RawParts]


def default_text_part(text: str) -> dict:
    return {"type": "text", "text": text}


@dataclass(frozen=True)
class VendorDescriptor:
    """Formatting and connection traits of one vendor.

    The three formatting callables plus ``supports_detail`` and
    ``images_before_text`` are everything ``format_content`` needs to know
    about a vendor.
    """

    name: str
    format_image_url: Callable[[str], dict]
    format_image_hash: Callable[[str, Optional[str]], dict]
    format_text: Callable[[str], dict] = default_text_part
    supports_detail: bool = False
    images_before_text: bool = False
    base_url: Optional[str] = None
    base_url_env: tuple = ()
    auth_scheme: str = "bearer"
    api_key_env: tuple = ()
    requires_api_key: bool = True
    default_model: Optional[str] = None
    part_keys: frozenset = field(default_factory=lambda: frozenset({"type"}))

    def auth_headers(self, api_key: Optional[str]) -> dict:
        """HTTP headers carrying ``api_key`` in this vendor's auth scheme."""
        if not api_key or self.auth_scheme == "none":
            return {}
        if self.auth_scheme == "bearer":
            return {"Authorization": f"Bearer {api_key}"}
        return {self.auth_scheme: api_key}


def to_prompt(value: Any) -> Prompt:
    """Coerce caller input into one of the three prompt shapes.

    Args:
        value: A string, a ``{"text", "images"}`` mapping, a sequence of
            content-part mappings, or an already-typed prompt

    Returns:
        PlainText, Structured or RawParts

    Raises:
        PromptError: If the value matches no shape or is ambiguous
    """
    if isinstance(value, (PlainText, Structured, RawParts)):
        return value

    if isinstance(value, str):
        if not value.strip():
            raise PromptError("Prompt cannot be empty")
        return PlainText(value)

    if isinstance(value, Mapping):
        unknown = set(value) - {"text", "images"}
        if unknown:
            raise PromptError(
                f"Structured prompt only accepts 'text' and 'images', got: {sorted(unknown)}"
            )
        text = value.get("text") or ""
        if not isinstance(text, str):
            raise PromptError("Structured prompt 'text' must be a string")
        images = value.get("images") or ()
        if isinstance(images, (str, Mapping)):
            images = (images,)
        elif not isinstance(images, Iterable):
            raise PromptError(
                f"Structured prompt 'images' must be a URL, a mapping or a list, got {type(images).__name__}"
            )
        images = tuple(images)
        if not text.strip() and not images:
            raise PromptError("Structured prompt needs text or at least one image")
        return Structured(text=text, images=images)

    if isinstance(value, (list, tuple)):
        if not value:
            raise PromptError("Content part list cannot be empty")
        if not all(isinstance(part, Mapping) for part in value):
            raise PromptError("Every content part must be a mapping")
        return RawParts(tuple(value))

    raise PromptError(f"Unsupported prompt type: {type(value).__name__}")


def format_content(prompt: Any, descriptor: VendorDescriptor) -> list[dict]:
    """Normalize a prompt into the vendor's ordered content parts.

    Args:
        prompt: Caller prompt in any accepted shape
        descriptor: Vendor whose wire shapes and ordering apply

    Returns:
        List of content parts, ready for the vendor's payload envelope
    """
    prompt = to_prompt(prompt)

    if isinstance(prompt, PlainText):
        return [descriptor.format_text(prompt.text)]

    if isinstance(prompt, RawParts):
        for index, part in enumerate(prompt.parts):
            if not descriptor.part_keys & set(part):
                raise PromptError(
                    f"Content part {index} is not a {descriptor.name} content part: {dict(part)}"
                )
        return list(prompt.parts)

    text_parts = [descriptor.format_text(prompt.text)] if prompt.text.strip() else []
    image_parts = [format_image(image, descriptor) for image in prompt.images]

    if descriptor.images_before_text:
        return image_parts + text_parts
    return text_parts + image_parts


def format_image(image: ImageRef, descriptor: VendorDescriptor) -> dict:
    """Format a single image reference for ``descriptor``."""
    if isinstance(image, str):
        if not image:
            raise PromptError("Image URL cannot be empty")
        return descriptor.format_image_url(image)

    if isinstance(image, Mapping):
        url = image.get("url")
        if not url:
            raise PromptError(f"Image mapping requires a 'url': {dict(image)}")
        detail = image.get("detail") if descriptor.supports_detail else None
        if detail is not None and detail not in DETAIL_LEVELS:
            raise PromptError(f"Image detail must be one of {DETAIL_LEVELS}, got: {detail!r}")
        return descriptor.format_image_hash(url, detail)

    raise PromptError(f"Unsupported image reference: {type(image).__name__}")


def extract_text(parts: Sequence[Mapping]) -> str:
    """Join the text of all text parts in sequence order."""
    return " ".join(part.get("text") or "" for part in parts if is_text_part(part))


def is_text_part(part: Mapping) -> bool:
    """Whether ``part`` is a text part (typed, or a bare ``{"text": ...}``)."""
    if part.get("type") == "text":
        return True
    return "type" not in part and set(part) == {"text"}


def parse_data_url(url: str) -> Optional[tuple[str, str]]:
    """Split a base64 ``data:`` URL into (media_type, payload).

    Returns:
        Tuple of media type and base64 payload, or None for other URLs
    """
    match = _DATA_URL.match(url)
    if not match:
        return None
    return match.group("mime") or "image/jpeg", match.group("data")


def guess_media_type(url: str) -> str:
    """Guess an image media type from a URL path (defaults to image/jpeg)."""
    media_type, _ = mimetypes.guess_type(urlparse(url).path)
    if media_type and media_type.startswith("image/"):
        return media_type
    return "image/jpeg"
