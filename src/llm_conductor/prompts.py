"""Prompt templates for template-driven generation.

Built-in templates cover the common tasks. Custom prompt classes can be
registered with ``PromptManager`` and take precedence over built-ins.
"""

import json
import logging
import threading
from typing import Any, Callable, Mapping, Optional

from .errors import PromptError

logger = logging.getLogger(__name__)


def _first(data: Mapping[str, Any], *keys: str) -> Optional[Any]:
    for key in keys:
        if data.get(key):
            return data[key]
    return None


def _require(data: Mapping[str, Any], template: str, *keys: str) -> Any:
    value = _first(data, *keys)
    if value is None:
        raise PromptError(f"Template '{template}' requires one of: {', '.join(keys)}")
    return value


def extract_links(data: Mapping[str, Any]) -> str:
    html = _require(data, "extract_links", "html_content", "htmls")
    criteria = data.get("criteria") or "relevant and useful"
    max_links = data.get("max_links") or 10
    link_types = data.get("link_types") or ["navigation", "content", "footer"]

    lines = [
        "Analyze the provided HTML content and extract links based on the specified criteria.",
        "",
        "HTML Content:",
        str(html),
        "",
        f"Extraction Criteria: {criteria}",
        f"Maximum Links: {max_links}",
        f"Link Types to Consider: {', '.join(link_types)}",
    ]
    if data.get("domain_filter"):
        lines.append(f"Domain Filter: Only include links from domain {data['domain_filter']}")

    output_format = (
        "Format output as a JSON array of URLs"
        if data.get("format") == "json"
        else "Format output as a newline-separated list of URLs"
    )
    lines += [
        "",
        "Instructions:",
        "1. Parse the HTML content and identify all hyperlinks",
        "2. Filter links based on the provided criteria",
        f"3. Prioritize links from specified areas: {', '.join(link_types)}",
        f"4. Return up to {max_links} most relevant links",
        f"5. {output_format}",
        "",
        "Provide only the links without additional commentary.",
    ]
    return "\n".join(lines)


def analyze_content(data: Mapping[str, Any]) -> str:
    content = _require(data, "analyze_content", "content", "htmls", "text")
    content_type = data.get("content_type") or "webpage content"
    fields = data.get("fields") or ["summary", "key_points", "entities"]
    output_format = data.get("output_format") or "structured text"

    lines = [
        f"Analyze the provided {content_type} and extract the requested information.",
        "",
        "Content:",
        str(content),
        "",
        "Analysis Fields:",
        *[f"- {name}" for name in fields],
    ]
    if data.get("instructions"):
        lines += ["", "Additional Instructions:", str(data["instructions"])]

    if output_format == "json":
        example = json.dumps({name: "value or array" for name in fields}, indent=2)
        lines += ["", "Output Format: JSON with the following structure:", example]
    else:
        lines += ["", f"Output Format: {output_format}"]

    if data.get("constraints"):
        lines += ["", "Constraints:", str(data["constraints"])]

    lines += ["", "Provide a comprehensive analysis focusing on the requested fields."]
    return "\n".join(lines)


def summarize_text(data: Mapping[str, Any]) -> str:
    text = _require(data, "summarize_text", "text", "content", "description")
    max_length = data.get("max_length") or "200 words"
    style = data.get("style") or "concise and informative"
    focus_areas = data.get("focus_areas") or []

    lines = [
        "Summarize the following text content.",
        "",
        "Text:",
        str(text),
        "",
        "Summary Requirements:",
        f"- Maximum Length: {max_length}",
        f"- Style: {style}",
    ]
    if focus_areas:
        lines.append(f"- Focus Areas: {', '.join(focus_areas)}")
    if data.get("audience"):
        lines.append(f"- Target Audience: {data['audience']}")
    if data.get("include_key_points"):
        lines += ["", "Include key points and main themes."]
    if data.get("output_format") == "bullet_points":
        lines += ["", "Format as bullet points."]
    elif data.get("output_format") == "paragraph":
        lines += ["", "Format as a single paragraph."]

    lines += ["", "Provide a clear and accurate summary."]
    return "\n".join(lines)


def classify_content(data: Mapping[str, Any]) -> str:
    content = _require(data, "classify_content", "content", "text", "description")
    categories = _require(data, "classify_content", "categories")
    classification_type = data.get("classification_type") or "content"

    lines = [
        f"Classify the provided {classification_type} into the most appropriate category.",
        "",
        "Content to Classify:",
        str(content),
        "",
        "Available Categories:",
        *[f"{i}. {category}" for i, category in enumerate(categories, 1)],
    ]
    if data.get("classification_criteria"):
        lines += ["", "Classification Criteria:", str(data["classification_criteria"])]

    if data.get("include_confidence"):
        lines += ["", "Output Format: JSON with category and confidence score (0-1)"]
    else:
        lines += ["", "Output Format: Return the most appropriate category name"]

    if data.get("multiple_categories"):
        max_categories = data.get("max_categories") or 3
        lines.append(
            f"Note: Multiple categories may apply - select up to {max_categories} most relevant."
        )
    else:
        lines.append("Note: Select only the single most appropriate category.")

    lines += ["", "Provide your classification based on the content analysis."]
    return "\n".join(lines)


DEFAULT_CUSTOM_TEMPLATE = "Please analyze the following content: {content}"


def custom(data: Mapping[str, Any]) -> str:
    template = data.get("template") or DEFAULT_CUSTOM_TEMPLATE
    try:
        return template.format_map(data)
    except KeyError as e:
        raise PromptError(f"Template variable {e} is missing from data") from None
    except (IndexError, ValueError) as e:
        raise PromptError(f"Invalid custom template: {e}") from None


TEMPLATES: dict[str, Callable[[Mapping[str, Any]], str]] = {
    "extract_links": extract_links,
    "analyze_content": analyze_content,
    "summarize_text": summarize_text,
    "classify_content": classify_content,
    "custom": custom,
}


class BasePrompt:
    """Base class for registered prompt classes.

    Subclasses implement ``render`` and read their inputs from ``self.data``.

    Example:
        class CompanyPrompt(BasePrompt):
            def render(self):
                return f"Describe {self.data['name']} in one paragraph."

        PromptManager.register("company", CompanyPrompt)
    """

    def __init__(self, data: Mapping[str, Any]):
        self.data = dict(data or {})

    def render(self) -> str:
        raise NotImplementedError("Prompt classes must implement render()")

    @staticmethod
    def format_list(items, bullet: str = "-") -> str:
        if not items:
            return ""
        return "\n".join(f"{bullet} {item}" for item in items)

    @staticmethod
    def truncate_text(text, max_length: int = 1000, suffix: str = "...") -> str:
        if not text:
            return ""
        text = str(text)
        if len(text) <= max_length:
            return text
        return text[: max_length - len(suffix)] + suffix


class PromptManager:
    """Registry of custom prompt classes."""

    _registry: dict[str, type] = {}
    _lock = threading.Lock()

    @classmethod
    def register(cls, prompt_type: str, prompt_class: type) -> None:
        if not isinstance(prompt_class, type) or not issubclass(prompt_class, BasePrompt):
            raise TypeError("Prompt class must inherit from BasePrompt")
        if prompt_class.render is BasePrompt.render:
            raise TypeError("Prompt class must implement render()")
        with cls._lock:
            cls._registry[str(prompt_type)] = prompt_class
        logger.debug(f"Registered prompt type: {prompt_type}")

    @classmethod
    def unregister(cls, prompt_type: str) -> None:
        with cls._lock:
            cls._registry.pop(str(prompt_type), None)

    @classmethod
    def get(cls, prompt_type: str) -> type:
        try:
            return cls._registry[str(prompt_type)]
        except KeyError:
            raise PromptError(f"Prompt type '{prompt_type}' not found") from None

    @classmethod
    def registered(cls, prompt_type: str) -> bool:
        return str(prompt_type) in cls._registry

    @classmethod
    def types(cls) -> list[str]:
        return list(cls._registry)

    @classmethod
    def clear(cls) -> None:
        with cls._lock:
            cls._registry.clear()

    @classmethod
    def render(cls, prompt_type: str, data: Mapping[str, Any]) -> str:
        prompt = cls.get(prompt_type)(data)
        try:
            return prompt.render()
        except KeyError as e:
            raise PromptError(f"Prompt '{prompt_type}' is missing data: {e}") from None


def is_supported_type(prompt_type: Optional[str]) -> bool:
    if prompt_type is None:
        return False
    return PromptManager.registered(prompt_type) or str(prompt_type) in TEMPLATES


def render_prompt(prompt_type: str, data: Mapping[str, Any]) -> str:
    """Render the template named ``prompt_type`` against ``data``.

    Raises:
        PromptError: If the type is unknown or required data is missing
    """
    if not isinstance(data, Mapping):
        raise PromptError(f"Template data must be a mapping, got {type(data).__name__}")

    if PromptManager.registered(prompt_type):
        return PromptManager.render(prompt_type, data)

    template = TEMPLATES.get(str(prompt_type))
    if template is None:
        raise PromptError(
            f"Unsupported prompt type: {prompt_type}. "
            f"Supported types: {', '.join([*TEMPLATES, *PromptManager.types()])}"
        )
    return template(data)
