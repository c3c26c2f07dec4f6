"""
Tests for prompt templates and the prompt registry
"""

import json

import pytest

from llm_conductor.errors import PromptError
from llm_conductor.prompts import (
    TEMPLATES,
    BasePrompt,
    PromptManager,
    is_supported_type,
    render_prompt,
)


@pytest.fixture(autouse=True)
def clean_registry():
    PromptManager.clear()
    yield
    PromptManager.clear()


class CompanyPrompt(BasePrompt):
    def render(self):
        return f"Describe {self.data['name']} in one paragraph."


class TestTemplates:
    """Tests for the built-in templates."""

    def test_summarize_text(self):
        prompt = render_prompt(
            "summarize_text",
            {"text": "Body", "max_length": "50 words", "focus_areas": ["cost", "risk"]},
        )

        assert "Body" in prompt
        assert "- Maximum Length: 50 words" in prompt
        assert "- Focus Areas: cost, risk" in prompt

    def test_extract_links(self):
        prompt = render_prompt(
            "extract_links",
            {"html_content": "<a href='/a'>a</a>", "max_links": 3, "format": "json", "domain_filter": "x.com"},
        )

        assert "Return up to 3 most relevant links" in prompt
        assert "JSON array" in prompt
        assert "domain x.com" in prompt

    def test_analyze_content_json_fields(self):
        prompt = render_prompt(
            "analyze_content",
            {"content": "Page", "fields": ["title", "price"], "output_format": "json"},
        )
        assert json.dumps({"title": "value or array", "price": "value or array"}, indent=2) in prompt

    def test_classify_content(self):
        prompt = render_prompt(
            "classify_content",
            {"content": "Invoice #4", "categories": ["finance", "legal"], "include_confidence": True},
        )

        assert "1. finance\n2. legal" in prompt
        assert "confidence score" in prompt

    def test_custom_template(self):
        prompt = render_prompt("custom", {"template": "Translate to {lang}: {text}", "lang": "French", "text": "hi"})
        assert prompt == "Translate to French: hi"

    def test_custom_default_template(self):
        assert render_prompt("custom", {"content": "xyz"}) == (
            "Please analyze the following content: xyz"
        )

    def test_custom_missing_variable(self):
        with pytest.raises(PromptError, match="lang"):
            render_prompt("custom", {"template": "To {lang}"})

    @pytest.mark.parametrize("prompt_type", ["summarize_text", "analyze_content", "extract_links"])
    def test_missing_required_data(self, prompt_type):
        with pytest.raises(PromptError, match="requires"):
            render_prompt(prompt_type, {})

    def test_unknown_type(self):
        with pytest.raises(PromptError, match="Unsupported prompt type"):
            render_prompt("haiku", {})

    def test_data_must_be_mapping(self):
        with pytest.raises(PromptError):
            render_prompt("summarize_text", ["text"])

    def test_supported_types(self):
        assert set(TEMPLATES) == {
            "extract_links",
            "analyze_content",
            "summarize_text",
            "classify_content",
            "custom",
        }
        assert is_supported_type("custom")
        assert not is_supported_type(None)


class TestPromptManager:
    """Tests for registered prompt classes."""

    def test_registered_class_renders(self):
        PromptManager.register("company", CompanyPrompt)

        assert is_supported_type("company")
        assert render_prompt("company", {"name": "Acme"}) == "Describe Acme in one paragraph."

    def test_registered_class_wins_over_builtin(self):
        PromptManager.register("summarize_text", CompanyPrompt)
        assert render_prompt("summarize_text", {"name": "Acme"}).startswith("Describe Acme")

    def test_missing_data_is_prompt_error(self):
        PromptManager.register("company", CompanyPrompt)
        with pytest.raises(PromptError, match="name"):
            render_prompt("company", {})

    def test_non_mapping_data_is_prompt_error(self):
        PromptManager.register("company", CompanyPrompt)
        with pytest.raises(PromptError, match="mapping"):
            render_prompt("company", [1, 2])

    def test_rejects_non_prompt_classes(self):
        with pytest.raises(TypeError):
            PromptManager.register("bad", dict)

    def test_rejects_classes_without_render(self):
        class Empty(BasePrompt):
            pass

        with pytest.raises(TypeError, match="render"):
            PromptManager.register("empty", Empty)

    def test_unregister(self):
        PromptManager.register("company", CompanyPrompt)
        PromptManager.unregister("company")

        with pytest.raises(PromptError, match="not found"):
            PromptManager.get("company")


class TestBasePromptHelpers:
    """Tests for BasePrompt helpers."""

    def test_format_list(self):
        assert BasePrompt.format_list(["a", "b"]) == "- a\n- b"
        assert BasePrompt.format_list([]) == ""

    def test_truncate_text(self):
        assert BasePrompt.truncate_text("abcdefghij", max_length=8) == "abcde..."
        assert BasePrompt.truncate_text("short", max_length=8) == "short"
