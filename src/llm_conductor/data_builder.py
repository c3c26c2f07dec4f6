"""Builders that turn domain objects into template data.

A builder wraps one source object (an attribute-bearing object or a
mapping) and produces the ``dict`` passed as template data. The helpers
treat missing and empty values alike, so templates see a stable default
instead of ``None`` or ``""``.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Iterable, Mapping, Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    try:
        return len(value) == 0
    except TypeError:
        return False


class DataBuilder(ABC):
    """Base class for template data builders.

    Subclasses implement ``build`` using the extraction and formatting
    helpers below.

    Example:
        class ProductDataBuilder(DataBuilder):
            def build(self):
                return {
                    "name": self.safe_extract("name"),
                    "tags": self.extract_list("tags", limit=5),
                }
    """

    def __init__(self, source_object: Any):
        self.source_object = source_object

    @abstractmethod
    def build(self) -> dict:
        """Return the template data for the source object."""
        ...

    def safe_extract(self, attribute: str, default: Any = None) -> Any:
        """Read ``attribute`` from the source, falling back to ``default``.

        Mappings are read by key, other objects by attribute. Missing,
        ``None`` and empty values all yield ``default``.
        """
        source = self.source_object
        if source is None:
            return default
        if isinstance(source, Mapping):
            value = source.get(attribute)
        else:
            value = getattr(source, attribute, None)
        return default if _is_empty(value) else value

    def extract_nested_data(self, root_key: str, *path: str) -> Any:
        """Follow ``path`` through nested mappings under ``root_key``.

        Returns:
            The value found, or None if any step is missing or not a mapping
        """
        data = self.safe_extract(root_key)
        if not isinstance(data, Mapping):
            return None
        for key in path:
            if not isinstance(data, Mapping):
                return None
            data = data.get(key)
        return data

    def format_for_llm(
        self,
        value: Any,
        default: str = "N/A",
        prefix: str = "",
        suffix: str = "",
        max_length: Optional[int] = None,
    ) -> str:
        """Render ``value`` as prompt text.

        Lists and tuples are joined with ", ". Text longer than
        ``max_length`` is cut and marked with "...".
        """
        if _is_empty(value):
            return default
        if isinstance(value, (list, tuple)):
            value = ", ".join(str(item) for item in value)

        formatted = f"{prefix}{value}{suffix}"
        if max_length and len(formatted) > max_length:
            formatted = f"{formatted[:max_length]}..."
        return formatted

    def extract_list(
        self,
        attribute: str,
        separator: str = ", ",
        limit: Optional[int] = None,
        default: str = "None",
    ) -> str:
        """Join the items of a list attribute into one string."""
        items = self.safe_extract(attribute)
        if isinstance(items, (str, bytes, Mapping)) or not isinstance(items, Iterable):
            return default

        items = list(items)
        if limit is not None:
            items = items[:limit]
        return separator.join(str(item) for item in items) if items else default

    def build_summary(self, *attributes: str, separator: str = " | ", skip_empty: bool = True) -> str:
        """Combine several attributes into one line."""
        parts = []
        for attribute in attributes:
            value = self.safe_extract(attribute)
            if skip_empty and _is_empty(value):
                continue
            parts.append(self.format_for_llm(value))
        return separator.join(parts)

    def format_number(
        self,
        value: Any,
        as_currency: bool = False,
        currency: str = "$",
        precision: int = 0,
        default: str = "N/A",
    ) -> str:
        """Format a number with thousands separators.

        Args:
            value: Number or numeric string
            as_currency: Prefix the result with ``currency``
            currency: Currency symbol
            precision: Decimal places; 0 truncates to an integer
            default: Text for a missing value

        Returns:
            Formatted number, or ``value`` as text if it is not numeric
        """
        if value is None:
            return default
        try:
            number = float(value)
        except (TypeError, ValueError):
            return self.format_for_llm(value, default=default)

        formatted = f"{number:,.{precision}f}" if precision > 0 else f"{int(number):,}"
        return f"{currency}{formatted}" if as_currency else formatted


class CompanyDataBuilder(DataBuilder):
    """Company records for the ``summarize_text`` and custom templates.

    Reads ``data`` (categories, founded_on, employee_count,
    similarweb_visits) and ``statistics`` (growth figures) mappings when
    present. Fields without a value are left out.
    """

    def build(self) -> dict:
        if self.source_object is None:
            return {}

        data = self.safe_extract("data", default={})
        statistics = self.safe_extract("statistics", default={})
        fields = {
            "id": self.safe_extract("id"),
            "name": self.safe_extract("name"),
            "domain_name": self.safe_extract("domain_name"),
            "location": self.safe_extract("location"),
            "description": self.safe_extract("description"),
            "industries": self.format_for_llm(data.get("categories")),
            "founded_year": data.get("founded_on"),
            "employee_count": data.get("employee_count"),
            "global_visits": data.get("similarweb_visits"),
            "employee_growth": statistics.get("employee_counts_quarterly_growth_yoy"),
            "visit_growth": statistics.get("visits_3m_avg_growth_yoy"),
        }
        return {key: value for key, value in fields.items() if value is not None}


class WebContentDataBuilder(DataBuilder):
    """Crawled pages for the ``extract_links`` and ``analyze_content`` templates."""

    def build(self) -> dict:
        return {
            "htmls": self._html_content(),
            "current_url": self.safe_extract("current_url"),
            "domain": self._domain(),
        }

    def _html_content(self) -> str:
        content = self.safe_extract("documents") or self.safe_extract("htmls")
        if content is None:
            return ""
        if isinstance(content, (list, tuple)):
            return "\n\n".join(str(page) for page in content if page is not None)
        return str(content)

    def _domain(self) -> Optional[str]:
        url = self.safe_extract("current_url")
        if not url:
            return None
        try:
            return urlparse(str(url)).hostname
        except ValueError:
            logger.debug(f"Could not parse URL: {url}")
            return None
