"""Configuration values and loading.

Clients receive a ``Configuration`` explicitly. The lazily loaded
process-wide configuration from ``get_configuration`` is only a fallback
for callers that do not pass one.
"""

import logging
import os
import threading
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

from dotenv import dotenv_values

from .errors import ConfigurationError
from .vendors import DESCRIPTORS

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".llm_conductor"
KEYS_FILE = CONFIG_DIR / "keys.env"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _log_level(value: Optional[str], name: str) -> Optional[str]:
    if value is None:
        return None
    level = str(value).strip().upper()
    if level not in LOG_LEVELS:
        raise ConfigurationError(f"{name} must be one of {', '.join(LOG_LEVELS)}, got: {value!r}")
    return level


@dataclass(frozen=True)
class ProviderSettings:
    """Per-vendor settings. Unset values fall back to global defaults."""

    api_key: Optional[str] = None
    base_url: Optional[str] = None
    timeout: Optional[float] = None
    default_model: Optional[str] = None
    log_level: Optional[str] = None
    organization: Optional[str] = None
    max_input_tokens: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "log_level", _log_level(self.log_level, "log_level"))


@dataclass(frozen=True)
class Configuration:
    """Read-only settings consumed by the factory and the clients."""

    default_model: str = "gpt-4o-mini"
    timeout: float = 30.0
    max_retries: int = 3
    retry_delay: float = 1.0
    max_retry_delay: float = 30.0
    log_level: str = "WARNING"
    providers: Mapping[str, ProviderSettings] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "log_level", _log_level(self.log_level, "log_level"))
        object.__setattr__(self, "providers", MappingProxyType(dict(self.providers)))

    def provider(self, vendor: str) -> ProviderSettings:
        """Settings for ``vendor`` (empty settings if none configured)."""
        return self.providers.get(vendor) or ProviderSettings()

    def timeout_for(self, vendor: str) -> float:
        return self.provider(vendor).timeout or self.timeout

    def log_level_for(self, vendor: str) -> str:
        return self.provider(vendor).log_level or self.log_level

    def with_provider(self, vendor: str, **settings) -> "Configuration":
        """Return a copy with ``settings`` merged into ``vendor``'s settings."""
        providers = dict(self.providers)
        providers[vendor] = replace(self.provider(vendor), **settings)
        return replace(self, providers=providers)


def load_keys_file(path: Optional[Path] = None) -> dict[str, str]:
    """Read a dotenv-format keys file.

    Args:
        path: File to read (default: ~/.llm_conductor/keys.env)

    Returns:
        Dict of variable names to values; empty if the file does not exist
    """
    path = Path(path) if path else KEYS_FILE

    if not path.exists():
        logger.debug(f"Keys file not found: {path}")
        return {}

    values = {key: value for key, value in dotenv_values(path).items() if value}
    logger.debug(f"Loaded {len(values)} values from {path}")
    return values


def load_configuration(
    environ: Optional[Mapping[str, str]] = None,
    keys_file: Optional[Path] = None,
) -> Configuration:
    """Build a Configuration from the keys file and environment variables.

    Resolution order for every variable:
    1. Keys file (~/.llm_conductor/keys.env)
    2. Environment variables

    Args:
        environ: Environment mapping (default: os.environ)
        keys_file: Keys file override

    Returns:
        Loaded Configuration

    Raises:
        ConfigurationError: If a numeric setting cannot be parsed
    """
    values = dict(os.environ if environ is None else environ)
    values.update(load_keys_file(keys_file))

    providers = {}
    for vendor, descriptor in DESCRIPTORS.items():
        settings = ProviderSettings(
            api_key=_first(values, descriptor.api_key_env),
            base_url=_first(values, descriptor.base_url_env),
            organization=values.get("OPENAI_ORG_ID") if vendor == "openai" else None,
        )
        if settings != ProviderSettings():
            providers[vendor] = settings

    defaults = Configuration()
    return Configuration(
        default_model=values.get("LLM_CONDUCTOR_DEFAULT_MODEL") or defaults.default_model,
        timeout=_number(values, "LLM_CONDUCTOR_TIMEOUT", float, defaults.timeout),
        max_retries=_number(values, "LLM_CONDUCTOR_MAX_RETRIES", int, defaults.max_retries),
        retry_delay=_number(values, "LLM_CONDUCTOR_RETRY_DELAY", float, defaults.retry_delay),
        max_retry_delay=_number(
            values, "LLM_CONDUCTOR_MAX_RETRY_DELAY", float, defaults.max_retry_delay
        ),
        log_level=_log_level(
            values.get("LLM_CONDUCTOR_LOG_LEVEL") or defaults.log_level, "LLM_CONDUCTOR_LOG_LEVEL"
        ),
        providers=providers,
    )


def _first(values: Mapping[str, str], names: tuple) -> Optional[str]:
    for name in names:
        if values.get(name):
            return values[name]
    return None


def _number(values: Mapping[str, str], name: str, cast, default):
    raw = values.get(name)
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got: {raw!r}") from None


_configuration: Optional[Configuration] = None
_configuration_lock = threading.Lock()
_applied_log_levels: Optional[dict[str, str]] = None


def get_configuration() -> Configuration:
    """Process-wide configuration, loaded once on first use."""
    global _configuration
    if _configuration is None:
        with _configuration_lock:
            if _configuration is None:
                _configuration = load_configuration()
    return _configuration


def reset_configuration() -> None:
    """Forget the loaded configuration so the next access reloads it."""
    global _configuration, _applied_log_levels
    with _configuration_lock:
        _configuration = None
        _applied_log_levels = None


def apply_log_levels(configuration: Configuration) -> None:
    """Set the ``llm_conductor.clients.<vendor>`` logger levels from ``configuration``.

    Vendor loggers are process-wide, so levels are only touched when a
    configuration with different levels is applied.
    """
    global _applied_log_levels
    levels = {vendor: configuration.log_level_for(vendor) for vendor in DESCRIPTORS}

    with _configuration_lock:
        if levels == _applied_log_levels:
            return
        for vendor, level in levels.items():
            logging.getLogger(f"llm_conductor.clients.{vendor}").setLevel(level)
        _applied_log_levels = levels
