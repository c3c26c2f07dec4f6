"""Vendor clients sharing the BaseClient contract."""

from .base import BaseClient, Completion

__all__ = ["BaseClient", "Completion"]
