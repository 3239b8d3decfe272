"""Sentry Plugin."""

from .sentry_tool import SentryPlugin

__all__ = ["SentryPlugin"]
