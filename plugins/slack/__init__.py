"""Slack Plugin."""

from .slack_tool import SlackPlugin

__all__ = ["SlackPlugin"]
