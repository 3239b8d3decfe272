"""Interfaces for workflow plugins.

This module defines the contract a plugin must implement to provide tools
to a workflow run, plus a small base class that covers the common cases.
"""

import json
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Sequence

from agent_core.exceptions import PluginConfigError
from agent_core.types import ToolDefinition, ToolResult

PluginConfig = Mapping[str, Any]
"""Immutable configuration value returned by ``PluginInterface.init``."""


class PluginInterface(ABC):
    """Base interface for all plugins."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the plugin name."""
        pass

    @abstractmethod
    async def init(self, config: Mapping[str, Any]) -> PluginConfig:
        """Validate configuration and return the plugin's resolved config.

        The returned value is passed back unchanged to every
        ``handle_tool_call``; plugins must not keep it on ``self``.

        Args:
            config: Mapping of named secrets and settings

        Returns:
            Immutable configuration for subsequent tool calls

        Raises:
            PluginConfigError: If required configuration is absent
        """
        pass

    @abstractmethod
    def list_tools(self) -> List[ToolDefinition]:
        """Get the tools this plugin provides."""
        pass

    @abstractmethod
    async def handle_tool_call(
        self, name: str, args: Dict[str, Any], config: PluginConfig
    ) -> ToolResult:
        """Execute one of this plugin's tools.

        Args:
            name: Tool name, one of ``list_tools()``
            args: Interpolated step arguments
            config: Value returned by ``init``

        Returns:
            Tool result with text content
        """
        pass


class PluginBase(PluginInterface):
    """Convenience base for plugins.

    Subclasses set ``plugin_name``, list their ``required_config_keys`` and
    implement one ``tool_<name>(args, config)`` coroutine per tool.
    """

    plugin_name: str = ""
    required_config_keys: Sequence[str] = ()

    @property
    def name(self) -> str:
        return self.plugin_name

    async def init(self, config: Mapping[str, Any]) -> PluginConfig:
        missing = [key for key in self.required_config_keys if not config.get(key)]
        if missing:
            raise PluginConfigError(self.name, missing)
        return MappingProxyType(
            {key: config[key] for key in self.required_config_keys}
        )

    async def handle_tool_call(
        self, name: str, args: Dict[str, Any], config: PluginConfig
    ) -> ToolResult:
        handler = getattr(self, f"tool_{name}", None)
        if handler is None or name not in {tool.name for tool in self.list_tools()}:
            raise ValueError(f"Unknown tool for plugin {self.name}: {name}")
        return await handler(args, config)

    @staticmethod
    def json_result(value: Any) -> ToolResult:
        """Wrap a JSON-serializable value as a single text result."""
        return ToolResult.from_text(json.dumps(value, indent=2))

    @staticmethod
    def text_result(text: str) -> ToolResult:
        return ToolResult.from_text(text)

    @staticmethod
    def require_args(args: Dict[str, Any], *names: str) -> None:
        missing = [n for n in names if args.get(n) in (None, "")]
        if missing:
            raise ValueError(f"Missing required argument(s): {', '.join(missing)}")
