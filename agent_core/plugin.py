import importlib
import inspect
import logging
import pkgutil
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Type

from agent_core.exceptions import (
    AgentRunnerError,
    DuplicateToolError,
    MissingToolError,
    UnknownToolError,
)
from agent_core.interfaces import PluginConfig, PluginInterface
from agent_core.logger import WorkflowLogger
from agent_core.types import ToolDefinition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisteredTool:
    """A tool definition together with the plugin that owns it."""

    definition: ToolDefinition
    plugin: PluginInterface
    config: PluginConfig

    @property
    def plugin_name(self) -> str:
        return self.plugin.name


class PluginRegistry:
    """Registry of plugins initialized for one workflow run.

    Tool ownership is recorded in an explicit map built at registration time,
    so dispatch is a single lookup.
    """

    def __init__(self, event_logger: Optional[WorkflowLogger] = None):
        self.event_logger = event_logger or WorkflowLogger()
        self._plugins: Dict[str, PluginInterface] = {}
        self._configs: Dict[str, PluginConfig] = {}
        self._raw_configs: Dict[str, Dict[str, Any]] = {}
        self._tools: Dict[str, RegisteredTool] = {}

    async def register(
        self, plugin: PluginInterface, config: Optional[Mapping[str, Any]] = None
    ) -> PluginConfig:
        """Initialize a plugin and record its tools.

        Args:
            plugin: The plugin to register
            config: Configuration passed to the plugin's ``init``

        Returns:
            The configuration value returned by ``init``

        Raises:
            AgentRunnerError: If a plugin with the same name is registered
            DuplicateToolError: If one of its tools is already provided
        """
        config = dict(config or {})
        if plugin.name in self._plugins:
            raise AgentRunnerError(
                f"Plugin '{plugin.name}' is already registered", {"plugin": plugin.name}
            )

        plugin_config = await plugin.init(config)
        definitions = list(plugin.list_tools())

        # Nothing from this plugin is recorded unless every name is free
        seen: Dict[str, str] = {}
        for definition in definitions:
            existing = self._tools.get(definition.name)
            if existing is not None:
                raise DuplicateToolError(definition.name, existing.plugin_name, plugin.name)
            if definition.name in seen:
                raise DuplicateToolError(definition.name, plugin.name, plugin.name)
            seen[definition.name] = plugin.name

        self._plugins[plugin.name] = plugin
        self._configs[plugin.name] = plugin_config
        self._raw_configs[plugin.name] = config
        for definition in definitions:
            self._tools[definition.name] = RegisteredTool(definition, plugin, plugin_config)

        tool_names = [d.name for d in definitions]
        logger.info(f"Registered plugin {plugin.name} with tools: {tool_names}")
        self.event_logger.plugin_registered(plugin.name, tool_names)
        return plugin_config

    def validate(self, workflow) -> None:
        """Check that every tool step names a registered tool.

        Raises:
            MissingToolError: Listing every missing name and all available names
        """
        available = self.tool_names()
        missing: List[str] = []
        for step in workflow.steps:
            if step.type == "tool" and step.tool and step.tool not in self._tools:
                if step.tool not in missing:
                    missing.append(step.tool)
        if missing:
            raise MissingToolError(missing, available)
        self.event_logger.tools_validated(available)

    def resolve(self, tool_name: str) -> RegisteredTool:
        try:
            return self._tools[tool_name]
        except KeyError:
            raise UnknownToolError(tool_name) from None

    def tool_names(self) -> List[str]:
        return list(self._tools)

    def tool_definitions(self) -> List[ToolDefinition]:
        return [entry.definition for entry in self._tools.values()]

    def plugin_names(self) -> List[str]:
        return list(self._plugins)

    def get_plugin(self, plugin_name: str) -> Optional[PluginInterface]:
        return self._plugins.get(plugin_name)

    def raw_config(self, plugin_name: str) -> Dict[str, Any]:
        return dict(self._raw_configs.get(plugin_name, {}))

    def __contains__(self, tool_name: str) -> bool:
        return tool_name in self._tools

    def __len__(self) -> int:
        return len(self._plugins)


def discover_plugins(package_name: str = "plugins") -> Dict[str, Type[PluginInterface]]:
    """Find concrete plugin classes by recursively scanning a package.

    Args:
        package_name: Name of the package to scan

    Returns:
        Mapping of plugin name to plugin class
    """
    found: Dict[str, Type[PluginInterface]] = {}
    try:
        package = importlib.import_module(package_name)
    except ImportError as e:
        logger.error(f"Error importing plugin package {package_name}: {e}")
        return found

    package_path = getattr(package, "__path__", [])
    for _, module_name, is_pkg in pkgutil.walk_packages(
        package_path, prefix=f"{package_name}."
    ):
        if is_pkg or ".tests" in module_name or module_name.rsplit(".", 1)[-1].startswith("test_"):
            continue
        try:
            module = importlib.import_module(module_name)
        except Exception as e:
            logger.warning(f"Error processing module {module_name}: {e}")
            continue

        for _, obj in inspect.getmembers(module, inspect.isclass):
            if (
                obj.__module__ != module.__name__
                or not issubclass(obj, PluginInterface)
                or inspect.isabstract(obj)
            ):
                continue
            try:
                plugin_name = obj().name
            except Exception as e:
                logger.warning(f"Plugin {obj.__name__} failed to instantiate: {e}")
                continue
            if not plugin_name:
                continue
            if plugin_name in found:
                logger.warning(
                    f"Plugin name '{plugin_name}' declared by both "
                    f"{found[plugin_name].__name__} and {obj.__name__}; keeping the first"
                )
                continue
            logger.debug(f"Discovered plugin {plugin_name} ({obj.__name__})")
            found[plugin_name] = obj
    return found
