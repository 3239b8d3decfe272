"""
Agent workflow runner core.

Plugin contract and registry, typed models, errors and structured run
logging. Workflow execution lives in ``agent_core.workflows``.
"""

from agent_core.exceptions import (
    AgentInvocationError,
    AgentRunnerError,
    DuplicateToolError,
    MissingToolError,
    PluginConfigError,
    StepExecutionError,
    ToolExecutionError,
    UnknownToolError,
    WorkflowDefinitionError,
)
from agent_core.interfaces import PluginBase, PluginConfig, PluginInterface
from agent_core.logger import JsonLogFormatter, WorkflowLogger, setup_logging
from agent_core.plugin import PluginRegistry, RegisteredTool, discover_plugins
from agent_core.types import AgentResult, TextContent, ToolDefinition, ToolResult

__all__ = [
    "AgentInvocationError",
    "AgentRunnerError",
    "DuplicateToolError",
    "MissingToolError",
    "PluginConfigError",
    "StepExecutionError",
    "ToolExecutionError",
    "UnknownToolError",
    "WorkflowDefinitionError",
    "PluginBase",
    "PluginConfig",
    "PluginInterface",
    "JsonLogFormatter",
    "WorkflowLogger",
    "setup_logging",
    "PluginRegistry",
    "RegisteredTool",
    "discover_plugins",
    "AgentResult",
    "TextContent",
    "ToolDefinition",
    "ToolResult",
]
