"""Custom exceptions for the agent workflow runner."""

from typing import Any, Dict, List, Optional, Sequence


class AgentRunnerError(Exception):
    """Base exception for all runner errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class PluginConfigError(AgentRunnerError):
    """Raised by a plugin's init when required configuration is missing."""

    def __init__(self, plugin_name: str, missing_keys: Sequence[str]):
        message = (
            f"Plugin '{plugin_name}' requires configuration: {', '.join(missing_keys)}"
        )
        super().__init__(message, {"plugin": plugin_name, "missing": list(missing_keys)})
        self.plugin_name = plugin_name
        self.missing_keys = list(missing_keys)


class DuplicateToolError(AgentRunnerError):
    """Raised when two plugins declare the same tool name."""

    def __init__(self, tool_name: str, existing_plugin: str, new_plugin: str):
        message = (
            f'Duplicate tool name detected: "{tool_name}" is provided by both '
            f'"{existing_plugin}" and "{new_plugin}" plugins'
        )
        super().__init__(
            message,
            {"tool": tool_name, "existing_plugin": existing_plugin, "new_plugin": new_plugin},
        )
        self.tool_name = tool_name
        self.existing_plugin = existing_plugin
        self.new_plugin = new_plugin


class MissingToolError(AgentRunnerError):
    """Raised when a workflow references tools no registered plugin provides."""

    def __init__(self, missing: Sequence[str], available: Sequence[str]):
        message = (
            f"Workflow references tools that are not available: {', '.join(missing)}\n"
            f"Available tools: {', '.join(available) if available else 'None'}\n"
            f"Make sure the required plugins are registered"
        )
        super().__init__(message, {"missing": list(missing), "available": list(available)})
        self.missing: List[str] = list(missing)
        self.available: List[str] = list(available)


class UnknownToolError(AgentRunnerError):
    """Raised when no registered plugin owns a tool name."""

    def __init__(self, tool_name: str):
        super().__init__(f"Plugin for tool {tool_name} not found", {"tool": tool_name})
        self.tool_name = tool_name


class WorkflowDefinitionError(AgentRunnerError):
    """Raised when a workflow file or step list is malformed."""

    def __init__(self, errors: Sequence[str]):
        errors = list(errors)
        super().__init__(f"Invalid workflow: {'; '.join(errors)}", {"errors": errors})
        self.errors = errors


class AgentInvocationError(AgentRunnerError):
    """Raised when the AI agent collaborator fails."""

    def __init__(
        self,
        message: str,
        exit_code: Optional[int] = None,
        stderr: Optional[str] = None,
    ):
        super().__init__(message, {"exit_code": exit_code, "stderr": stderr})
        self.exit_code = exit_code
        self.stderr = stderr


class ToolExecutionError(AgentRunnerError):
    """Raised when a tool reports an error result."""

    def __init__(self, tool_name: str, message: str):
        super().__init__(f"Tool {tool_name} failed: {message}", {"tool": tool_name})
        self.tool_name = tool_name


class StepExecutionError(AgentRunnerError):
    """Raised when a workflow step fails during dispatch."""

    def __init__(self, step_id: str, cause: BaseException):
        super().__init__(
            f"Step '{step_id}' failed: {cause}",
            {"step_id": step_id, "error_type": type(cause).__name__},
        )
        self.step_id = step_id
        self.cause = cause
