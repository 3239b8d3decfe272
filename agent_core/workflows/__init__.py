"""
Workflow execution: definitions, interpolation, context, and the step engine.
"""

from agent_core.workflows.definition import StepDefinition, WorkflowDefinition
from agent_core.workflows.engine import WorkflowEngine
from agent_core.workflows.interpolation import (
    check_references,
    find_placeholders,
    interpolate,
    interpolate_args,
)
from agent_core.workflows.prompt_manager import PreparedPrompt, PromptManager
from agent_core.workflows.runner import Runner
from agent_core.workflows.session import SessionTracker
from agent_core.workflows.state import (
    ContextEntry,
    Raw,
    StepResult,
    StepStatus,
    Structured,
    WorkflowContext,
    WorkflowExecutionResult,
    WorkflowStatus,
    parse_tool_output,
)

__all__ = [
    "StepDefinition",
    "WorkflowDefinition",
    "WorkflowEngine",
    "check_references",
    "find_placeholders",
    "interpolate",
    "interpolate_args",
    "PreparedPrompt",
    "PromptManager",
    "Runner",
    "SessionTracker",
    "ContextEntry",
    "Raw",
    "StepResult",
    "StepStatus",
    "Structured",
    "WorkflowContext",
    "WorkflowExecutionResult",
    "WorkflowStatus",
    "parse_tool_output",
]
