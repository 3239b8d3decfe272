"""
Workflow Context

Holds the append-only record of step outputs for one run, plus the status
and result types reported back to callers.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from agent_core.exceptions import AgentRunnerError
from agent_core.workflows.interpolation import INPUT_KEY


@dataclass(frozen=True)
class Structured:
    """Tool output that parsed as JSON."""

    value: Any


@dataclass(frozen=True)
class Raw:
    """Tool output kept as plain text."""

    text: str


ToolOutput = Union[Structured, Raw]


def parse_tool_output(text: str) -> ToolOutput:
    """Tag tool output text as structured JSON or raw text."""
    try:
        return Structured(json.loads(text))
    except (json.JSONDecodeError, TypeError, ValueError):
        return Raw(text)


def unwrap(output: Any) -> Any:
    if isinstance(output, Structured):
        return output.value
    if isinstance(output, Raw):
        return output.text
    return output


class StepStatus(str, Enum):
    """Status of a workflow step."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ContextEntry:
    """Output recorded for one executed step."""

    output: Any
    has_issues: Optional[bool] = None

    @property
    def value(self) -> Any:
        return unwrap(self.output)

    @property
    def structured(self) -> bool:
        return isinstance(self.output, Structured)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"output": self.value}
        if self.has_issues is not None:
            data["has_issues"] = self.has_issues
        return data


class WorkflowContext:
    """
    Workflow execution context.

    An append-only mapping from step id to ``ContextEntry``, optionally seeded
    with the trigger payload under ``input``.
    """

    def __init__(self, trigger_payload: Any = None):
        self.trigger_payload = trigger_payload
        self._entries: Dict[str, ContextEntry] = {}

    def record(self, step_id: str, entry: ContextEntry) -> None:
        """Add the entry for a step.

        Raises:
            AgentRunnerError: If the step id is reserved or already recorded
        """
        if step_id == INPUT_KEY:
            raise AgentRunnerError(f"'{INPUT_KEY}' is reserved for the trigger payload")
        if step_id in self._entries:
            raise AgentRunnerError(
                f"Context already has an entry for step '{step_id}'",
                {"step_id": step_id},
            )
        self._entries[step_id] = entry

    def get(self, step_id: str) -> Optional[ContextEntry]:
        return self._entries.get(step_id)

    def step_ids(self) -> List[str]:
        return list(self._entries)

    def lookup(self) -> Dict[str, Any]:
        """Plain view used for interpolation."""
        view: Dict[str, Any] = {}
        if self.trigger_payload is not None:
            view[INPUT_KEY] = self.trigger_payload
        for step_id, entry in self._entries.items():
            view[step_id] = entry.to_dict()
        return view

    def to_dict(self) -> Dict[str, Any]:
        return self.lookup()

    def __contains__(self, step_id: str) -> bool:
        return step_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class StepResult:
    """Result of a step execution."""

    step_id: str
    status: StepStatus
    output: Any = None
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "step_id": self.step_id,
            "status": self.status.value,
            "output": unwrap(self.output),
            "error": self.error,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": (
                self.completed_at.isoformat() if self.completed_at else None
            ),
        }


class WorkflowStatus(str, Enum):
    """Workflow execution status."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class WorkflowExecutionResult:
    """Result of workflow execution."""

    workflow_name: str
    execution_id: str
    status: WorkflowStatus
    context: Dict[str, Any] = field(default_factory=dict)
    step_results: Dict[str, StepResult] = field(default_factory=dict)
    failed_step: Optional[str] = None
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def succeeded(self) -> bool:
        return self.status == WorkflowStatus.COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "workflow_name": self.workflow_name,
            "execution_id": self.execution_id,
            "status": self.status.value,
            "context": self.context,
            "step_results": {
                step_id: result.to_dict()
                for step_id, result in self.step_results.items()
            },
            "failed_step": self.failed_step,
            "error": self.error,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": (
                self.completed_at.isoformat() if self.completed_at else None
            ),
        }
