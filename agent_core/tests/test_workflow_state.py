"""Tests for the run context and result types."""

from datetime import datetime, UTC

import pytest

from agent_core.exceptions import AgentRunnerError
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


class TestParseToolOutput:
    """Test cases for tagging tool output."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ('{"a": 1}', Structured({"a": 1})),
            ("[1, 2]", Structured([1, 2])),
            ("42", Structured(42)),
            ("plain text", Raw("plain text")),
            ("", Raw("")),
            ("{broken", Raw("{broken")),
        ],
    )
    def test_tagging(self, text, expected):
        assert parse_tool_output(text) == expected


class TestWorkflowContext:
    """Test cases for WorkflowContext."""

    def test_starts_empty(self):
        context = WorkflowContext()
        assert context.lookup() == {}
        assert len(context) == 0

    def test_seeded_with_input(self):
        context = WorkflowContext({"issue": 1})
        assert context.lookup() == {"input": {"issue": 1}}

    def test_record_unwraps_tags_for_lookup(self):
        context = WorkflowContext()
        context.record("a", ContextEntry(Structured({"k": "v"})))
        context.record("b", ContextEntry(Raw("text")))
        context.record("c", ContextEntry("agent says", has_issues=True))

        assert context.lookup() == {
            "a": {"output": {"k": "v"}},
            "b": {"output": "text"},
            "c": {"output": "agent says", "has_issues": True},
        }
        assert context.step_ids() == ["a", "b", "c"]
        assert context.get("a").structured
        assert not context.get("b").structured

    def test_record_is_append_only(self):
        context = WorkflowContext()
        context.record("a", ContextEntry(Raw("1")))
        with pytest.raises(AgentRunnerError, match="already has an entry"):
            context.record("a", ContextEntry(Raw("2")))
        assert context.lookup()["a"]["output"] == "1"

    def test_input_key_is_reserved(self):
        with pytest.raises(AgentRunnerError, match="reserved"):
            WorkflowContext().record("input", ContextEntry(Raw("x")))


class TestResults:
    """Test cases for result serialization."""

    def test_step_result_to_dict(self):
        started = datetime(2024, 1, 1, tzinfo=UTC)
        result = StepResult("a", StepStatus.COMPLETED, Structured({"x": 1}), started_at=started)
        data = result.to_dict()
        assert data["status"] == "completed"
        assert data["output"] == {"x": 1}
        assert data["started_at"] == started.isoformat()
        assert data["completed_at"] is None

    def test_execution_result(self):
        result = WorkflowExecutionResult("wf", "id-1", WorkflowStatus.FAILED, failed_step="b")
        assert not result.succeeded
        data = result.to_dict()
        assert data["status"] == "failed"
        assert data["failed_step"] == "b"
        assert WorkflowExecutionResult("wf", "id-2", WorkflowStatus.COMPLETED).succeeded


class TestSessionTracker:
    """Test cases for agent session continuity."""

    def test_first_step_starts_fresh_then_continues(self):
        tracker = SessionTracker()
        assert tracker.is_first
        assert [tracker.next_continuation() for _ in range(3)] == [False, True, True]
        assert not tracker.is_first
