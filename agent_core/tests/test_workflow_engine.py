"""Tests for the workflow engine."""

import pytest

from agent_core.exceptions import (
    AgentInvocationError,
    MissingToolError,
    WorkflowDefinitionError,
)
from agent_core.workflows.definition import WorkflowDefinition
from agent_core.workflows.engine import WorkflowEngine
from agent_core.workflows.prompt_manager import PromptManager
from agent_core.workflows.state import StepStatus, WorkflowStatus
from utils.agent.client import ToolServerSpec

from workflow_fixtures import EchoPlugin, FakeAgentClient, event_types


def make_workflow(*steps, name="test"):
    return WorkflowDefinition.from_dict({"name": name, "steps": list(steps)})


@pytest.fixture
def engine_factory(registry, event_logger, tmp_path):
    prompt_dir = tmp_path / "prompts"
    workdir = tmp_path / "work"
    workdir.mkdir()

    def factory(agent_client=None, **kwargs):
        kwargs.setdefault("base_dir", workdir)
        return WorkflowEngine(
            registry=registry,
            agent_client=agent_client or FakeAgentClient(),
            event_logger=event_logger,
            prompt_manager=PromptManager(prompt_dir, event_logger=event_logger),
            **kwargs,
        )

    return factory


class TestToolSteps:
    """Test cases for tool step dispatch."""

    @pytest.mark.asyncio
    async def test_structured_output_is_recorded(self, registry, engine_factory):
        plugin = EchoPlugin(["git_clone"])
        await registry.register(plugin)
        workflow = make_workflow(
            {
                "id": "clone",
                "type": "tool",
                "tool": "git_clone",
                "args": {"repo_url": "https://example.com/r.git", "target_dir": "./w"},
            }
        )

        result = await engine_factory().execute(workflow)

        assert result.succeeded
        assert result.context["clone"]["output"] == {
            "repo_url": "https://example.com/r.git",
            "target_dir": "./w",
        }
        assert result.step_results["clone"].status == StepStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_raw_output_and_interpolation(self, registry, engine_factory):
        plugin = EchoPlugin(["say", "repeat"])
        await registry.register(plugin)
        workflow = make_workflow(
            {"id": "a", "type": "tool", "tool": "say", "args": {"text": "hello world"}},
            {
                "id": "b",
                "type": "tool",
                "tool": "repeat",
                "args": {"text": "{{a.output}} from {{input.user}}", "n": 2},
            },
        )

        result = await engine_factory().execute(workflow, trigger_payload={"user": "ana"})

        assert result.context["a"]["output"] == "hello world"
        assert result.context["b"]["output"] == "hello world from ana"
        assert plugin.calls[1]["args"] == {"text": "hello world from ana", "n": 2}

    @pytest.mark.asyncio
    async def test_plugin_receives_config_from_init(self, registry, engine_factory):
        plugin = EchoPlugin(["echo"])
        config = await registry.register(plugin, {"ANY": "x"})

        await engine_factory().execute(make_workflow({"id": "a", "type": "tool", "tool": "echo"}))

        assert plugin.calls[0]["config"] is config

    @pytest.mark.asyncio
    async def test_tool_events(self, registry, engine_factory, event_logger, events):
        await registry.register(EchoPlugin(["echo"]))
        await engine_factory().execute(make_workflow({"id": "a", "type": "tool", "tool": "echo"}))

        types = event_types(events)
        assert types.index("step_start") < types.index("tool_call")
        assert types.index("tool_call") < types.index("tool_result")
        assert types.index("tool_result") < types.index("step_complete")
        tool_result = next(e for e in events if e["type"] == "tool_result")
        assert tool_result["stepId"] == "a"
        assert tool_result["structured"] is True


class TestFailFast:
    """Test cases for the fail-fast policy."""

    @pytest.mark.asyncio
    async def test_failing_step_stops_the_run(self, registry, engine_factory, event_logger, events):
        plugin = EchoPlugin(["echo"])
        await registry.register(plugin)
        workflow = make_workflow(
            {"id": "a", "type": "tool", "tool": "echo", "args": {"text": "ok"}},
            {"id": "b", "type": "tool", "tool": "echo", "args": {"fail": True}},
            {"id": "c", "type": "tool", "tool": "echo", "args": {"text": "never"}},
        )

        result = await engine_factory().execute(workflow)

        assert result.status == WorkflowStatus.FAILED
        assert result.failed_step == "b"
        assert "echo failed" in result.error
        assert len(plugin.calls) == 2
        assert "c" not in result.step_results
        assert list(result.context) == ["a"]
        error_event = next(e for e in events if e["type"] == "step_error")
        assert error_event["stepId"] == "b"

    @pytest.mark.asyncio
    async def test_error_result_is_a_step_failure(self, registry, engine_factory):
        await registry.register(EchoPlugin(["echo"]))
        workflow = make_workflow(
            {"id": "a", "type": "tool", "tool": "echo", "args": {"error_result": True}}
        )

        result = await engine_factory().execute(workflow)

        assert result.failed_step == "a"
        assert "bad input" in result.error

    @pytest.mark.asyncio
    async def test_missing_tool_runs_no_step(self, registry, engine_factory):
        plugin = EchoPlugin(["echo"])
        await registry.register(plugin)
        agent = FakeAgentClient()
        workflow = make_workflow(
            {"id": "first", "type": "tool", "tool": "echo"},
            {"id": "think", "type": "ai_agent", "args": {"prompt": "p"}},
            {"id": "broken", "type": "tool", "tool": "missing_tool"},
        )

        with pytest.raises(MissingToolError):
            await engine_factory(agent).execute(workflow)

        assert plugin.calls == []
        assert agent.requests == []

    @pytest.mark.asyncio
    async def test_invalid_definition_raises_before_running(self, registry, engine_factory):
        with pytest.raises(WorkflowDefinitionError):
            await engine_factory().execute(make_workflow({"id": "a", "type": "shell"}))

    @pytest.mark.asyncio
    async def test_agent_failure_stops_the_run(self, registry, engine_factory):
        plugin = EchoPlugin(["echo"])
        await registry.register(plugin)
        agent = FakeAgentClient(outputs=[AgentInvocationError("agent crashed")])
        workflow = make_workflow(
            {"id": "think", "type": "ai_agent", "args": {"prompt": "p"}},
            {"id": "after", "type": "tool", "tool": "echo"},
        )

        result = await engine_factory(agent).execute(workflow)

        assert result.failed_step == "think"
        assert "agent crashed" in result.error
        assert plugin.calls == []


class TestConditions:
    """Test cases for step conditions."""

    @pytest.mark.asyncio
    async def test_missing_field_skips_step(self, registry, engine_factory, event_logger, events):
        plugin = EchoPlugin(["echo"])
        await registry.register(plugin)
        workflow = make_workflow(
            {"id": "A", "type": "tool", "tool": "echo", "args": {"text": "x"}},
            {"id": "B", "type": "ai_agent", "args": {"prompt": "review"}},
            {"id": "C", "type": "tool", "tool": "echo", "if": "{{B.output.has_issues}}"},
        )

        result = await engine_factory().execute(workflow)

        assert result.succeeded
        assert "C" not in result.context
        assert result.step_results["C"].status == StepStatus.SKIPPED
        assert len(plugin.calls) == 1
        assert "step_skip" in event_types(events)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "condition,runs",
        [
            ("false", False),
            ("", True),
            ("{{a.output.flag}}", False),
            ("true", True),
            ("0", True),
            ("False", True),
            ("{{a.output.name}}", True),
        ],
    )
    async def test_truthiness(self, registry, engine_factory, condition, runs):
        plugin = EchoPlugin(["echo"])
        await registry.register(plugin)
        workflow = make_workflow(
            {"id": "a", "type": "tool", "tool": "echo", "args": {"name": "n", "flag": False}},
            {"id": "b", "type": "tool", "tool": "echo", "if": condition},
        )

        result = await engine_factory().execute(workflow)

        assert ("b" in result.context) is runs

    @pytest.mark.asyncio
    async def test_has_issues_from_agent_enables_step(self, registry, engine_factory):
        await registry.register(EchoPlugin(["echo"]))
        agent = FakeAgentClient(has_issues=True)
        workflow = make_workflow(
            {"id": "B", "type": "ai_agent", "args": {"prompt": "review"}},
            {"id": "C", "type": "tool", "tool": "echo", "if": "{{B.has_issues}}"},
        )

        result = await engine_factory(agent).execute(workflow)

        assert result.context["B"]["has_issues"] is True
        assert "C" in result.context


class TestAgentSteps:
    """Test cases for AI agent dispatch."""

    @pytest.mark.asyncio
    async def test_session_continuation_sequence(self, registry, engine_factory):
        await registry.register(EchoPlugin(["echo"]))
        agent = FakeAgentClient(outputs=["one", "two", "three"])
        workflow = make_workflow(
            {"id": "a1", "type": "ai_agent", "args": {"prompt": "first"}},
            {"id": "t", "type": "tool", "tool": "echo"},
            {"id": "a2", "type": "ai_agent", "args": {"prompt": "after {{a1.output}}"}},
            {"id": "a3", "type": "ai_agent", "args": {"prompt": "last"}},
        )

        result = await engine_factory(agent).execute(workflow)

        assert [r.continue_previous_session for r in agent.requests] == [False, True, True]
        assert agent.requests[1].prompt == "after one"
        assert result.context["a3"] == {"output": "three"}

    @pytest.mark.asyncio
    async def test_null_prompt_is_sent_empty(self, registry, engine_factory):
        agent = FakeAgentClient()
        workflow = make_workflow({"id": "a", "type": "ai_agent", "args": {"prompt": None}})

        result = await engine_factory(agent).execute(workflow)

        assert result.succeeded
        assert agent.requests[0].prompt == ""

    @pytest.mark.asyncio
    async def test_working_dir_and_tools(self, registry, engine_factory, tmp_path):
        await registry.register(EchoPlugin(["echo", "other"]))
        agent = FakeAgentClient()
        workflow = make_workflow(
            {"id": "a", "type": "ai_agent", "args": {"prompt": "p", "working_dir": "repo"}},
            {"id": "b", "type": "ai_agent", "args": {"prompt": "p"}},
        )

        await engine_factory(agent).execute(workflow)

        assert agent.requests[0].working_directory == (tmp_path / "work" / "repo").resolve()
        assert agent.requests[1].working_directory == (tmp_path / "work").resolve()
        assert [t.name for t in agent.requests[0].available_tools] == ["echo", "other"]

    @pytest.mark.asyncio
    async def test_long_prompt_is_bounded(self, registry, tmp_path, event_logger, events):
        agent = FakeAgentClient()
        engine = WorkflowEngine(
            registry=registry,
            agent_client=agent,
            event_logger=event_logger,
            prompt_manager=PromptManager(
                tmp_path / "prompts", max_prompt_tokens=5, chars_per_token=4, event_logger=event_logger
            ),
            base_dir=tmp_path / "work",
        )
        workflow = make_workflow({"id": "big", "type": "ai_agent", "args": {"prompt": "z" * 50}})

        await engine.execute(workflow)

        submitted = agent.requests[0].prompt
        assert submitted.startswith("z" * 20 + "\n\n[Note:")
        prompt_event = next(e for e in events if e["type"] == "ai_agent_prompt")
        assert prompt_event["truncated"] is True
        assert prompt_event["promptLength"] == 50

    @pytest.mark.asyncio
    async def test_tool_server_built_once(self, registry, engine_factory):
        spec = ToolServerSpec(name="agent-tools", command="python")
        calls = []

        def factory(reg):
            calls.append(reg)
            return spec

        agent = FakeAgentClient()
        workflow = make_workflow(
            {"id": "a", "type": "ai_agent", "args": {"prompt": "p"}},
            {"id": "b", "type": "ai_agent", "args": {"prompt": "p"}},
        )

        await engine_factory(agent, tool_server_factory=factory).execute(workflow)

        assert len(calls) == 1
        assert all(r.tool_server is spec for r in agent.requests)


class TestReferenceCheck:
    """Test cases for the pre-run reference check."""

    @pytest.mark.asyncio
    async def test_warns_but_runs(self, registry, engine_factory, event_logger, events):
        await registry.register(EchoPlugin(["echo"]))
        workflow = make_workflow(
            {"id": "a", "type": "tool", "tool": "echo", "args": {"text": "{{typo.output}}!"}}
        )

        result = await engine_factory().execute(workflow)

        assert result.context["a"]["output"] == "!"
        warnings = [e for e in events if e["type"] == "warning"]
        assert len(warnings) == 1
        assert "typo" in warnings[0]["message"]

    @pytest.mark.asyncio
    async def test_strict_references_fail_before_running(self, registry, engine_factory):
        plugin = EchoPlugin(["echo"])
        await registry.register(plugin)
        workflow = make_workflow(
            {"id": "a", "type": "tool", "tool": "echo", "args": {"text": "{{typo.output}}"}}
        )

        with pytest.raises(WorkflowDefinitionError):
            await engine_factory(strict_references=True).execute(workflow)
        assert plugin.calls == []
