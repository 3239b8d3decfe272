"""
Workflow Engine

Executes workflow steps in declared order, dispatching each to the AI agent
or to a plugin tool, and stops the run at the first failing step.
"""

import logging
import time
import uuid
from datetime import datetime, UTC
from pathlib import Path
from typing import Any, Callable, Optional, Union

from agent_core.exceptions import (
    StepExecutionError,
    ToolExecutionError,
    WorkflowDefinitionError,
)
from agent_core.logger import WorkflowLogger
from agent_core.plugin import PluginRegistry
from agent_core.workflows.definition import StepDefinition, WorkflowDefinition
from agent_core.workflows.interpolation import (
    check_references,
    interpolate,
    interpolate_args,
    render_value,
)
from agent_core.workflows.prompt_manager import PromptManager
from agent_core.workflows.session import SessionTracker
from agent_core.workflows.state import (
    ContextEntry,
    StepResult,
    StepStatus,
    WorkflowContext,
    WorkflowExecutionResult,
    WorkflowStatus,
    parse_tool_output,
)
from utils.agent.client import AgentClient, AgentRequest, ToolServerSpec

logger = logging.getLogger(__name__)

ToolServerFactory = Callable[[PluginRegistry], Optional[ToolServerSpec]]


class WorkflowEngine:
    """
    Workflow execution engine.

    Steps run one at a time. Each executed step adds exactly one entry to the
    context; a skipped step adds none. Any error during a step ends the run.
    """

    def __init__(
        self,
        registry: PluginRegistry,
        agent_client: AgentClient,
        event_logger: Optional[WorkflowLogger] = None,
        prompt_manager: Optional[PromptManager] = None,
        tool_server_factory: Optional[ToolServerFactory] = None,
        strict_references: bool = False,
        base_dir: Optional[Union[str, Path]] = None,
    ):
        """
        Initialize workflow engine.

        Args:
            registry: Plugins registered for this run
            agent_client: Collaborator that runs ``ai_agent`` steps
            event_logger: Structured run event logger
            prompt_manager: Saves and bounds agent prompts
            tool_server_factory: Builds the tool server the agent connects to
            strict_references: Fail on placeholders that cannot resolve
            base_dir: Directory that ``working_dir`` arguments are relative to
        """
        self.registry = registry
        self.agent_client = agent_client
        self.event_logger = event_logger or registry.event_logger
        self.prompt_manager = prompt_manager or PromptManager(event_logger=self.event_logger)
        self.tool_server_factory = tool_server_factory
        self.strict_references = strict_references
        self.base_dir = Path(base_dir) if base_dir else None
        self._tool_server: Optional[ToolServerSpec] = None

    def prepare(self, workflow: WorkflowDefinition) -> None:
        """
        Check a workflow before any step runs.

        Raises:
            WorkflowDefinitionError: If the definition is malformed, or a
                placeholder cannot resolve and references are strict
            MissingToolError: If a tool step names an unregistered tool
        """
        errors = workflow.validate()
        if errors:
            raise WorkflowDefinitionError(errors)

        self.registry.validate(workflow)

        problems = check_references(workflow)
        for problem in problems:
            self.event_logger.warning(problem)
        if problems and self.strict_references:
            raise WorkflowDefinitionError(problems)

    async def execute(
        self, workflow: WorkflowDefinition, trigger_payload: Any = None
    ) -> WorkflowExecutionResult:
        """
        Execute a workflow.

        Args:
            workflow: Workflow definition
            trigger_payload: Value seeded into the context under ``input``

        Returns:
            WorkflowExecutionResult with execution outcome
        """
        self.prepare(workflow)

        context = WorkflowContext(trigger_payload)
        session = SessionTracker()
        execution_id = str(uuid.uuid4())
        result = WorkflowExecutionResult(
            workflow_name=workflow.display_name,
            execution_id=execution_id,
            status=WorkflowStatus.RUNNING,
            started_at=datetime.now(UTC),
        )

        logger.info(
            f"Starting workflow '{workflow.display_name}' with {len(workflow.steps)} steps "
            f"(execution: {execution_id})"
        )

        for step in workflow.steps:
            step_result = await self._execute_step(step, context, session)
            result.step_results[step.id] = step_result
            if step_result.status == StepStatus.FAILED:
                result.status = WorkflowStatus.FAILED
                result.failed_step = step.id
                result.error = step_result.error
                break
        else:
            result.status = WorkflowStatus.COMPLETED

        result.context = context.to_dict()
        result.completed_at = datetime.now(UTC)
        logger.info(
            f"Workflow '{workflow.display_name}' finished with status: {result.status.value}"
        )
        return result

    def should_skip(self, step: StepDefinition, context: WorkflowContext) -> bool:
        if not step.condition:
            return False
        rendered = interpolate(step.condition, context.lookup())
        return rendered == "" or rendered == "false"

    async def _execute_step(
        self, step: StepDefinition, context: WorkflowContext, session: SessionTracker
    ) -> StepResult:
        started_at = datetime.now(UTC)

        if self.should_skip(step, context):
            self.event_logger.step_skip(step.id, f"Condition not met: {step.condition}")
            return StepResult(
                step_id=step.id,
                status=StepStatus.SKIPPED,
                started_at=started_at,
                completed_at=datetime.now(UTC),
            )

        self.event_logger.step_start(step.id, step.type, step.tool)
        start = time.monotonic()
        try:
            if step.type == "ai_agent":
                entry = await self._run_ai_agent(step, context, session)
            else:
                entry = await self._run_tool(step, context)
            context.record(step.id, entry)
        except Exception as e:
            error = StepExecutionError(step.id, e)
            logger.error(f"Step '{step.id}' failed: {e}", exc_info=True)
            self.event_logger.step_error(step.id, e)
            return StepResult(
                step_id=step.id,
                status=StepStatus.FAILED,
                error=error.message,
                started_at=started_at,
                completed_at=datetime.now(UTC),
            )

        duration_ms = int((time.monotonic() - start) * 1000)
        self.event_logger.step_complete(step.id, duration_ms, entry.value)
        return StepResult(
            step_id=step.id,
            status=StepStatus.COMPLETED,
            output=entry.output,
            started_at=started_at,
            completed_at=datetime.now(UTC),
        )

    def _resolve_working_dir(self, value: Any) -> Path:
        base = self.base_dir or Path.cwd()
        if value is None or value == "":
            value = "."
        return (base / str(value)).resolve()

    def _get_tool_server(self) -> Optional[ToolServerSpec]:
        if self._tool_server is None and self.tool_server_factory is not None:
            self._tool_server = self.tool_server_factory(self.registry)
        return self._tool_server

    async def _run_ai_agent(
        self, step: StepDefinition, context: WorkflowContext, session: SessionTracker
    ) -> ContextEntry:
        args = interpolate_args(step.args, context.lookup())
        prompt = args.get("prompt")
        if prompt is None:
            prompt = ""
        elif not isinstance(prompt, str):
            prompt = render_value(prompt)
        working_dir = self._resolve_working_dir(args.get("working_dir"))

        prepared = self.prompt_manager.prepare(step.id, prompt, working_dir)

        request = AgentRequest(
            prompt=prepared.text,
            working_directory=working_dir,
            available_tools=self.registry.tool_definitions(),
            continue_previous_session=session.next_continuation(),
            tool_server=self._get_tool_server(),
        )
        agent_result = await self.agent_client.run(request)

        self.event_logger.ai_agent_response(step.id, agent_result.output)
        return ContextEntry(output=agent_result.output, has_issues=agent_result.has_issues)

    async def _run_tool(self, step: StepDefinition, context: WorkflowContext) -> ContextEntry:
        registered = self.registry.resolve(step.tool)
        args = interpolate_args(step.args, context.lookup())

        tool_call_id = uuid.uuid4().hex
        self.event_logger.tool_call(step.tool, tool_call_id, args)
        tool_result = await registered.plugin.handle_tool_call(
            step.tool, args, registered.config
        )

        text = tool_result.text()
        if tool_result.isError:
            raise ToolExecutionError(step.tool, text or "tool reported an error")

        entry = ContextEntry(output=parse_tool_output(text))
        self.event_logger.tool_result(
            step.tool,
            tool_call_id,
            result_length=len(text),
            result_preview=text,
            structured=entry.structured,
        )
        return entry
