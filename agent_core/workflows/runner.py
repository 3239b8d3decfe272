"""
Workflow Runner

Facade that owns the plugin registry for one run and executes a workflow
against it.
"""

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from agent_core.interfaces import PluginConfig, PluginInterface
from agent_core.logger import WorkflowLogger
from agent_core.plugin import PluginRegistry
from agent_core.workflows.definition import WorkflowDefinition
from agent_core.workflows.engine import ToolServerFactory, WorkflowEngine
from agent_core.workflows.prompt_manager import PromptManager
from agent_core.workflows.state import WorkflowExecutionResult
from config.types import RunnerSettings
from utils.agent.client import AgentClient

logger = logging.getLogger(__name__)


class Runner:
    """Registers plugins and runs workflows."""

    def __init__(
        self,
        agent_client: AgentClient,
        event_logger: Optional[WorkflowLogger] = None,
        settings: Optional[RunnerSettings] = None,
        tool_server_factory: Optional[ToolServerFactory] = None,
    ):
        self.agent_client = agent_client
        self.event_logger = event_logger or WorkflowLogger()
        self.settings = settings or RunnerSettings()
        self.tool_server_factory = tool_server_factory
        self.registry = PluginRegistry(self.event_logger)

    async def register_plugin(
        self, plugin: PluginInterface, config: Optional[Mapping[str, Any]] = None
    ) -> PluginConfig:
        """Initialize a plugin and make its tools available to workflows."""
        return await self.registry.register(plugin, config)

    def load_workflow(
        self, workflow: Union[str, Path, WorkflowDefinition]
    ) -> WorkflowDefinition:
        if isinstance(workflow, WorkflowDefinition):
            return workflow
        logger.info(f"Loading workflow from {workflow}")
        return WorkflowDefinition.from_file(workflow)

    def create_engine(self) -> WorkflowEngine:
        prompt_manager = PromptManager(
            prompt_dir=self.settings.prompt_dir,
            max_prompt_tokens=self.settings.max_prompt_tokens,
            chars_per_token=self.settings.chars_per_token,
            event_logger=self.event_logger,
        )
        return WorkflowEngine(
            registry=self.registry,
            agent_client=self.agent_client,
            event_logger=self.event_logger,
            prompt_manager=prompt_manager,
            tool_server_factory=self.tool_server_factory,
            strict_references=self.settings.strict_references,
        )

    async def run_workflow(
        self,
        workflow: Union[str, Path, WorkflowDefinition],
        trigger_payload: Any = None,
    ) -> WorkflowExecutionResult:
        """
        Load and execute a workflow.

        Args:
            workflow: Path to a workflow file or a loaded definition
            trigger_payload: Value exposed to templates as ``input``

        Returns:
            WorkflowExecutionResult with execution outcome

        Raises:
            WorkflowDefinitionError: If the workflow is malformed
            MissingToolError: If a tool step has no registered plugin
        """
        definition = self.load_workflow(workflow)
        return await self.create_engine().execute(definition, trigger_payload)
