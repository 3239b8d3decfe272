"""Command-line entry point for running a workflow."""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
from pydantic import ValidationError

from agent_core.exceptions import AgentRunnerError
from agent_core.logger import WorkflowLogger, setup_logging
from agent_core.plugin import discover_plugins
from agent_core.workflows.runner import Runner
from config.manager import EnvironmentManager
from config.types import RunnerSettings
from server.tool_server import build_tool_server_spec
from utils.agent.cli_executor import CLIAgentClient, CLIConfig
from utils.agent.client import AgentClient

logger = logging.getLogger(__name__)


def parse_payload(raw: Optional[str]) -> Any:
    """Parse a trigger payload given inline or as ``@path``.

    JSON is decoded; anything else is kept as a string.
    """
    if raw is None or raw == "":
        return None
    if raw.startswith("@"):
        raw = Path(raw[1:]).read_text(encoding="utf-8")
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def create_agent_client(settings: RunnerSettings, event_logger: WorkflowLogger) -> AgentClient:
    config = CLIConfig(
        cli_path=settings.agent_cli_path,
        model=settings.agent_model,
        timeout=settings.agent_timeout,
    )
    return CLIAgentClient(config, event_logger)


async def run_workflow_command(
    settings: RunnerSettings,
    workflow_path: str,
    plugin_names: List[str],
    credentials: Dict[str, str],
    trigger_payload: Any = None,
) -> int:
    """Register plugins, run the workflow, and return the process exit code."""
    event_logger = WorkflowLogger()
    runner = Runner(
        agent_client=create_agent_client(settings, event_logger),
        event_logger=event_logger,
        settings=settings,
        tool_server_factory=build_tool_server_spec,
    )

    try:
        available = discover_plugins()
        unknown = [name for name in plugin_names if name not in available]
        if unknown:
            raise AgentRunnerError(
                f"Unknown plugin(s): {', '.join(unknown)}. "
                f"Available plugins: {', '.join(sorted(available)) or 'None'}"
            )
        for name in plugin_names:
            await runner.register_plugin(available[name](), credentials)

        result = await runner.run_workflow(workflow_path, trigger_payload)
    except (AgentRunnerError, FileNotFoundError) as e:
        event_logger.error(str(e))
        return 1

    if not result.succeeded:
        event_logger.error(
            f"Workflow failed at step '{result.failed_step}'", error=result.error
        )
        return 1

    event_logger.info(
        f"Workflow '{result.workflow_name}' completed",
        steps=len(result.step_results),
    )
    return 0


@click.command()
@click.argument("workflow", required=False)
@click.option(
    "--plugin", "-p", "plugins", multiple=True, help="Plugin to register (repeatable)"
)
@click.option("--payload", default=None, help="Trigger payload as JSON, or @file")
@click.option("--log-level", default=None, help="Logging level")
@click.option("--log-file", default=None, help="Also write logs to this file")
@click.option(
    "--strict-references/--no-strict-references",
    default=None,
    help="Fail before running when a placeholder cannot resolve",
)
@click.option("--list-plugins", is_flag=True, help="List available plugins and exit")
def main(
    workflow: Optional[str],
    plugins: List[str],
    payload: Optional[str],
    log_level: Optional[str],
    log_file: Optional[str],
    strict_references: Optional[bool],
    list_plugins: bool,
) -> None:
    """Run the workflow file WORKFLOW (default: workflow.json)."""
    env = EnvironmentManager().load()
    env.update_settings(
        {
            "workflow_path": workflow,
            "log_level": log_level,
            "log_file": log_file,
            "strict_references": strict_references,
        }
    )
    try:
        settings = env.get_runner_settings()
    except ValidationError as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(1)

    setup_logging(settings.log_level, settings.log_file, settings.log_json)

    if list_plugins:
        for name, plugin_class in sorted(discover_plugins().items()):
            click.echo(f"{name}\t{plugin_class.__name__}")
        return

    try:
        trigger_payload = parse_payload(payload or env.get_trigger_payload_raw())
    except OSError as e:
        click.echo(f"Could not read payload: {e}", err=True)
        sys.exit(1)

    plugin_names = list(plugins) or list(settings.enabled_plugins)
    exit_code = asyncio.run(
        run_workflow_command(
            settings,
            settings.workflow_path,
            plugin_names,
            env.get_credentials(),
            trigger_payload,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
