"""
CLI Executor Module

Runs the AI coding agent CLI as a subprocess for ``ai_agent`` steps.
"""

import asyncio
import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from typing import List, Optional

from agent_core.exceptions import AgentInvocationError
from agent_core.logger import WorkflowLogger
from agent_core.types import AgentResult
from utils.agent.client import AgentClient, AgentRequest

logger = logging.getLogger(__name__)


@dataclass
class CLIConfig:
    """Configuration for CLI execution"""

    cli_path: str = "claude"
    """Path to the agent CLI executable"""

    model: Optional[str] = None
    """Model passed with --model (None uses the CLI default)"""

    skip_permissions: bool = True
    """Pass --dangerously-skip-permissions so tools run without prompts"""

    timeout: Optional[float] = None
    """Timeout for CLI invocations in seconds (None for no timeout)"""

    additional_cli_args: List[str] = field(default_factory=list)
    """Additional CLI arguments to pass"""


class CLIAgentClient(AgentClient):
    """Agent client backed by the agent CLI in print mode with JSON output."""

    def __init__(
        self,
        config: Optional[CLIConfig] = None,
        event_logger: Optional[WorkflowLogger] = None,
    ):
        self.config = config or CLIConfig()
        self.event_logger = event_logger or WorkflowLogger()

    def build_command(self, request: AgentRequest, mcp_config_path: Optional[str] = None) -> List[str]:
        """
        Build the CLI command for a request.

        Args:
            request: The agent request
            mcp_config_path: File holding the tool server configuration

        Returns:
            List of command arguments
        """
        cmd = [self.config.cli_path, "-p", request.prompt, "--output-format", "json"]

        if self.config.skip_permissions:
            cmd.append("--dangerously-skip-permissions")

        if request.continue_previous_session:
            cmd.append("--continue")

        if self.config.model:
            cmd.extend(["--model", self.config.model])

        if mcp_config_path:
            cmd.extend(["--mcp-config", mcp_config_path])

        cmd.extend(self.config.additional_cli_args)
        return cmd

    @staticmethod
    def parse_output(stdout: str) -> AgentResult:
        """
        Extract the final result from the CLI's JSON output.

        Raises:
            AgentInvocationError: If there is no successful final result
        """
        try:
            data = json.loads(stdout)
        except json.JSONDecodeError as e:
            raise AgentInvocationError(f"Could not parse agent output as JSON: {e}")

        # Verbose mode emits the whole message list; the result is the last entry
        if isinstance(data, list):
            results = [m for m in data if isinstance(m, dict) and m.get("type") == "result"]
            if not results:
                raise AgentInvocationError("No final result received")
            data = results[-1]

        if not isinstance(data, dict) or data.get("type", "result") != "result":
            raise AgentInvocationError("No final result received")

        subtype = data.get("subtype")
        if subtype != "success" or data.get("is_error"):
            raise AgentInvocationError(f"Agent failed with subtype: {subtype}")

        result = data.get("result")
        if not isinstance(result, str):
            raise AgentInvocationError("Agent result did not contain text")

        return AgentResult(output=result, session_id=data.get("session_id"))

    def _write_mcp_config(self, request: AgentRequest) -> Optional[str]:
        if request.tool_server is None:
            return None
        fd, path = tempfile.mkstemp(prefix="agent_mcp_", suffix=".json")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(request.tool_server.to_mcp_config(), f)
        logger.debug(
            f"Tool server {request.tool_server.name} configured in {path} "
            f"with {len(request.available_tools)} tools"
        )
        return path

    async def run(self, request: AgentRequest) -> AgentResult:
        mcp_config_path = self._write_mcp_config(request)
        try:
            cmd = self.build_command(request, mcp_config_path)
            return await self._execute(cmd, request)
        finally:
            if mcp_config_path:
                try:
                    os.unlink(mcp_config_path)
                except OSError as e:
                    logger.debug(f"Could not remove {mcp_config_path}: {e}")

    async def _execute(self, cmd: List[str], request: AgentRequest) -> AgentResult:
        logger.debug(f"Executing: {cmd[0]} -p [prompt...] {' '.join(cmd[3:])}")
        logger.debug(f"Prompt length: {len(request.prompt)} chars")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(request.working_directory),
            )
        except FileNotFoundError:
            raise AgentInvocationError(f"Agent CLI not found at: {self.config.cli_path}")

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.config.timeout
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise AgentInvocationError(
                f"Agent CLI timed out after {self.config.timeout} seconds"
            )

        response = stdout.decode("utf-8", errors="replace").strip()
        error_output = stderr.decode("utf-8", errors="replace").strip()

        for line in error_output.splitlines():
            if line.strip():
                self.event_logger.agent_stderr(line)

        if process.returncode != 0:
            raise AgentInvocationError(
                f"Agent CLI failed with exit code {process.returncode}",
                exit_code=process.returncode,
                stderr=error_output or None,
            )

        return self.parse_output(response)
