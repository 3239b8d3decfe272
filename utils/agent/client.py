"""
Agent Client Module

Boundary between the workflow engine and the AI coding agent that runs
``ai_agent`` steps.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from agent_core.types import AgentResult, ToolDefinition


@dataclass(frozen=True)
class ToolServerSpec:
    """How to launch the tool-protocol server that exposes plugin tools."""

    name: str
    command: str
    args: List[str] = field(default_factory=list)
    env: Dict[str, str] = field(default_factory=dict)

    def to_mcp_config(self) -> Dict[str, Any]:
        """Render as an ``mcpServers`` configuration document."""
        return {
            "mcpServers": {
                self.name: {
                    "command": self.command,
                    "args": list(self.args),
                    "env": dict(self.env),
                }
            }
        }


@dataclass(frozen=True)
class AgentRequest:
    """One invocation of the AI agent."""

    prompt: str
    working_directory: Path
    available_tools: List[ToolDefinition] = field(default_factory=list)
    continue_previous_session: bool = False
    tool_server: Optional[ToolServerSpec] = None


class AgentClient(ABC):
    """An asynchronous service that runs a prompt and returns the final text."""

    @abstractmethod
    async def run(self, request: AgentRequest) -> AgentResult:
        """Run the agent to completion.

        Raises:
            AgentInvocationError: If the agent does not produce a successful result
        """
        pass
