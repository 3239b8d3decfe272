"""
Agent Module

Boundary to the AI coding agent used by ``ai_agent`` workflow steps, and a
client that drives the agent CLI as a subprocess.
"""

from .client import AgentClient, AgentRequest, ToolServerSpec
from .cli_executor import CLIAgentClient, CLIConfig

__all__ = [
    "AgentClient",
    "AgentRequest",
    "ToolServerSpec",
    "CLIAgentClient",
    "CLIConfig",
]
