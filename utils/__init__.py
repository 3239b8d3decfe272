"""Utility modules for the agent workflow runner."""

from .agent import AgentClient, AgentRequest, CLIAgentClient, CLIConfig, ToolServerSpec

__all__ = ["AgentClient", "AgentRequest", "CLIAgentClient", "CLIConfig", "ToolServerSpec"]
