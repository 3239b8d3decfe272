"""
Types used throughout the agent_core package.

Tool definitions and results follow the tool-protocol shapes so they can be
handed to the MCP bridge without conversion.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class TextContent(BaseModel):
    """Text content returned by a tool."""

    type: Literal["text"] = "text"
    text: str
    """The text content of the message."""

    model_config = ConfigDict(extra="allow")


class ToolDefinition(BaseModel):
    """Definition for a tool a plugin exposes."""

    name: str
    """The name of the tool, unique across all registered plugins."""
    description: str = ""
    """A human-readable description of the tool."""
    inputSchema: Dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )
    """A JSON Schema object defining the expected parameters for the tool."""

    model_config = ConfigDict(extra="allow", frozen=True)


class ToolResult(BaseModel):
    """Result of a tool call."""

    content: List[TextContent] = Field(default_factory=list)
    isError: bool = False

    model_config = ConfigDict(extra="allow")

    def text(self) -> str:
        """Join every text segment into a single string."""
        return "\n".join(item.text for item in self.content if item.type == "text")

    @classmethod
    def from_text(cls, text: str, is_error: bool = False) -> "ToolResult":
        return cls(content=[TextContent(text=text)], isError=is_error)


class AgentResult(BaseModel):
    """Final text produced by one AI agent invocation."""

    output: str
    has_issues: Optional[bool] = None
    session_id: Optional[str] = None

    model_config = ConfigDict(extra="allow")
