"""Tool result processing utilities.

This module converts plugin tool results into the MCP content types returned
by the tool server.
"""

import json
from typing import Any, List

from mcp.types import TextContent

from agent_core.types import ToolResult


def process_tool_result(result: Any) -> List[TextContent]:
    """Process a tool execution result into MCP text content.

    Args:
        result: The result from a tool call. Can be:
            - ToolResult (each text segment becomes one TextContent; an error
              result is prefixed with ``Error:``)
            - Dictionary or list (rendered as indented JSON)
            - Any other type (converted to string)

    Returns:
        List of TextContent objects
    """
    if isinstance(result, ToolResult):
        if result.isError:
            text = result.text()
            if not text.startswith("Error:"):
                text = f"Error: {text}"
            return [TextContent(type="text", text=text)]
        return [TextContent(type="text", text=item.text) for item in result.content]
    elif isinstance(result, (dict, list)):
        return [TextContent(type="text", text=json.dumps(result, indent=2, default=str))]
    else:
        return [TextContent(type="text", text=str(result))]


def error_content(error: BaseException) -> List[TextContent]:
    return [TextContent(type="text", text=f"Error: {error}")]
