"""
Tool server exposing registered plugin tools to the AI agent over MCP stdio.

The agent CLI launches this module as a subprocess. The plugins to load are
named in the ``AGENT_PLUGINS`` environment variable (a JSON list), and each
is initialized with the process environment as its configuration.
"""

import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import click
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from agent_core.exceptions import PluginConfigError
from agent_core.logger import setup_logging
from agent_core.plugin import PluginRegistry, discover_plugins
from server.tool_result_processor import error_content, process_tool_result
from utils.agent.client import ToolServerSpec

logger = logging.getLogger(__name__)

SERVER_NAME = "agent-tools"
PLUGINS_ENV = "AGENT_PLUGINS"

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def list_registry_tools(registry: PluginRegistry) -> List[Tool]:
    return [
        Tool(
            name=definition.name,
            description=definition.description,
            inputSchema=definition.inputSchema,
        )
        for definition in registry.tool_definitions()
    ]


async def call_registry_tool(
    registry: PluginRegistry, name: str, arguments: Optional[Dict[str, Any]]
) -> List[TextContent]:
    """Dispatch a tool call to the owning plugin; failures become error text."""
    logger.info(f"Tool call: {name} with arguments: {arguments}")
    try:
        registered = registry.resolve(name)
        result = await registered.plugin.handle_tool_call(
            name, dict(arguments or {}), registered.config
        )
        return process_tool_result(result)
    except Exception as e:
        logger.exception(f"Error executing tool {name}")
        return error_content(e)


def create_server(registry: PluginRegistry) -> Server:
    """Build an MCP server whose tools are the registry's tools."""
    server = Server(SERVER_NAME)

    @server.list_tools()
    async def list_tools() -> List[Tool]:
        return list_registry_tools(registry)

    @server.call_tool()
    async def call_tool_handler(name: str, arguments: Optional[Dict[str, Any]]) -> List[TextContent]:
        return await call_registry_tool(registry, name, arguments)

    return server


def parse_plugin_names(raw: Optional[str]) -> List[str]:
    """Parse the ``AGENT_PLUGINS`` value: a JSON list, or comma-separated names."""
    if not raw:
        return []
    try:
        names = json.loads(raw)
    except json.JSONDecodeError:
        names = raw.split(",")
    if isinstance(names, str):
        names = [names]
    return [str(name).strip() for name in names if str(name).strip()]


async def load_registry(
    plugin_names: List[str], config: Mapping[str, Any]
) -> PluginRegistry:
    """Initialize the named plugins; plugins that fail are logged and skipped."""
    registry = PluginRegistry()
    available = discover_plugins()
    for plugin_name in plugin_names:
        plugin_class = available.get(plugin_name)
        if plugin_class is None:
            logger.error(f"Unknown plugin: {plugin_name}")
            continue
        try:
            await registry.register(plugin_class(), config)
        except PluginConfigError as e:
            logger.error(f"Failed to initialize plugin {plugin_name}: {e}")
        except Exception as e:
            logger.exception(f"Failed to initialize plugin {plugin_name}: {e}")
    return registry


def build_tool_server_spec(registry: PluginRegistry) -> ToolServerSpec:
    """Describe how the agent should launch this server for a registry."""
    env: Dict[str, str] = {}
    for plugin_name in registry.plugin_names():
        for key, value in registry.raw_config(plugin_name).items():
            if isinstance(value, str):
                env[key] = value

    python_path = [str(PROJECT_ROOT)]
    if env.get("PYTHONPATH"):
        python_path.append(env["PYTHONPATH"])
    env["PYTHONPATH"] = os.pathsep.join(python_path)
    env[PLUGINS_ENV] = json.dumps(registry.plugin_names())

    registry.event_logger.tool_server_configured(SERVER_NAME, registry.tool_names())
    return ToolServerSpec(
        name=SERVER_NAME,
        command=sys.executable,
        args=["-m", "server.tool_server"],
        env=env,
    )


async def serve(plugin_names: List[str], config: Mapping[str, Any]) -> None:
    registry = await load_registry(plugin_names, config)
    logger.info(
        f"Serving {len(registry.tool_names())} tools from plugins {registry.plugin_names()}"
    )
    server = create_server(registry)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


@click.command()
@click.option("--log-level", default="INFO", help="Logging level")
@click.option("--log-file", default=None, help="Optional log file")
def main(log_level: str, log_file: Optional[str]) -> None:
    """Serve plugin tools over MCP stdio."""
    # stdout carries the protocol, so logs go to stderr only
    setup_logging(log_level, log_file, json_format=True)

    plugin_names = parse_plugin_names(os.environ.get(PLUGINS_ENV))
    asyncio.run(serve(plugin_names, dict(os.environ)))


if __name__ == "__main__":
    main()
