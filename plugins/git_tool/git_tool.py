"""Git plugin.

Provides repository cloning for workflows. Authentication is the caller's
concern: credentials can be embedded in the URL or come from the
environment's git configuration.
"""

import asyncio
import logging
import shutil
from pathlib import Path
from typing import Any, Dict, List

import git

from agent_core.interfaces import PluginBase, PluginConfig
from agent_core.types import ToolDefinition, ToolResult

logger = logging.getLogger(__name__)


def _prepare_target_dir(target_dir: str) -> Path:
    """Empty and recreate the clone target directory."""
    target = Path(target_dir).expanduser().resolve()
    cwd = Path.cwd().resolve()
    if target == cwd or target in cwd.parents:
        raise ValueError(
            f"Refusing to clear {target}: it contains the current working directory"
        )
    if target.exists():
        if target.is_dir():
            shutil.rmtree(target)
        else:
            target.unlink()
    target.mkdir(parents=True, exist_ok=True)
    return target


async def clone_repository(repo_url: str, target_dir: str) -> Path:
    """Clone ``repo_url`` into a fresh ``target_dir``.

    Returns:
        The resolved target path
    """
    target = _prepare_target_dir(target_dir)
    await asyncio.to_thread(git.Repo.clone_from, repo_url, str(target))
    return target


class GitPlugin(PluginBase):
    """Generic Git operations."""

    plugin_name = "git"

    def list_tools(self) -> List[ToolDefinition]:
        return [
            ToolDefinition(
                name="git_clone",
                description="Clone a Git repository",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "repo_url": {
                            "type": "string",
                            "description": "The repository URL to clone (can include credentials)",
                        },
                        "target_dir": {
                            "type": "string",
                            "description": "The target directory to clone into",
                        },
                    },
                    "required": ["repo_url", "target_dir"],
                },
            )
        ]

    async def tool_git_clone(self, args: Dict[str, Any], config: PluginConfig) -> ToolResult:
        self.require_args(args, "repo_url", "target_dir")
        repo_url = args["repo_url"]
        target_dir = args["target_dir"]

        logger.info(f"Cloning {repo_url} to {target_dir}")
        await clone_repository(repo_url, target_dir)
        logger.info("Clone complete")

        return self.json_result(
            {"repo_url": repo_url, "target_dir": target_dir, "status": "success"}
        )
