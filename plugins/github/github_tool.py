"""GitHub plugin.

Authenticated cloning and pull request creation.
"""

import logging
import re
from typing import Any, Dict, List, Tuple

import httpx

from agent_core.interfaces import PluginBase, PluginConfig
from agent_core.types import ToolDefinition, ToolResult
from plugins.git_tool.git_tool import clone_repository

logger = logging.getLogger(__name__)

GITHUB_API_BASE = "https://api.github.com"

REPO_URL_PATTERN = re.compile(r"github\.com/([^/]+)/([^/.]+)")


def parse_repo_url(repo_url: str) -> Tuple[str, str]:
    """Extract (owner, repo) from a GitHub URL, with or without ``.git``."""
    match = REPO_URL_PATTERN.search(repo_url)
    if not match:
        raise ValueError(f"Invalid GitHub URL: {repo_url}")
    return match.group(1), match.group(2)


def authenticated_url(repo_url: str, token: str) -> str:
    return re.sub(
        r"https://(github\.com/)", lambda m: f"https://{token}@{m.group(1)}", repo_url, count=1
    )


class GitHubPlugin(PluginBase):
    """GitHub repository operations."""

    plugin_name = "github"
    required_config_keys = ("GITHUB_TOKEN",)

    def list_tools(self) -> List[ToolDefinition]:
        return [
            ToolDefinition(
                name="github_clone",
                description="Clone a GitHub repository with authentication",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "repo_url": {
                            "type": "string",
                            "description": "The GitHub repository URL (e.g. https://github.com/owner/repo)",
                        },
                        "target_dir": {
                            "type": "string",
                            "description": "The target directory to clone into",
                        },
                    },
                    "required": ["repo_url", "target_dir"],
                },
            ),
            ToolDefinition(
                name="github_create_pr",
                description="Create a GitHub Pull Request",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "title": {"type": "string", "description": "PR Title"},
                        "body": {"type": "string", "description": "PR Description"},
                        "head": {
                            "type": "string",
                            "description": "The name of the branch where your changes are implemented",
                        },
                        "base": {
                            "type": "string",
                            "description": "The name of the branch you want the changes pulled into",
                        },
                        "repo_url": {
                            "type": "string",
                            "description": "The full URL of the repository (e.g. https://github.com/owner/repo)",
                        },
                    },
                    "required": ["title", "head", "base", "repo_url"],
                },
            ),
        ]

    async def tool_github_clone(self, args: Dict[str, Any], config: PluginConfig) -> ToolResult:
        self.require_args(args, "repo_url", "target_dir")
        repo_url = args["repo_url"]
        target_dir = args["target_dir"]

        logger.info(f"Cloning repository {repo_url} into {target_dir}")
        await clone_repository(authenticated_url(repo_url, config["GITHUB_TOKEN"]), target_dir)
        logger.info(f"Successfully cloned {repo_url} into {target_dir}")

        return self.json_result(
            {"repo_url": repo_url, "target_dir": target_dir, "status": "success"}
        )

    async def tool_github_create_pr(self, args: Dict[str, Any], config: PluginConfig) -> ToolResult:
        self.require_args(args, "title", "head", "base", "repo_url")
        owner, repo = parse_repo_url(args["repo_url"])

        headers = {
            "Authorization": f"Bearer {config['GITHUB_TOKEN']}",
            "Accept": "application/vnd.github+json",
        }
        payload = {
            "title": args["title"],
            "head": args["head"],
            "base": args["base"],
        }
        if args.get("body") is not None:
            payload["body"] = args["body"]

        url = f"{GITHUB_API_BASE}/repos/{owner}/{repo}/pulls"
        async with httpx.AsyncClient() as client:
            resp = await client.post(url, json=payload, headers=headers, timeout=30)
        if resp.status_code >= 400:
            raise RuntimeError(f"GitHub API error {resp.status_code}: {resp.text}")

        data = resp.json()
        return self.json_result(
            {"pr_url": data.get("html_url"), "number": data.get("number"), "state": data.get("state")}
        )
