"""Slack plugin.

Posts messages and waits for a check-mark reaction as an approval gate.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List

import httpx

from agent_core.interfaces import PluginBase, PluginConfig
from agent_core.types import ToolDefinition, ToolResult

logger = logging.getLogger(__name__)

SLACK_API_BASE = "https://slack.com/api"

APPROVAL_REACTIONS = frozenset({"white_check_mark", "check"})

DEFAULT_APPROVAL_TIMEOUT_MINS = 10.0


class SlackPlugin(PluginBase):
    """Slack messaging and approvals."""

    plugin_name = "slack"
    required_config_keys = ("SLACK_BOT_TOKEN",)

    poll_interval: float = 5.0

    def list_tools(self) -> List[ToolDefinition]:
        return [
            ToolDefinition(
                name="slack_post_message",
                description="Post a message to a Slack channel",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "channel": {"type": "string", "description": "Channel ID"},
                        "text": {"type": "string", "description": "Message text"},
                    },
                    "required": ["channel", "text"],
                },
            ),
            ToolDefinition(
                name="slack_wait_approval",
                description="Wait for approval (check mark reaction) on a message",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "channel": {"type": "string", "description": "Channel ID"},
                        "message_ts": {
                            "type": "string",
                            "description": "Timestamp of the message to monitor",
                        },
                        "timeout_mins": {
                            "type": "number",
                            "description": "Timeout in minutes",
                            "default": 10,
                        },
                    },
                    "required": ["channel", "message_ts"],
                },
            ),
        ]

    @staticmethod
    def _headers(config: PluginConfig) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {config['SLACK_BOT_TOKEN']}",
            "Content-Type": "application/json; charset=utf-8",
        }

    async def tool_slack_post_message(self, args: Dict[str, Any], config: PluginConfig) -> ToolResult:
        self.require_args(args, "channel", "text")
        async with httpx.AsyncClient() as client:
            resp = await client.post(
                f"{SLACK_API_BASE}/chat.postMessage",
                json={"channel": args["channel"], "text": args["text"]},
                headers=self._headers(config),
                timeout=30,
            )
        result = resp.json()
        if not result.get("ok"):
            raise RuntimeError(f"Slack API error: {result.get('error')}")
        return self.json_result(result)

    async def tool_slack_wait_approval(self, args: Dict[str, Any], config: PluginConfig) -> ToolResult:
        self.require_args(args, "channel", "message_ts")
        channel = args["channel"]
        message_ts = str(args["message_ts"])
        timeout_mins = args.get("timeout_mins")
        timeout_mins = DEFAULT_APPROVAL_TIMEOUT_MINS if timeout_mins in (None, "") else float(timeout_mins)
        deadline = time.monotonic() + timeout_mins * 60

        logger.info(f"Waiting for approval on message {message_ts} in channel {channel}")
        async with httpx.AsyncClient() as client:
            while time.monotonic() < deadline:
                resp = await client.get(
                    f"{SLACK_API_BASE}/reactions.get",
                    params={"channel": channel, "timestamp": message_ts},
                    headers=self._headers(config),
                    timeout=30,
                )
                result = resp.json()

                if result.get("ok"):
                    reactions = (result.get("message") or {}).get("reactions") or []
                    names = [r.get("name") for r in reactions]
                    logger.debug(f"Reactions found: {names}")
                    if APPROVAL_REACTIONS.intersection(names):
                        logger.info("Approval received")
                        return self.text_result("Approved")
                else:
                    logger.warning(f"Failed to get reactions: {result.get('error')}")

                await asyncio.sleep(self.poll_interval)

        raise TimeoutError("Timed out waiting for approval")
