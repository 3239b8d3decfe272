"""Sentry plugin.

Fetches unresolved issues and a compact summary of an issue's latest event.
"""

import logging
from typing import Any, Dict, List

import httpx

from agent_core.interfaces import PluginBase, PluginConfig
from agent_core.types import ToolDefinition, ToolResult

logger = logging.getLogger(__name__)

SENTRY_API_BASE = "https://sentry.io/api/0"

SUMMARY_TAIL = 5


def summarize_event(event: Dict[str, Any]) -> Dict[str, Any]:
    """Keep the last frames of each exception and the last breadcrumb entries."""
    exception_values = []
    for value in (event.get("exception") or {}).get("values") or []:
        stacktrace = value.get("stacktrace")
        exception_values.append(
            {
                "type": value.get("type"),
                "value": value.get("value"),
                "stacktrace": (
                    {"frames": (stacktrace.get("frames") or [])[-SUMMARY_TAIL:]}
                    if stacktrace
                    else None
                ),
            }
        )

    breadcrumbs = [
        entry for entry in event.get("entries") or [] if entry.get("type") == "breadcrumbs"
    ]
    return {
        "event_id": event.get("event_id"),
        "message": event.get("message"),
        "exception_values": exception_values,
        "breadcrumbs": breadcrumbs[-SUMMARY_TAIL:],
    }


class SentryPlugin(PluginBase):
    """Sentry issue queries."""

    plugin_name = "sentry"
    required_config_keys = ("SENTRY_AUTH_TOKEN",)

    def list_tools(self) -> List[ToolDefinition]:
        return [
            ToolDefinition(
                name="sentry_get_issues",
                description="Get unresolved issues from Sentry",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "org": {"type": "string", "description": "Sentry organization slug"},
                        "project": {"type": "string", "description": "Sentry project slug"},
                        "limit": {"type": "number", "description": "Number of issues to fetch"},
                    },
                    "required": ["org", "project"],
                },
            ),
            ToolDefinition(
                name="sentry_get_issue_details",
                description="Get comprehensive details for a specific issue",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "issue_id": {"type": "string", "description": "The issue ID"},
                    },
                    "required": ["issue_id"],
                },
            ),
        ]

    @staticmethod
    def _headers(config: PluginConfig) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {config['SENTRY_AUTH_TOKEN']}",
            "Content-Type": "application/json",
        }

    async def tool_sentry_get_issues(self, args: Dict[str, Any], config: PluginConfig) -> ToolResult:
        self.require_args(args, "org", "project")
        limit = args.get("limit") or 1
        url = f"{SENTRY_API_BASE}/projects/{args['org']}/{args['project']}/issues/"
        params = {"query": "is:unresolved", "sort": "freq", "limit": int(limit)}

        logger.info(f"Fetching issues from {url}")
        async with httpx.AsyncClient() as client:
            resp = await client.get(url, params=params, headers=self._headers(config), timeout=30)
        if resp.status_code >= 400:
            raise RuntimeError(f"Sentry API error: {resp.reason_phrase} (URL: {url})")
        return self.json_result(resp.json())

    async def tool_sentry_get_issue_details(
        self, args: Dict[str, Any], config: PluginConfig
    ) -> ToolResult:
        self.require_args(args, "issue_id")
        issue_id = args["issue_id"]
        headers = self._headers(config)

        async with httpx.AsyncClient() as client:
            resp = await client.get(f"{SENTRY_API_BASE}/issues/{issue_id}/", headers=headers, timeout=30)
            if resp.status_code >= 400:
                raise RuntimeError(f"Failed to fetch issue details: {resp.reason_phrase}")
            details = resp.json()

            events_resp = await client.get(
                f"{SENTRY_API_BASE}/issues/{issue_id}/events/latest/", headers=headers, timeout=30
            )

        latest_event: Dict[str, Any] = {}
        if events_resp.status_code < 400:
            latest_event = summarize_event(events_resp.json())
        else:
            logger.warning(f"Latest event unavailable for issue {issue_id}: {events_resp.status_code}")

        project = details.get("project") or {}
        return self.json_result(
            {
                "issue": {
                    "id": details.get("id"),
                    "title": details.get("title"),
                    "shortId": details.get("shortId"),
                    "culprit": details.get("culprit"),
                    "metadata": details.get("metadata"),
                    "project": {"id": project.get("id"), "slug": project.get("slug")},
                    "lastSeen": details.get("lastSeen"),
                    "firstSeen": details.get("firstSeen"),
                },
                "latest_event": latest_event,
            }
        )
