"""
Structured event logging for workflow runs.

A ``WorkflowLogger`` is created once per run and handed to every component
that emits run events (registry, step executor, prompt manager, agent
client). Each event is a flat JSON object logged through the standard
``logging`` module, so handlers and levels stay under normal logging control.
"""

import json
import logging
from datetime import datetime, UTC
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

PREVIEW_LENGTH = 100

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _preview(value: Any, length: int = PREVIEW_LENGTH) -> str:
    text = value if isinstance(value, str) else json.dumps(value, default=str)
    return text[:length]


class WorkflowLogger:
    """Emits structured run events.

    Every event carries ``timestamp``, ``level`` and ``type``. Events emitted
    while a step is running also carry ``stepId``.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("agent_core.events")
        self.current_step_id: Optional[str] = None

    def _emit(self, level: int, event_type: str, **fields: Any) -> Dict[str, Any]:
        event: Dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": logging.getLevelName(level).lower(),
            "type": event_type,
        }
        if "stepId" not in fields and self.current_step_id is not None:
            event["stepId"] = self.current_step_id
        event.update({k: v for k, v in fields.items() if v is not None})
        self._logger.log(level, json.dumps(event, default=str), extra={"event": event})
        return event

    # Step lifecycle

    def step_start(
        self, step_id: str, step_type: str, tool_name: Optional[str] = None
    ) -> None:
        self.current_step_id = step_id
        self._emit(
            logging.INFO, "step_start", stepId=step_id, stepType=step_type, toolName=tool_name
        )

    def step_complete(self, step_id: str, duration_ms: int, output: Any = None) -> None:
        self._emit(
            logging.INFO,
            "step_complete",
            stepId=step_id,
            durationMs=duration_ms,
            outputPreview=_preview(output) if output is not None else None,
        )
        self.current_step_id = None

    def step_error(self, step_id: str, error: Union[BaseException, str]) -> None:
        self._emit(
            logging.ERROR,
            "step_error",
            stepId=step_id,
            error=str(error),
            errorType=type(error).__name__ if isinstance(error, BaseException) else None,
        )
        self.current_step_id = None

    def step_skip(self, step_id: str, reason: str) -> None:
        self._emit(logging.INFO, "step_skip", stepId=step_id, reason=reason)

    # AI agent

    def ai_agent_prompt(
        self,
        step_id: str,
        prompt_length: int,
        truncated: bool,
        full_prompt_path: Optional[Union[str, Path]] = None,
    ) -> None:
        self._emit(
            logging.INFO,
            "ai_agent_prompt",
            stepId=step_id,
            promptLength=prompt_length,
            truncated=truncated,
            fullPromptPath=str(full_prompt_path) if full_prompt_path else None,
        )

    def ai_agent_response(self, step_id: str, response: str) -> None:
        self._emit(
            logging.INFO,
            "ai_agent_response",
            stepId=step_id,
            responseLength=len(response),
            responsePreview=_preview(response),
        )

    def agent_stderr(self, text: str) -> None:
        self._emit(logging.DEBUG, "claude_code_stderr", text=text)

    # Tools

    def tool_call(
        self, tool_name: str, tool_call_id: str, args: Dict[str, Any]
    ) -> None:
        self._emit(
            logging.INFO, "tool_call", toolName=tool_name, toolCallId=tool_call_id, args=args
        )

    def tool_result(
        self,
        tool_name: str,
        tool_call_id: str,
        result_length: int,
        result_preview: str,
        structured: bool,
    ) -> None:
        self._emit(
            logging.INFO,
            "tool_result",
            toolName=tool_name,
            toolCallId=tool_call_id,
            resultLength=result_length,
            resultPreview=_preview(result_preview),
            structured=structured,
        )

    # Registry

    def plugin_registered(self, plugin_name: str, tool_names: List[str]) -> None:
        self._emit(logging.INFO, "plugin_registered", plugin=plugin_name, tools=tool_names)

    def tools_validated(self, tool_names: List[str]) -> None:
        self._emit(logging.INFO, "tools_validated", tools=tool_names)

    def tool_server_configured(self, server_name: str, tool_names: List[str]) -> None:
        self._emit(
            logging.INFO, "mcp_server_created", serverName=server_name, tools=tool_names
        )

    # Free-form

    def info(self, message: str, **data: Any) -> None:
        self._emit(logging.INFO, "info", message=message, data=data or None)

    def warning(self, message: str, **data: Any) -> None:
        self._emit(logging.WARNING, "warning", message=message, data=data or None)

    def error(self, message: str, **data: Any) -> None:
        self._emit(logging.ERROR, "error", message=message, data=data or None)

    def debug(self, message: str, **data: Any) -> None:
        self._emit(logging.DEBUG, "debug", message=message, data=data or None)


class JsonLogFormatter(logging.Formatter):
    """Render each record as one JSON object per line.

    Records produced by ``WorkflowLogger`` are written as the event itself;
    other records are wrapped with their logger name and level.
    """

    def format(self, record: logging.LogRecord) -> str:
        event = getattr(record, "event", None)
        if isinstance(event, dict):
            return json.dumps(event, default=str)
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname.lower(),
            "type": "log",
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    json_format: bool = True,
) -> None:
    """Configure the root logger with a console handler and optional file handler."""
    # basicConfig is a no-op once handlers exist, so reset them explicitly
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
        handler.close()

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)

    formatter: logging.Formatter
    if json_format:
        formatter = JsonLogFormatter()
    else:
        formatter = logging.Formatter(DEFAULT_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_path.absolute()))
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
