"""
Prompt Manager

Persists the full prompt of an AI agent step and produces the bounded text
that is submitted to the agent.
"""

import logging
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from agent_core.exceptions import AgentRunnerError
from agent_core.logger import WorkflowLogger

logger = logging.getLogger(__name__)

DEFAULT_MAX_PROMPT_TOKENS = 2000
DEFAULT_CHARS_PER_TOKEN = 4

HOME_PROMPT_DIR = ".agent-runner/prompts"

TRUNCATION_NOTE = (
    "\n\n[Note: The full prompt was truncated. I have saved the complete details "
    "to the file '{path}' (outside the workspace). You can read it if needed, "
    "but it is large.]"
)


@dataclass(frozen=True)
class PreparedPrompt:
    """Prompt ready for submission, with the location of the full text."""

    text: str
    full_path: Path
    original_length: int
    truncated: bool


class PromptManager:
    """Writes prompts to disk and bounds their size."""

    def __init__(
        self,
        prompt_dir: Optional[Union[str, Path]] = None,
        max_prompt_tokens: int = DEFAULT_MAX_PROMPT_TOKENS,
        chars_per_token: int = DEFAULT_CHARS_PER_TOKEN,
        event_logger: Optional[WorkflowLogger] = None,
    ):
        self.prompt_dir = Path(prompt_dir) if prompt_dir else Path(tempfile.gettempdir())
        self.max_chars = max_prompt_tokens * chars_per_token
        self.event_logger = event_logger or WorkflowLogger()

    def _storage_dir(self, working_dir: Path) -> Path:
        working_dir = working_dir.resolve()
        # The agent scans its working directory, so the prompt must live outside it
        candidates = [
            self.prompt_dir,
            Path(tempfile.gettempdir()),
            Path.home() / HOME_PROMPT_DIR,
        ]
        for candidate in candidates:
            directory = candidate.resolve()
            if directory == working_dir or working_dir in directory.parents:
                logger.warning(
                    f"Prompt directory {directory} is inside the agent working directory "
                    f"{working_dir}"
                )
                continue
            directory.mkdir(parents=True, exist_ok=True)
            return directory
        raise AgentRunnerError(
            f"No prompt directory outside the agent working directory {working_dir}",
            {"working_dir": str(working_dir)},
        )

    def prepare(self, step_id: str, prompt: str, working_dir: Union[str, Path]) -> PreparedPrompt:
        """Save the full prompt and return the text to submit.

        Args:
            step_id: Id of the AI agent step
            prompt: Fully interpolated prompt
            working_dir: Directory the agent will run in

        Returns:
            PreparedPrompt with the bounded text and the saved file path
        """
        directory = self._storage_dir(Path(working_dir))
        full_path = directory / f"prompt_{step_id}_{int(time.time() * 1000)}.txt"
        full_path.write_text(prompt, encoding="utf-8")

        truncated = len(prompt) > self.max_chars
        text = prompt
        if truncated:
            text = prompt[: self.max_chars] + TRUNCATION_NOTE.format(path=full_path)

        self.event_logger.ai_agent_prompt(step_id, len(prompt), truncated, full_path)
        return PreparedPrompt(
            text=text,
            full_path=full_path,
            original_length=len(prompt),
            truncated=truncated,
        )
