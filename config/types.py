from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RunnerSettings(BaseModel):
    """Typed view of the settings used by a workflow run"""

    workflow_path: str = "workflow.json"
    prompt_dir: Optional[str] = None  # None means the system temp directory
    max_prompt_tokens: int = Field(default=2000, gt=0)
    chars_per_token: int = Field(default=4, gt=0)
    agent_cli_path: str = "claude"
    agent_timeout: Optional[float] = None
    agent_model: Optional[str] = None
    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_json: bool = True
    trigger_payload_env: str = "TRIGGER_PAYLOAD"
    strict_references: bool = False
    enabled_plugins: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")

    @property
    def max_prompt_chars(self) -> int:
        return self.max_prompt_tokens * self.chars_per_token


class EnvironmentVariables(BaseModel):
    """Model representing environment variables"""

    variables: Dict[str, str] = Field(default_factory=dict)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get an environment variable value"""
        return self.variables.get(name, default)

    def set(self, name: str, value: str) -> None:
        """Set an environment variable value"""
        self.variables[name] = value
