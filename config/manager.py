import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from config.types import EnvironmentVariables, RunnerSettings


class EnvironmentManager:
    """
    Environment manager holding runner settings and the credentials that are
    handed to plugins.
    """

    _instance = None

    # Default settings with their types
    DEFAULT_SETTINGS = {
        "workflow_path": ("workflow.json", str),
        "prompt_dir": (None, str),
        "max_prompt_tokens": (2000, int),
        "chars_per_token": (4, int),
        # Agent CLI
        "agent_cli_path": ("claude", str),
        "agent_timeout": (None, float),
        "agent_model": (None, str),
        # Logging
        "log_level": ("INFO", str),
        "log_file": (None, str),
        "log_json": (True, bool),
        # Workflow input and checks
        "trigger_payload_env": ("TRIGGER_PAYLOAD", str),
        "strict_references": (False, bool),
        "enabled_plugins": ([], list),
    }

    # Each setting can be set via its uppercase env var
    ENV_MAPPING = {setting.upper(): setting for setting in DEFAULT_SETTINGS.keys()}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        """Initialize environment with default values"""
        self.env_variables = EnvironmentVariables()
        self.settings: Dict[str, Any] = {}
        self.env_file: Optional[Path] = None
        self.logger = logging.getLogger(__name__)

        for key, (default_value, _) in self.DEFAULT_SETTINGS.items():
            self.settings[key] = list(default_value) if isinstance(default_value, list) else default_value

    def _get_git_root(self) -> Optional[Path]:
        """Try to determine the git root directory

        Returns:
            Path to the git root directory or None if not found
        """
        dir_to_check = Path.cwd()
        for _ in range(10):  # Limit the search depth
            git_dir = dir_to_check / ".git"
            if git_dir.exists() and git_dir.is_dir():
                return dir_to_check

            parent_dir = dir_to_check.parent
            if parent_dir == dir_to_check:
                break
            dir_to_check = parent_dir

        return None

    def _convert_value(self, value: str, target_type: type) -> Any:
        """Convert string value to target type"""
        if target_type == bool:
            return value.strip().lower() in ("true", "1", "yes")
        if target_type == list:
            return [item.strip() for item in value.split(",") if item.strip()]
        if value == "" and target_type in (int, float):
            return None
        return target_type(value)

    def _apply_variable(self, key: str, value: str) -> None:
        self.env_variables.set(key, value)
        if key in self.ENV_MAPPING:
            setting_name = self.ENV_MAPPING[key]
            _, target_type = self.DEFAULT_SETTINGS[setting_name]
            try:
                self.settings[setting_name] = self._convert_value(value, target_type)
            except ValueError:
                self.logger.warning(
                    f"Ignoring invalid value for {key}: expected {target_type.__name__}"
                )

    def _env_file_candidates(self) -> List[Path]:
        candidates = [Path.cwd() / ".env"]
        git_root = self._get_git_root()
        if git_root:
            candidates.append(git_root / ".env")
        try:
            candidates.append(Path.home() / ".env")
        except (RuntimeError, OSError):
            # Skip home directory if it can't be determined
            pass
        return candidates

    def _load_from_env_file(self) -> None:
        """Find and load variables from the first .env file found"""
        for env_path in self._env_file_candidates():
            if env_path.exists() and env_path.is_file():
                self.logger.debug(f"Loading environment from: {env_path}")
                self._parse_env_file(env_path)
                self.env_file = env_path
                return
        self.logger.debug("No .env file found")

    def _parse_env_file(self, env_file_path: Path) -> None:
        """Parse a .env file and load variables into environment"""
        try:
            with open(env_file_path, "r") as f:
                for line in f:
                    line = line.strip()
                    if line.startswith("export "):
                        line = line[len("export "):].strip()
                    if not line or line.startswith("#") or "=" not in line:
                        continue
                    key, value = line.split("=", 1)
                    key = key.strip()
                    value = value.strip()

                    # Remove quotes if present
                    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
                        value = value[1:-1]

                    self._apply_variable(key, value)
        except OSError as e:
            self.logger.error(f"Error parsing .env file {env_file_path}: {e}")

    def load(self) -> "EnvironmentManager":
        """Load settings from the .env file, then the OS environment"""
        self._load_from_env_file()
        for key, value in os.environ.items():
            self._apply_variable(key, value)
        return self

    def get_setting(self, name: str, default: Any = None) -> Any:
        """Get a setting value by name"""
        value = self.settings.get(name)
        return default if value is None else value

    def update_settings(self, updates: Dict[str, Any]) -> None:
        """Override settings, for example from command-line options"""
        for name, value in updates.items():
            if name not in self.DEFAULT_SETTINGS:
                raise KeyError(f"Unknown setting: {name}")
            if value is not None:
                self.settings[name] = value

    def get_runner_settings(self) -> RunnerSettings:
        """Validated settings for a workflow run"""
        return RunnerSettings(
            **{k: v for k, v in self.settings.items() if v is not None}
        )

    def get_credentials(self) -> Dict[str, str]:
        """Named secrets passed to plugin init calls.

        All OS environment variables and .env values; OS values win.
        """
        credentials = dict(self.env_variables.variables)
        credentials.update(os.environ)
        return credentials

    def get_trigger_payload_raw(self) -> Optional[str]:
        """Raw trigger payload from the configured environment variable"""
        name = self.get_setting("trigger_payload_env", "TRIGGER_PAYLOAD")
        return os.environ.get(name) or self.env_variables.get(name)


env_manager = EnvironmentManager()
