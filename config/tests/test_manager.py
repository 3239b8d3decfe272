import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from config.manager import EnvironmentManager
from config.types import RunnerSettings


class TestEnvironmentManager(unittest.TestCase):
    """Test cases for the EnvironmentManager class."""

    def setUp(self):
        """Set up test fixtures."""
        # Create a new instance for each test to avoid singleton issues
        EnvironmentManager._instance = None
        self.env_manager = EnvironmentManager()

        self.temp_dir = tempfile.mkdtemp()
        self.original_cwd = os.getcwd()

    def tearDown(self):
        """Clean up after tests."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)
        os.chdir(self.original_cwd)
        EnvironmentManager._instance = None

    def create_env_file(self, content):
        """Create a temporary .env file with the given content."""
        env_file = Path(self.temp_dir) / ".env"
        env_file.write_text(content)
        return env_file

    def test_initialization(self):
        """Test that defaults are loaded."""
        self.assertEqual(self.env_manager.get_setting("workflow_path"), "workflow.json")
        self.assertEqual(self.env_manager.get_setting("max_prompt_tokens"), 2000)
        self.assertEqual(self.env_manager.get_setting("chars_per_token"), 4)
        self.assertEqual(self.env_manager.get_setting("agent_cli_path"), "claude")
        self.assertEqual(self.env_manager.get_setting("enabled_plugins"), [])
        self.assertIsNone(self.env_manager.get_setting("prompt_dir"))
        self.assertEqual(self.env_manager.get_setting("prompt_dir", "/tmp"), "/tmp")

    def test_singleton_pattern(self):
        """Test that EnvironmentManager follows singleton pattern."""
        EnvironmentManager._instance = None

        manager1 = EnvironmentManager()
        manager2 = EnvironmentManager()

        self.assertIs(manager1, manager2)

    def test_parse_env_file(self):
        """Test parsing an environment file."""
        env_file = self.create_env_file(
            """
        # Runner settings
        MAX_PROMPT_TOKENS=500
        export AGENT_MODEL="sonnet"
        STRICT_REFERENCES=yes
        ENABLED_PLUGINS=git, slack
        GITHUB_TOKEN='ghp_secret'
        AGENT_TIMEOUT=
        not a variable
        """
        )

        self.env_manager._parse_env_file(env_file)

        self.assertEqual(self.env_manager.get_setting("max_prompt_tokens"), 500)
        self.assertEqual(self.env_manager.get_setting("agent_model"), "sonnet")
        self.assertTrue(self.env_manager.get_setting("strict_references"))
        self.assertEqual(self.env_manager.get_setting("enabled_plugins"), ["git", "slack"])
        self.assertIsNone(self.env_manager.get_setting("agent_timeout"))
        self.assertEqual(self.env_manager.env_variables.get("GITHUB_TOKEN"), "ghp_secret")

    def test_invalid_value_is_ignored(self):
        """Test that a malformed number keeps the default."""
        env_file = self.create_env_file("MAX_PROMPT_TOKENS=lots\n")

        with self.assertLogs("config.manager", level="WARNING"):
            self.env_manager._parse_env_file(env_file)

        self.assertEqual(self.env_manager.get_setting("max_prompt_tokens"), 2000)

    def test_load_prefers_os_environment(self):
        """Test OS variables override .env values."""
        self.create_env_file("LOG_LEVEL=DEBUG\nSLACK_BOT_TOKEN=from-file\n")
        os.chdir(self.temp_dir)

        with mock.patch.dict(os.environ, {"LOG_LEVEL": "WARNING"}):
            self.env_manager.load()
            credentials = self.env_manager.get_credentials()

        self.assertEqual(self.env_manager.env_file, Path(self.temp_dir) / ".env")
        self.assertEqual(self.env_manager.get_setting("log_level"), "WARNING")
        self.assertEqual(credentials["SLACK_BOT_TOKEN"], "from-file")
        self.assertEqual(credentials["LOG_LEVEL"], "WARNING")

    def test_update_settings(self):
        """Test command-line style overrides."""
        self.env_manager.update_settings({"workflow_path": "flows/fix.yaml", "log_file": None})

        self.assertEqual(self.env_manager.get_setting("workflow_path"), "flows/fix.yaml")
        self.assertIsNone(self.env_manager.get_setting("log_file"))

        with self.assertRaises(KeyError):
            self.env_manager.update_settings({"no_such_setting": 1})

    def test_get_runner_settings(self):
        """Test the typed settings view."""
        self.env_manager.update_settings({"max_prompt_tokens": 100, "chars_per_token": 3})

        settings = self.env_manager.get_runner_settings()

        self.assertIsInstance(settings, RunnerSettings)
        self.assertEqual(settings.max_prompt_chars, 300)
        self.assertIsNone(settings.prompt_dir)

    def test_trigger_payload_variable(self):
        """Test reading the trigger payload from the configured variable."""
        self.env_manager.update_settings({"trigger_payload_env": "GITHUB_EVENT"})

        with mock.patch.dict(os.environ, {"GITHUB_EVENT": '{"action": "opened"}'}):
            self.assertEqual(
                self.env_manager.get_trigger_payload_raw(), '{"action": "opened"}'
            )


if __name__ == "__main__":
    unittest.main()
