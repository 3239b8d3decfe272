import unittest

from pydantic import ValidationError

from config.types import EnvironmentVariables, RunnerSettings


class TestRunnerSettings(unittest.TestCase):
    """Test cases for the RunnerSettings model."""

    def test_defaults(self):
        settings = RunnerSettings()

        self.assertEqual(settings.workflow_path, "workflow.json")
        self.assertEqual(settings.max_prompt_chars, 8000)
        self.assertTrue(settings.log_json)
        self.assertFalse(settings.strict_references)
        self.assertEqual(settings.enabled_plugins, [])

    def test_rejects_non_positive_token_limit(self):
        with self.assertRaises(ValidationError):
            RunnerSettings(max_prompt_tokens=0)

    def test_ignores_unknown_fields(self):
        settings = RunnerSettings(unknown="x", agent_timeout="30")
        self.assertEqual(settings.agent_timeout, 30.0)
        self.assertFalse(hasattr(settings, "unknown"))


class TestEnvironmentVariables(unittest.TestCase):
    """Test cases for the EnvironmentVariables model."""

    def test_get_and_set(self):
        variables = EnvironmentVariables()
        self.assertIsNone(variables.get("TOKEN"))
        self.assertEqual(variables.get("TOKEN", "default"), "default")

        variables.set("TOKEN", "abc")
        self.assertEqual(variables.get("TOKEN"), "abc")


if __name__ == "__main__":
    unittest.main()
