"""
Configuration Package.

Runner settings and plugin credentials loaded from the environment and .env files.
"""

from config.manager import EnvironmentManager, env_manager
from config.types import EnvironmentVariables, RunnerSettings

# Re-export the singleton instance for easy access
env = env_manager

__all__ = [
    "EnvironmentManager",
    "env_manager",
    "env",
    "EnvironmentVariables",
    "RunnerSettings",
]
