"""Git Plugin.

Repository cloning for workflow tool steps.
"""

from .git_tool import GitPlugin, clone_repository

__all__ = ["GitPlugin", "clone_repository"]
