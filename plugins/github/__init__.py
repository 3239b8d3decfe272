"""GitHub Plugin."""

from .github_tool import GitHubPlugin, parse_repo_url

__all__ = ["GitHubPlugin", "parse_repo_url"]
