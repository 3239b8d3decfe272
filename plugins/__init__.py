"""Plugins Package.

Built-in workflow plugins. Each subdirectory contains a separate plugin
implementation, found at run time by ``agent_core.plugin.discover_plugins``.
"""
