"""Tool-protocol server exposing workflow plugin tools."""
