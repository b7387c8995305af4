"""Shared helpers: logging setup, async subprocesses, fallback chains, temp workspaces."""
