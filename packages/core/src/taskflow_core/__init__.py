"""Taskflow core - agent tool-call parsing, sandboxing and backups."""

from taskflow_core.agent import (
    AccessDeniedError,
    BackupManager,
    Sandbox,
    SecurityError,
    ToolCall,
    ToolDispatcher,
    ToolParser,
    ToolRegistry,
    ToolResult,
    parse_tool_calls,
)
from taskflow_core.config import AgentConfig, ConfigError, load_agent_config

__all__ = [
    # Agent
    "ToolCall",
    "ToolParser",
    "parse_tool_calls",
    "Sandbox",
    "SecurityError",
    "AccessDeniedError",
    "BackupManager",
    "ToolRegistry",
    "ToolDispatcher",
    "ToolResult",
    # Config
    "AgentConfig",
    "ConfigError",
    "load_agent_config",
]
