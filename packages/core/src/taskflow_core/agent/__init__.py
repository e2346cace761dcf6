"""Agent tool-call layer for Taskflow.

This package turns LLM output into file actions that cannot leave the project:

1. Parser Layer (parser.py):
   - ToolParser: XML-style tags in model output -> ordered ToolCall records

2. Security Layer (security.py):
   - Sandbox: Lexical path validation against the project root

3. Recovery Layer (backup.py):
   - BackupManager: Session-scoped copies of files before they change

4. Executor Boundary (registry.py, dispatcher.py):
   - ToolRegistry: Caller-owned tool name -> handler mapping
   - ToolDispatcher: Validate, back up, run handler, report per call

The parser knows nothing about tools and the sandbox knows nothing about
backups; only the dispatcher decides the order they are applied in.
"""

from taskflow_core.agent.backup import BackupManager, make_session_id
from taskflow_core.agent.dispatcher import ToolDispatcher, ToolInvocation, ToolResult
from taskflow_core.agent.parser import ToolCall, ToolParser, parse_tool_calls
from taskflow_core.agent.registry import (
    MissingArgumentError,
    ToolError,
    ToolRegistry,
    ToolSpec,
    UnknownToolError,
)
from taskflow_core.agent.security import AccessDeniedError, Sandbox, SecurityError

__all__ = [
    "ToolCall",
    "ToolParser",
    "parse_tool_calls",
    "Sandbox",
    "SecurityError",
    "AccessDeniedError",
    "BackupManager",
    "make_session_id",
    "ToolRegistry",
    "ToolSpec",
    "ToolError",
    "UnknownToolError",
    "MissingArgumentError",
    "ToolDispatcher",
    "ToolInvocation",
    "ToolResult",
]
