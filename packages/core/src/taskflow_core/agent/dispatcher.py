"""Dispatcher - runs parsed tool calls through the sandbox and backups.

For each call, in order:
1. ToolRegistry.validate (known tool, required arguments present)
2. Sandbox.validate_path on every path argument of the tool
3. BackupManager.backup_file on each validated path if the tool is destructive
4. The registered handler, given a ToolInvocation with the validated paths

The dispatcher performs no file mutation itself; handlers do. A failure in
any step ends that call only: it is reported in the call's ToolResult and the
remaining calls still run, so one bad command does not block the valid ones
extracted from the same text.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Union

from taskflow_core.agent.backup import BackupManager
from taskflow_core.agent.parser import ToolCall, ToolParser
from taskflow_core.agent.registry import ToolError, ToolRegistry, ToolSpec
from taskflow_core.agent.security import PathLike, Sandbox, SecurityError
from taskflow_core.config import AgentConfig, load_agent_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolInvocation:
    """What a handler receives."""

    call: ToolCall
    paths: dict[str, str]  # Path argument -> validated absolute path
    backups: dict[str, Path] = field(default_factory=dict)  # Path argument -> backup

    @property
    def arguments(self) -> dict[str, str]:
        return self.call.arguments


@dataclass
class ToolResult:
    """Outcome of one dispatched call."""

    call: ToolCall
    success: bool
    output: str = ""
    error: Optional[str] = None
    error_type: Optional[str] = None  # Exception class name on failure
    backups: list[str] = field(default_factory=list)


class ToolDispatcher:
    """Executes ToolCalls against a registry under sandbox and backup policy.

    Example:
        dispatcher = ToolDispatcher.from_config("/home/me/proj", registry)
        for result in dispatcher.run(llm_output):
            if not result.success:
                print(f"{result.call.name}: {result.error}")
    """

    def __init__(
        self,
        registry: ToolRegistry,
        sandbox: Sandbox,
        backups: Optional[BackupManager] = None,
        parser: Optional[ToolParser] = None,
    ):
        """Initialize ToolDispatcher.

        Args:
            registry: Tools the model may call
            sandbox: Boundary for every path argument
            backups: Where destructive tools back up their targets. If None,
                destructive tools run without backups.
            parser: Parser used by run() for raw text (default ToolParser())
        """
        self.registry = registry
        self.sandbox = sandbox
        self.backups = backups
        self.parser = parser or ToolParser()

    @classmethod
    def from_config(
        cls,
        project_root: PathLike,
        registry: ToolRegistry,
        config: Optional[AgentConfig] = None,
        session_id: Optional[str] = None,
    ) -> "ToolDispatcher":
        """Build a dispatcher from the project's agent configuration.

        Args:
            project_root: Project directory
            registry: Tools the model may call
            config: Agent configuration (loaded from the project if None)
            session_id: Backup session id (timestamp-derived if None)
        """
        if config is None:
            config = load_agent_config(project_root)

        sandbox = Sandbox(project_root, protected_patterns=config.protected_patterns)
        backups = BackupManager(
            project_root,
            session_id=session_id,
            backup_dir=config.backup_dir,
            sandbox=sandbox,
        )
        parser = ToolParser(body_arguments=config.body_arguments)
        return cls(registry, sandbox, backups=backups, parser=parser)

    def run(self, source: Union[str, Iterable[ToolCall]]) -> list[ToolResult]:
        """Dispatch every call in source (raw LLM text or parsed calls), in order."""
        calls = self.parser.parse(source) if isinstance(source, str) else list(source)
        return [self.dispatch(call) for call in calls]

    def dispatch(self, call: ToolCall) -> ToolResult:
        """Validate, back up and execute a single call. Never raises for tool failures."""
        try:
            spec = self.registry.validate(call)
            invocation = self._prepare(spec, call)
        except (ToolError, SecurityError, OSError) as e:
            logger.warning(f"[ToolDispatcher] Rejected {call.name}: {e}")
            return self._failure(call, e)

        try:
            output = spec.handler(invocation)
        except Exception as e:
            logger.exception(f"[ToolDispatcher] Tool {call.name} failed")
            return self._failure(call, e, backups=invocation.backups)

        logger.info(f"[ToolDispatcher] Tool {call.name} succeeded")
        return ToolResult(
            call=call,
            success=True,
            output=output or "",
            backups=[str(path) for path in invocation.backups.values()],
        )

    def _prepare(self, spec: ToolSpec, call: ToolCall) -> ToolInvocation:
        # Validate every path before backing up any of them
        paths = {
            arg: self.sandbox.validate_path(call.arguments[arg])
            for arg in spec.path_args
            if arg in call.arguments
        }

        backups: dict[str, Path] = {}
        if spec.destructive and self.backups is not None:
            for arg, path in paths.items():
                destination = self.backups.backup_file(path)
                if destination is not None:
                    backups[arg] = destination

        return ToolInvocation(call=call, paths=paths, backups=backups)

    def _failure(
        self,
        call: ToolCall,
        error: Exception,
        backups: Optional[dict[str, Path]] = None,
    ) -> ToolResult:
        return ToolResult(
            call=call,
            success=False,
            error=str(error),
            error_type=type(error).__name__,
            backups=[str(path) for path in (backups or {}).values()],
        )
