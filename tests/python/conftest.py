"""Shared pytest fixtures for Taskflow tests.

This module provides reusable fixtures for testing against a real (temporary)
project directory instead of mocking the filesystem:
- project_root: Empty project directory
- sandbox: Sandbox over project_root
- backups: BackupManager with a fixed session id
- file_registry: ToolRegistry with simple read/write/delete handlers
- dispatcher: ToolDispatcher wiring all of the above
"""

from pathlib import Path

import pytest

from taskflow_core.agent.backup import BackupManager
from taskflow_core.agent.dispatcher import ToolDispatcher, ToolInvocation
from taskflow_core.agent.registry import ToolRegistry
from taskflow_core.agent.security import Sandbox

TEST_SESSION_ID = "2026-01-01T00-00-00-000000Z"


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Empty project directory with a sibling directory next to it.

    The sibling (proj-sibling) shares the project root's name as a prefix,
    which is what segment-based containment has to get right.
    """
    root = tmp_path / "proj"
    root.mkdir()
    (tmp_path / "proj-sibling").mkdir()
    return root


@pytest.fixture
def sandbox(project_root: Path) -> Sandbox:
    return Sandbox(project_root)


@pytest.fixture
def backups(project_root: Path) -> BackupManager:
    """BackupManager with a deterministic session directory."""
    return BackupManager(project_root, session_id=TEST_SESSION_ID)


@pytest.fixture
def file_registry() -> ToolRegistry:
    """Registry with minimal file tools, as an executor would define them.

    Handlers receive paths already validated by the dispatcher.
    """
    registry = ToolRegistry()

    @registry.tool("read_file", required_args=["path"], path_args=["path"])
    def read_file(invocation: ToolInvocation) -> str:
        return Path(invocation.paths["path"]).read_text(encoding="utf-8")

    @registry.tool(
        "write_file", required_args=["path", "content"], path_args=["path"], destructive=True
    )
    def write_file(invocation: ToolInvocation) -> str:
        target = Path(invocation.paths["path"])
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(invocation.arguments["content"], encoding="utf-8")
        return f"Wrote {invocation.arguments['path']}"

    @registry.tool("delete_file", required_args=["path"], path_args=["path"], destructive=True)
    def delete_file(invocation: ToolInvocation) -> str:
        Path(invocation.paths["path"]).unlink()
        return f"Deleted {invocation.arguments['path']}"

    return registry


@pytest.fixture
def dispatcher(file_registry: ToolRegistry, sandbox: Sandbox, backups: BackupManager):
    return ToolDispatcher(file_registry, sandbox, backups=backups)
