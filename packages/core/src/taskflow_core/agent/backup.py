"""Backups of project files taken before an agent modifies them.

Every BackupManager owns one session directory:

    <project_root>/.taskflow/backups/<session_id>/<relative path>

The session id is fixed at construction. Backing up the same file twice in
one session overwrites the earlier copy, so each session holds at most one
snapshot per path. Use a new BackupManager per snapshot generation to keep
more history.

Two managers created with the same timestamp share a session directory; pass
an explicit session_id (or a discriminator to make_session_id) when several
agent sessions can run against one project at the same time.
"""

import logging
import os
import shutil
from datetime import datetime, timezone
from pathlib import Path, PurePath
from typing import Iterable, Optional

from taskflow_core.agent.security import AccessDeniedError, PathLike, Sandbox
from taskflow_core.config import DEFAULT_BACKUP_DIR

logger = logging.getLogger(__name__)


def make_session_id(
    now: Optional[datetime] = None, discriminator: Optional[str] = None
) -> str:
    """Build a filesystem-safe session id from a UTC timestamp.

    A naive now is taken as local time and converted to UTC.

    Example: 2026-10-19T08-30-00-123456Z, or 2026-10-19T08-30-00-123456Z-a1b2
    with a discriminator.
    """
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    session_id = now.strftime("%Y-%m-%dT%H-%M-%S-%fZ")
    if discriminator:
        session_id = f"{session_id}-{discriminator}"
    return session_id


def _check_session_id(session_id: str) -> str:
    if not session_id or session_id in (".", "..") or PurePath(session_id).name != session_id:
        raise ValueError(f"Session id must be a single path component: {session_id!r}")
    return session_id


class BackupManager:
    """Manages file backups before modification.

    Example:
        backups = BackupManager("/home/me/proj", session_id="run-1")
        backups.backup_file("/home/me/proj/src/app.py")
        # -> /home/me/proj/.taskflow/backups/run-1/src/app.py

        backups.restore_file("src/app.py")
    """

    def __init__(
        self,
        project_root: PathLike,
        session_id: Optional[str] = None,
        backup_dir: str = DEFAULT_BACKUP_DIR,
        sandbox: Optional[Sandbox] = None,
    ):
        """Initialize BackupManager.

        Args:
            project_root: Root of the project whose files are backed up
            session_id: Name of this session's directory. Defaults to
                make_session_id() at construction time.
            backup_dir: Backup location relative to the project root
            sandbox: Sandbox used to validate paths. Defaults to a plain
                Sandbox over project_root.
        """
        self.sandbox = sandbox or Sandbox(project_root)
        self.project_root = Path(self.sandbox.project_root)
        self.session_id = _check_session_id(session_id or make_session_id())

        # Plain containment check: protected patterns commonly cover the
        # backup directory itself.
        root_only = Sandbox(self.project_root)
        backup_root = root_only.resolve(backup_dir)
        if backup_root == str(self.project_root) or not root_only.is_within(backup_root):
            raise ValueError(f"Backup directory must be inside the project root: {backup_dir}")
        self.backup_root = Path(backup_root)
        self.session_dir = self.backup_root / self.session_id

    @classmethod
    def list_sessions(
        cls, project_root: PathLike, backup_dir: str = DEFAULT_BACKUP_DIR
    ) -> list[str]:
        """Return the names of existing backup sessions, oldest first."""
        backup_root = Path(project_root) / backup_dir
        if not backup_root.is_dir():
            return []
        return sorted(item.name for item in backup_root.iterdir() if item.is_dir())

    def backup_path_for(self, path: PathLike) -> Path:
        """Return where path's backup lives in this session.

        Raises:
            AccessDeniedError: If path is outside the project root
        """
        relative = self.sandbox.relative_path(path)
        if relative == ".":
            raise AccessDeniedError(os.fspath(path), str(self.project_root), "is the project root")
        return self.session_dir / relative

    def has_backup(self, path: PathLike) -> bool:
        """True if this session holds a backup of path."""
        return self.backup_path_for(path).is_file()

    def backup_file(self, path: PathLike) -> Optional[Path]:
        """Create a backup of a file if it exists.

        Args:
            path: Absolute path, or path relative to the project root

        Returns:
            The backup location, or None when there was nothing to back up

        Raises:
            AccessDeniedError: If path is outside the project root
            OSError: If creating directories or copying fails
        """
        source = Path(self.sandbox.validate_path(path))
        if not source.exists():
            return None

        destination = self.backup_path_for(source)
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, destination)

        logger.info(f"[BackupManager] Backed up {source} -> {destination}")
        return destination

    def backup_files(self, paths: Iterable[PathLike]) -> list[Path]:
        """Back up several files; returns the backups that were written."""
        written = []
        for path in paths:
            destination = self.backup_file(path)
            if destination is not None:
                written.append(destination)
        return written

    def restore_file(self, path: PathLike) -> Path:
        """Copy this session's backup of path back over the original.

        Returns:
            The restored (original) path

        Raises:
            FileNotFoundError: If this session has no backup of path
            AccessDeniedError: If path is outside the project root
        """
        target = Path(self.sandbox.validate_path(path))
        backup = self.backup_path_for(target)
        if not backup.is_file():
            raise FileNotFoundError(f"No backup of {path} in session {self.session_id}")

        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(backup, target)

        logger.info(f"[BackupManager] Restored {target} from {backup}")
        return target

    def list_backups(self) -> list[str]:
        """Relative paths (POSIX) of files backed up in this session."""
        if not self.session_dir.is_dir():
            return []
        return sorted(
            item.relative_to(self.session_dir).as_posix()
            for item in self.session_dir.rglob("*")
            if item.is_file()
        )
