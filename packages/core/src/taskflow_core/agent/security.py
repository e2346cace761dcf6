"""Security layer for agent file operations - project root sandboxing.

Sandbox is the boundary every path argument from a tool call must pass
before anything touches the filesystem:
- Lexical resolution against the project root (no filesystem access)
- Containment by path segments, so /proj-other is never inside /proj
- Optional protected patterns (gitignore syntax) inside the root

Limitations:
- Symlinks are NOT resolved. A link inside the root that points outside it
  passes validation. Mitigate one layer up if untrusted links can exist.
- Validation and use are not atomic (TOCTOU).
"""

import logging
import os
from pathlib import PurePath
from typing import Iterable, Optional, Union

import pathspec

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


class SecurityError(Exception):
    """Raised when a security validation fails."""

    pass


class AccessDeniedError(SecurityError):
    """Raised when a path is not allowed inside the sandbox.

    Attributes:
        path: The path exactly as it was requested
        resolved: The absolute, normalized path it resolved to
    """

    def __init__(self, path: str, resolved: str, reason: str = "is outside project root"):
        self.path = path
        self.resolved = resolved
        self.reason = reason
        super().__init__(f"Access denied: Path {path} {reason}")


class Sandbox:
    """Ensures paths stay within the project root.

    Example:
        sandbox = Sandbox("/home/me/proj")

        sandbox.validate_path("src/index.ts")      # "/home/me/proj/src/index.ts"
        sandbox.validate_path("../../etc/passwd")  # AccessDeniedError
        sandbox.validate_path("/home/me/proj-x/a") # AccessDeniedError

        guarded = Sandbox("/home/me/proj", protected_patterns=[".git/"])
        guarded.validate_path(".git/config")       # AccessDeniedError
    """

    def __init__(
        self,
        project_root: PathLike,
        protected_patterns: Optional[Iterable[str]] = None,
    ):
        """Initialize Sandbox.

        Args:
            project_root: Directory all paths must stay within. Made absolute
                and normalized once; it does not need to exist.
            protected_patterns: Optional gitignore-style patterns, relative to
                the root, that are denied even though they are inside it.
        """
        self.project_root = os.path.abspath(os.fspath(project_root))
        self.protected_patterns = list(protected_patterns or [])
        self._protected_spec = (
            pathspec.GitIgnoreSpec.from_lines(self.protected_patterns)
            if self.protected_patterns
            else None
        )

    def resolve(self, path: PathLike) -> str:
        """Resolve path against the root lexically, without validating it."""
        return os.path.normpath(os.path.join(self.project_root, os.fspath(path)))

    def is_within(self, path: PathLike) -> bool:
        """True if path resolves to the root or somewhere below it.

        Containment only: protected patterns are not checked, so a path can be
        within the root and still be rejected by validate_path().
        """
        try:
            PurePath(self.resolve(path)).relative_to(self.project_root)
        except ValueError:
            return False
        return True

    def validate_path(self, path: PathLike) -> str:
        """Validate that a path is safe (within project root).

        Args:
            path: Relative (to the project root) or absolute path

        Returns:
            The absolute, normalized path

        Raises:
            AccessDeniedError: If the path resolves outside the project root
                or matches a protected pattern
        """
        requested = os.fspath(path)
        resolved = self.resolve(requested)

        try:
            relative = PurePath(resolved).relative_to(self.project_root)
        except ValueError:
            logger.warning(f"[Sandbox] Denied {requested!r}: resolves to {resolved}")
            raise AccessDeniedError(requested, resolved) from None

        if self._protected_spec is not None and relative.parts:
            rel_posix = relative.as_posix()
            # Lexical check cannot tell files from directories; try both so a
            # directory pattern like ".git/" also covers ".git" itself
            if self._protected_spec.match_file(rel_posix) or self._protected_spec.match_file(
                rel_posix + "/"
            ):
                logger.warning(f"[Sandbox] Denied {requested!r}: protected path {rel_posix}")
                raise AccessDeniedError(requested, resolved, reason="is a protected path")

        return resolved

    def relative_path(self, path: PathLike) -> str:
        """Validate path and return it relative to the root (POSIX separators)."""
        resolved = self.validate_path(path)
        return PurePath(resolved).relative_to(self.project_root).as_posix()
