"""Exception hierarchy for testa.

Every failure the CLI reports to the user derives from :class:`TestaError`;
the entry point catches it, prints the message and exits with status 1.
"""

from __future__ import annotations


class TestaError(Exception):
    """Base class for all errors raised by testa."""

    __test__ = False  # keep pytest from collecting this as a test class


class NotAProjectError(TestaError):
    """Raised when a directory has no ``package.json`` manifest."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(
            f"No package.json found in {path}. Is this a Node.js project?"
        )


class NoTestStructureError(TestaError):
    """Raised when ``generate`` cannot find ``src/e2e`` or ``tests/e2e``."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(
            f"No valid test structure detected in {path}. "
            'Run "testa init" first to set up the test structure.'
        )


class CommandError(TestaError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, cmd: str, returncode: int, stderr: str = "") -> None:
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr
        detail = f": {stderr.strip()}" if stderr.strip() else ""
        super().__init__(f"Command failed with exit code {returncode}: {cmd}{detail}")


class MissingSettingError(TestaError):
    """Raised when a required configuration value is empty."""

    def __init__(self, setting: str) -> None:
        self.setting = setting
        super().__init__(f"Missing required setting: {setting}")


class FrameworkNotDetectedError(TestaError):
    """Raised when no supported test framework config is found."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"No compatible test framework detected in {path}.")


class TestRunFailedError(TestaError):
    """Raised when the test command exits with a non-zero status."""

    def __init__(self, returncode: int) -> None:
        self.returncode = returncode
        super().__init__(f"Some tests have failed (exit code {returncode})")
