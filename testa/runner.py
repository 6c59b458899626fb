"""Test execution for scaffolded projects.

Detects which test toolchain a project uses from its config files, builds
the command line for ``run`` / ``test`` / watch mode and runs it with the
project's ``TEST_ENV``.  Output is streamed straight to the terminal.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Optional

import httpx
from dotenv import dotenv_values
from pydantic import BaseModel, Field

from testa.errors import FrameworkNotDetectedError, TestRunFailedError
from testa.utils import print_info, print_success, print_warning, run_command

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

PLAYWRIGHT_CONFIGS: tuple[str, ...] = ("playwright.config.ts", "playwright.config.js")
CYPRESS_CONFIG = "cypress.json"
JEST_CONFIG = "jest.config.js"
MANIFEST_FILE = "package.json"
ENV_FILE = ".env"

REPORT_DIR = "playwright-report"
REPORT_COMMAND: list[str] = ["npx", "playwright", "show-report"]

# CLI browser names -> Playwright project names
BROWSER_PROJECTS: dict[str, str] = {
    "chrome": "chromium",
    "chromium": "chromium",
    "firefox": "firefox",
    "safari": "webkit",
    "webkit": "webkit",
}
ALL_BROWSERS = "all"
MOBILE_PROJECTS: tuple[str, ...] = ("mobile-chrome", "mobile-safari")

# Flag -> spec file; applied in this order, so the last flag set wins.
PATTERN_SHORTCUTS: tuple[tuple[str, str], ...] = (
    ("auth", "auth.spec.ts"),
    ("posts", "posts.spec.ts"),
    ("websocket", "websocket.spec.ts"),
    ("redis", "redis.spec.ts"),
)

PREFLIGHT_TIMEOUT = 5.0


class Toolchain(str, Enum):
    """Test runners a project can be driven with."""
    PLAYWRIGHT = "playwright"
    CYPRESS = "cypress"
    JEST = "jest"


class RunOptions(BaseModel):
    """Options shared by ``run`` and ``test``."""
    pattern: str = Field(default="", description="Whitespace-separated test paths/patterns")
    env: str = Field(default="local", description="Value exported as TEST_ENV")
    browser: str = Field(default="chrome")
    mobile: bool = Field(default=False)
    report: bool = Field(default=False, description="Open the HTML report afterwards")


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------


def detect_toolchain(project_root: str | Path) -> Optional[Toolchain]:
    """Return the toolchain whose config file is present, if any."""
    root = Path(project_root)
    if any((root / name).is_file() for name in PLAYWRIGHT_CONFIGS):
        return Toolchain.PLAYWRIGHT
    if (root / CYPRESS_CONFIG).is_file():
        return Toolchain.CYPRESS
    if (root / JEST_CONFIG).is_file():
        return Toolchain.JEST
    return None


def is_test_project(project_root: str | Path) -> bool:
    """A ``package.json`` plus a recognised test config."""
    root = Path(project_root)
    return (root / MANIFEST_FILE).is_file() and detect_toolchain(root) is not None


def config_file(project_root: str | Path) -> Optional[Path]:
    """First existing test config in detection order."""
    root = Path(project_root)
    for name in (*PLAYWRIGHT_CONFIGS, CYPRESS_CONFIG, JEST_CONFIG):
        if (root / name).is_file():
            return root / name
    return None


# ---------------------------------------------------------------------------
# Command building
# ---------------------------------------------------------------------------


def apply_shortcuts(pattern: str = "", **flags: bool) -> str:
    """Replace *pattern* with the spec file named by the last set flag."""
    for flag, spec_file in PATTERN_SHORTCUTS:
        if flags.get(flag):
            pattern = spec_file
    return pattern


def playwright_command(options: RunOptions) -> list[str]:
    """``npx playwright test`` with pattern, browser and mobile projects."""
    cmd = ["npx", "playwright", "test", *options.pattern.split()]
    if options.browser and options.browser != ALL_BROWSERS:
        project = BROWSER_PROJECTS.get(options.browser, options.browser)
        cmd.append(f"--project={project}")
    if options.mobile:
        cmd.extend(f"--project={project}" for project in MOBILE_PROJECTS)
    return cmd


def toolchain_command(toolchain: Toolchain, options: RunOptions) -> list[str]:
    """Command running the suite (or *options.pattern*) with *toolchain*."""
    if toolchain is Toolchain.PLAYWRIGHT:
        return playwright_command(options)
    if toolchain is Toolchain.CYPRESS:
        cmd = ["npx", "cypress", "run"]
        if options.pattern:
            cmd.extend(["--spec", ",".join(options.pattern.split())])
        if options.browser in ("chrome", "firefox"):
            cmd.extend(["--browser", options.browser])
        return cmd
    return ["npx", "jest", *options.pattern.split()]


def watch_command(toolchain: Toolchain) -> list[str]:
    if toolchain is Toolchain.PLAYWRIGHT:
        return [
            "npx", "nodemon",
            "--watch", "src", "--watch", "tests",
            "--exec", "npx playwright test",
        ]
    if toolchain is Toolchain.CYPRESS:
        return ["npx", "cypress", "open"]
    return ["npx", "jest", "--watch"]


# ---------------------------------------------------------------------------
# Preflight
# ---------------------------------------------------------------------------


def read_project_env(project_root: str | Path) -> dict[str, str]:
    """Values from the project's ``.env`` (empty when there is none)."""
    path = Path(project_root) / ENV_FILE
    if not path.is_file():
        return {}
    return {k: v for k, v in dotenv_values(path).items() if v is not None}


async def check_reachable(url: str, timeout: float = PREFLIGHT_TIMEOUT) -> bool:
    """True when *url* answers an HTTP GET with any status."""
    try:
        async with httpx.AsyncClient(timeout=httpx.Timeout(timeout)) as client:
            await client.get(url)
    except httpx.HTTPError:
        return False
    return True


# ---------------------------------------------------------------------------
# SuiteRunner
# ---------------------------------------------------------------------------


CommandRunner = Callable[..., Awaitable[tuple[int, str, str]]]


class SuiteRunner:
    """Runs a project's tests in its root directory."""

    def __init__(
        self,
        project_root: str | Path = ".",
        runner: CommandRunner = run_command,
    ) -> None:
        self.project_root = Path(project_root)
        self.runner = runner

    async def preflight(self) -> bool:
        """Warn (without failing) when the configured BASE_URL is down."""
        base_url = read_project_env(self.project_root).get("BASE_URL")
        if not base_url:
            return True
        reachable = await check_reachable(base_url)
        if not reachable:
            print_warning(f"{base_url} is not reachable; tests against it will likely fail")
        return reachable

    async def test(self, options: RunOptions) -> None:
        """Run the Playwright suite, optionally followed by the HTML report.

        Raises:
            FrameworkNotDetectedError: The project has no Playwright config.
            TestRunFailedError: The test command exited non-zero.
        """
        if detect_toolchain(self.project_root) is not Toolchain.PLAYWRIGHT:
            raise FrameworkNotDetectedError(str(self.project_root))
        await self._execute(playwright_command(options), options)

    async def run(self, options: RunOptions) -> None:
        """Run the suite with whichever toolchain the project uses.

        Raises:
            FrameworkNotDetectedError: No test config was found.
            TestRunFailedError: The test command exited non-zero.
        """
        toolchain = detect_toolchain(self.project_root)
        if toolchain is None:
            raise FrameworkNotDetectedError(str(self.project_root))
        await self._execute(toolchain_command(toolchain, options), options)

    async def show_report(self) -> bool:
        """Open the Playwright HTML report; False when none exists yet."""
        if not (self.project_root / REPORT_DIR).is_dir():
            print_warning("No reports found. Run the tests first.")
            return False
        print_info("Opening test report...")
        returncode, _, _ = await self.runner(REPORT_COMMAND, cwd=self.project_root, capture=False)
        if returncode != 0:
            print_warning("Could not open the test report")
        return returncode == 0

    async def watch(self) -> None:
        """Re-run tests on change until the watcher exits."""
        toolchain = detect_toolchain(self.project_root)
        if toolchain is None:
            print_warning("No compatible framework detected for watch mode.")
            return
        print_info("Running tests in watch mode...")
        await self.runner(watch_command(toolchain), cwd=self.project_root, capture=False)
        print_info("Watch mode ended.")

    async def _execute(self, cmd: list[str], options: RunOptions) -> None:
        target = f' matching "{options.pattern}"' if options.pattern else ""
        print_info(f"Running tests{target} in {options.env} environment")
        returncode, _, _ = await self.runner(
            cmd,
            cwd=self.project_root,
            capture=False,
            env={"TEST_ENV": options.env},
        )
        if returncode == 0:
            if options.report:
                await self.show_report()
            print_success("Tests completed successfully")
            return

        if options.report:
            await self.show_report()
        raise TestRunFailedError(returncode)
