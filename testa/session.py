"""Interactive ``start`` session.

Offers the common day-to-day actions on a test project from one menu: run
tests, generate a test, edit the framework config, view the last report and
watch mode.  Outside a test project it offers to create one instead.
"""

from __future__ import annotations

import json
import sys
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Optional

from rich.markup import escape

from testa.generator.writer import SpecWriter
from testa.prompts import Prompter
from testa.runner import CommandRunner, RunOptions, SuiteRunner, config_file, is_test_project
from testa.utils import console, print_info, print_warning, run_command

DEFAULT_PROJECT_NAME = "my-test-project"
DEFAULT_TEST_NAME = "my-test"


class SessionAction(str, Enum):
    RUN = "run"
    GENERATE = "generate"
    CONFIG = "config"
    REPORT = "report"
    WATCH = "watch"


ACTION_LABELS: dict[SessionAction, str] = {
    SessionAction.RUN: "Run tests",
    SessionAction.GENERATE: "Generate a new test",
    SessionAction.CONFIG: "Edit configuration",
    SessionAction.REPORT: "View test reports",
    SessionAction.WATCH: "Run in watch mode",
}

RUN_SCOPES: list[tuple[str, str]] = [
    ("all", "All tests"),
    ("api", "API tests"),
    ("e2e", "UI tests"),
    ("websocket", "WebSocket tests"),
]

GENERATE_TYPES: list[tuple[str, str]] = [
    ("api", "API"),
    ("e2e", "UI/E2E"),
    ("websocket", "WebSocket"),
    ("performance", "Performance"),
    ("visual", "Visual"),
]


def scope_pattern(scope: str) -> str:
    """Pattern selecting one test directory under either ``src`` or ``tests``."""
    if scope == "all":
        return ""
    return f"src/{scope} tests/{scope}"


def editor_commands(path: Path, platform: str = sys.platform) -> list[str]:
    """Shell commands tried in order to open *path* for editing."""
    if platform == "darwin":
        opener = "open"
    elif platform.startswith("win"):
        opener = "start"
    else:
        opener = "xdg-open"
    return [f'code "{path}"', f'{opener} "{path}"']


class WorkSession:
    """The ``start`` menu bound to one project directory."""

    def __init__(
        self,
        prompter: Prompter,
        project_root: str | Path = ".",
        create_project: Optional[Callable[[str], Awaitable[object]]] = None,
        runner: Optional[SuiteRunner] = None,
        writer: Optional[SpecWriter] = None,
        command_runner: CommandRunner = run_command,
    ) -> None:
        self.prompter = prompter
        self.project_root = Path(project_root)
        self.create_project = create_project
        self.command_runner = command_runner
        self.runner = runner or SuiteRunner(self.project_root, runner=command_runner)
        self.writer = writer or SpecWriter(self.project_root)

    async def start(self) -> Optional[SessionAction]:
        """Show the menu and perform the chosen action.

        Returns the action performed, or ``None`` when no project was found.
        """
        if not is_test_project(self.project_root):
            await self._offer_create()
            return None

        console.print(f"Project: [bold]{escape(self._project_name())}[/bold]")
        actions = list(SessionAction)
        index = self.prompter.select(
            "What do you want to do?", [ACTION_LABELS[a] for a in actions]
        )
        action = actions[index]

        if action is SessionAction.RUN:
            await self._run_tests()
        elif action is SessionAction.GENERATE:
            await self._generate_test()
        elif action is SessionAction.CONFIG:
            await self._edit_config()
        elif action is SessionAction.REPORT:
            await self.runner.show_report()
        else:
            await self.runner.watch()
        return action

    # -- Actions -----------------------------------------------------------

    async def _offer_create(self) -> None:
        print_warning("You don't seem to be in the root of a test project.")
        if not self.prompter.confirm("Do you want to create a new test project?", default=True):
            console.print("Goodbye!")
            return
        name = self.prompter.ask("Project name", default=DEFAULT_PROJECT_NAME)
        if self.create_project is not None:
            await self.create_project(name)

    async def _run_tests(self) -> None:
        index = self.prompter.select(
            "What tests do you want to run?", [label for _, label in RUN_SCOPES]
        )
        scope = RUN_SCOPES[index][0]
        await self.runner.run(RunOptions(pattern=scope_pattern(scope)))

    async def _generate_test(self) -> None:
        index = self.prompter.select(
            "What type of test do you want to generate?",
            [label for _, label in GENERATE_TYPES],
        )
        test_type = GENERATE_TYPES[index][0]
        name = self.prompter.ask("Test name", default=DEFAULT_TEST_NAME)
        await self.writer.generate(test_type, name)

    async def _edit_config(self) -> None:
        path = config_file(self.project_root)
        if path is None:
            print_warning("No configuration file found.")
            return
        print_info(f"Opening {path.name} in your editor...")
        for cmd in editor_commands(path):
            returncode, _, _ = await self.command_runner(cmd, cwd=self.project_root)
            if returncode == 0:
                return
        print_warning(f"Could not open an editor; edit {path} manually")

    def _project_name(self) -> str:
        manifest = self.project_root / "package.json"
        data = json.loads(manifest.read_text(encoding="utf-8"))
        return str(data.get("name") or self.project_root.resolve().name)
