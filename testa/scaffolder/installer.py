"""npm install plans for scaffolded projects.

The plan is a list of argument vectors run in order in the project root.
Any non-zero exit aborts the remaining steps with :class:`CommandError`;
files already written are left in place.
"""

from __future__ import annotations

from pathlib import Path
from typing import Awaitable, Callable

from testa.config import Framework, ProjectSettings
from testa.utils import print_info, run_checked

FRAMEWORK_PACKAGES: dict[Framework, list[str]] = {
    Framework.PLAYWRIGHT: ["playwright", "@playwright/test"],
    Framework.CYPRESS: ["cypress"],
    Framework.SELENIUM: ["selenium-webdriver"],
}

TYPESCRIPT_PACKAGES: dict[Framework, list[str]] = {
    Framework.PLAYWRIGHT: ["typescript", "ts-node", "@types/node"],
    Framework.CYPRESS: ["typescript", "@types/node"],
    Framework.SELENIUM: ["typescript", "ts-node", "@types/node", "@types/selenium-webdriver"],
}

COMMON_PACKAGES: list[str] = ["axios", "jest", "dotenv"]

# Post-install step run only when creating a new project.
FRAMEWORK_SETUP: dict[Framework, list[str]] = {
    Framework.PLAYWRIGHT: ["npx", "playwright", "install"],
    Framework.CYPRESS: ["npx", "cypress", "open"],
}

CommandRunner = Callable[..., Awaitable[str]]


def install_plan(settings: ProjectSettings, new_project: bool = True) -> list[list[str]]:
    """Commands that install the test toolchain for *settings*.

    New projects get ``npm init -y`` first and the framework's own setup
    step last; existing projects only get the two ``npm install`` steps.
    """
    framework_packages = list(FRAMEWORK_PACKAGES[settings.framework])
    if settings.use_typescript:
        framework_packages.extend(TYPESCRIPT_PACKAGES[settings.framework])

    plan: list[list[str]] = []
    if new_project:
        plan.append(["npm", "init", "-y"])
    plan.append(["npm", "install", "--save-dev", *framework_packages])
    plan.append(["npm", "install", "--save-dev", *COMMON_PACKAGES])
    if new_project and settings.framework in FRAMEWORK_SETUP:
        plan.append(list(FRAMEWORK_SETUP[settings.framework]))
    return plan


class DependencyInstaller:
    """Runs an install plan, stopping at the first failing command."""

    def __init__(self, runner: CommandRunner = run_checked) -> None:
        self.runner = runner

    async def install(
        self,
        project_root: str | Path,
        settings: ProjectSettings,
        new_project: bool = True,
    ) -> list[list[str]]:
        """Run the plan in *project_root* and return the commands executed.

        Raises:
            CommandError: A command exited with a non-zero status.
        """
        plan = install_plan(settings, new_project=new_project)
        print_info("Installing dependencies...")
        for cmd in plan:
            print_info(f"$ {' '.join(cmd)}")
            await self.runner(cmd, cwd=project_root)
        return plan
