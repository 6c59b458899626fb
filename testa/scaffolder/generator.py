"""Project materializer.

Builds the on-disk test project for ``create`` (a new directory) and
``init`` (an existing Node.js project): directory skeleton, framework files
(copied from a template directory through placeholder substitution, or
synthesized from Jinja2 templates), the ``.env`` file and finally the npm
dependency install.

There is no rollback: if an install command fails, the files written so
far stay on disk and the :class:`~testa.errors.CommandError` propagates.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Optional

from testa.config import (
    DEFAULT_ADMIN_EMAIL,
    DEFAULT_ADMIN_PASSWORD,
    DEFAULT_USER_EMAIL,
    DEFAULT_USER_PASSWORD,
    OPTIONAL_DIR_FEATURES,
    Framework,
    ProjectSettings,
    framework_template_dir,
)
from testa.errors import NotAProjectError
from testa.generator.test_templates import build_default_test
from testa.utils import console, ensure_dir, print_info, print_success, print_warning, write_text

from .installer import DependencyInstaller
from .substitution import copy_template, placeholder_values
from .templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------

BASE_TEST_DIRS: tuple[str, ...] = ("api", "config", "e2e", "utils", "models")

MANIFEST_FILE = "package.json"
ENV_FILE = ".env"

FRAMEWORK_CONFIG_FILES: dict[Framework, str] = {
    Framework.PLAYWRIGHT: "playwright.config.{ext}",
    Framework.CYPRESS: "cypress.json",
    Framework.SELENIUM: "jest.config.js",
}

_FRAMEWORK_CONFIG_TEMPLATES: dict[Framework, str] = {
    Framework.PLAYWRIGHT: "playwright.config.j2",
    Framework.CYPRESS: "cypress.json.j2",
    Framework.SELENIUM: "jest.config.j2",
}


def skeleton_dirs(settings: ProjectSettings, base: str, temp_dir: str) -> list[str]:
    """Relative directories making up the test skeleton.

    ``<base>/{api,config,e2e,utils,models}``, *temp_dir*, then one
    ``<base>/<feature>`` per enabled websocket/performance/visual feature.
    """
    dirs = [f"{base}/{name}" for name in BASE_TEST_DIRS]
    dirs.append(temp_dir)
    for feature in OPTIONAL_DIR_FEATURES:
        if settings.has_feature(feature):
            dirs.append(f"{base}/{feature.value}")
    return dirs


def npm_test_scripts(framework: Framework, base: str) -> dict[str, str]:
    """npm scripts running the whole suite, the e2e tests and the API tests."""
    if framework is Framework.PLAYWRIGHT:
        return {
            "test": "playwright test",
            "test:e2e": f"playwright test {base}/e2e",
            "test:api": f"playwright test {base}/api",
        }
    if framework is Framework.CYPRESS:
        return {
            "test": "cypress run",
            "test:e2e": "cypress run",
            "test:api": f'cypress run --spec "{base}/api/**"',
        }
    return {
        "test": "jest",
        "test:e2e": f"jest {base}/e2e",
        "test:api": f"jest {base}/api",
    }


# ---------------------------------------------------------------------------
# Materializer
# ---------------------------------------------------------------------------


class ProjectMaterializer:
    """Creates or extends a test project from one :class:`ProjectSettings`."""

    def __init__(
        self,
        settings: ProjectSettings,
        renderer: Optional[TemplateRenderer] = None,
        installer: Optional[DependencyInstaller] = None,
        install: bool = True,
    ) -> None:
        self.settings = settings
        self.renderer = renderer or TemplateRenderer()
        self.installer = installer or DependencyInstaller()
        self.install = install

    # -- Public API --------------------------------------------------------

    async def create(self, parent_dir: str | Path = ".") -> Path:
        """Create ``<parent_dir>/<project_name>`` as a new test project.

        Returns:
            Path to the project root.

        Raises:
            MissingSettingError: A required setting is empty.
            CommandError: An install command failed.
        """
        placeholder_values(self.settings)
        project_root = Path(parent_dir).resolve() / self.settings.project_name
        await asyncio.to_thread(ensure_dir, project_root)

        # 1. Directory skeleton
        await self._create_directory_structure(
            project_root, skeleton_dirs(self.settings, "src", "temp")
        )

        # 2. Framework files
        template_dir = framework_template_dir(self.settings.framework)
        if template_dir.is_dir():
            print_info(f"Copying {self.settings.framework.value} template...")
            await copy_template(template_dir, project_root, self.settings)
        else:
            await self._synthesize_defaults(project_root)

        # 3. Environment file
        await self._write_env_file(project_root, self._context())

        # 4. Dependencies
        if self.install:
            await self.installer.install(project_root, self.settings, new_project=True)

        print_success(f"Project {self.settings.project_name} created successfully!")
        self._print_create_next_steps()
        return project_root

    async def init_existing(self, project_root: str | Path = ".") -> Path:
        """Add a ``tests/`` skeleton and test tooling to an existing project.

        Raises:
            NotAProjectError: *project_root* has no ``package.json``.
            CommandError: An install command failed.
        """
        project_root = Path(project_root).resolve()
        placeholder_values(self.settings)
        manifest = project_root / MANIFEST_FILE
        if not manifest.is_file():
            raise NotAProjectError(str(project_root))

        print_info(f"Creating directory structure for tests in {project_root}...")
        await self._create_directory_structure(
            project_root, skeleton_dirs(self.settings, "tests", "tests/temp")
        )

        context = self._context(
            admin_email=self.settings.admin_email or DEFAULT_ADMIN_EMAIL,
            admin_password=self.settings.admin_password or DEFAULT_ADMIN_PASSWORD,
            user_email=self.settings.user_email or DEFAULT_USER_EMAIL,
            user_password=self.settings.user_password or DEFAULT_USER_PASSWORD,
        )

        if self.settings.framework is Framework.PLAYWRIGHT:
            await self._write_playwright_starter(project_root, context)

        await self._write_env_file(project_root, context)
        await asyncio.to_thread(
            merge_scripts, manifest, npm_test_scripts(self.settings.framework, "tests")
        )

        if self.install:
            await self.installer.install(project_root, self.settings, new_project=False)

        print_success("Project configured successfully for testing!")
        console.print("\nTo run the tests:\n  npm test")
        console.print(
            "\nA .env file has been created with default values."
            "\nMake sure to update it with your actual credentials and URLs."
        )
        return project_root

    # -- Internal steps ----------------------------------------------------

    def _context(self, **overrides: Any) -> dict[str, Any]:
        s = self.settings
        context: dict[str, Any] = {
            "project_name": s.project_name,
            "base_url": s.base_url,
            "api_url": s.api_url,
            "admin_email": s.admin_email,
            "admin_password": s.admin_password,
            "user_email": s.user_email,
            "user_password": s.user_password,
            "use_typescript": s.use_typescript,
            "ext": s.source_ext,
            "framework": s.framework.value,
            "project_type": s.project_type.value,
            "optional_dirs": [f.value for f in OPTIONAL_DIR_FEATURES if s.has_feature(f)],
        }
        context.update(overrides)
        return context

    async def _create_directory_structure(self, root: Path, dirs: list[str]) -> None:
        for rel in dirs:
            await asyncio.to_thread(ensure_dir, root / rel)

    async def _synthesize_defaults(self, root: Path) -> None:
        """Write the minimal file set used when no template directory exists."""
        print_info("No framework template found; creating default files...")
        context = self._context(
            scripts=npm_test_scripts(self.settings.framework, "src"),
            test_dir="./src",
            timeout=60000,
        )
        ext = self.settings.source_ext
        framework = self.settings.framework
        config_name = FRAMEWORK_CONFIG_FILES[framework].format(ext=ext)

        targets = [
            ("package.json.j2", MANIFEST_FILE),
            (_FRAMEWORK_CONFIG_TEMPLATES[framework], config_name),
            ("environments.j2", f"src/config/environments.{ext}"),
            ("user.model.j2", f"src/models/user.model.{ext}"),
            ("README.md.j2", "README.md"),
            ("env.example.j2", ".env.example"),
        ]
        for template, rel in targets:
            await self.renderer.render_to_file(template, root / rel, context)

    async def _write_playwright_starter(self, root: Path, context: dict[str, Any]) -> None:
        config_path = root / "playwright.config.ts"
        if config_path.exists():
            print_warning("playwright.config.ts already exists; leaving it unchanged")
        else:
            await self.renderer.render_to_file(
                "playwright.config.j2",
                config_path,
                {**context, "use_typescript": True, "test_dir": "./tests/e2e", "timeout": 30000},
            )

        sample = root / "tests" / "e2e" / "basic.spec.ts"
        if not sample.exists():
            await asyncio.to_thread(write_text, sample, build_default_test("basic"))

    async def _write_env_file(self, root: Path, context: dict[str, Any]) -> None:
        await self.renderer.render_to_file("dotenv.j2", root / ENV_FILE, context)

    def _print_create_next_steps(self) -> None:
        console.print("\nTo get started:\n")
        console.print(f"  cd {self.settings.project_name}")
        console.print("  # A .env file has been created with default values")
        console.print("  # You may need to update:")
        console.print("  #  - Admin credentials (ADMIN_EMAIL, ADMIN_PASSWORD)")
        console.print("  #  - User credentials (USER_EMAIL, USER_PASSWORD)")
        console.print("  #  - Base URLs (BASE_URL, API_URL) if they differ from what you configured\n")
        console.print("  testa start\n")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def merge_scripts(manifest: Path, scripts: dict[str, str]) -> dict[str, Any]:
    """Add *scripts* to the ``scripts`` section of a ``package.json``.

    Existing scripts with other names are kept; same-named ones are
    replaced.  Returns the updated manifest data.
    """
    data = json.loads(manifest.read_text(encoding="utf-8"))
    data["scripts"] = {**(data.get("scripts") or {}), **scripts}
    manifest.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    return data
