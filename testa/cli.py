"""testa command-line interface.

Commands::

    testa create <projectName> [--type e2e|api|full] [--framework ...]
    testa init [--framework ...]
    testa generate <testType> <testName> [--feature F] [--analyze] [--target DIR]
    testa run [testPattern] [--env ...] [--browser ...]
    testa test [pattern] [--env ...] [--browser ...] [--auth] [--posts]
               [--websocket] [--redis] [--mobile] [--report]
    testa start

``create``, ``init``, ``generate`` and ``start`` prompt for input; pass
``--yes`` to accept every default (settings then come from ``TESTA_*``
environment variables).
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from rich.markup import escape

from testa import __version__
from testa.config import (
    DEFAULT_ADMIN_EMAIL,
    DEFAULT_ADMIN_PASSWORD,
    DEFAULT_API_URL,
    DEFAULT_BASE_URL,
    DEFAULT_FEATURES,
    DEFAULT_USER_EMAIL,
    DEFAULT_USER_PASSWORD,
    FEATURE_LABELS,
    Feature,
    Framework,
    ProjectSettings,
    ProjectType,
)
from testa.errors import NotAProjectError, TestaError
from testa.generator.writer import SpecWriter
from testa.prompts import Prompter, RichPrompter, ScriptedPrompter
from testa.runner import RunOptions, SuiteRunner, apply_shortcuts
from testa.scaffolder.generator import ProjectMaterializer
from testa.scanner import StructuralScanner, select_target
from testa.session import WorkSession
from testa.utils import console, print_error, print_info, print_summary_table

ENVIRONMENTS = ("local", "staging", "production")
BROWSERS = ("chrome", "firefox", "safari")


# ---------------------------------------------------------------------------
# Settings collection
# ---------------------------------------------------------------------------


def prompt_settings(
    prompter: Prompter,
    project_name: str,
    framework: Framework,
    project_type: ProjectType,
    ask_credentials: bool = True,
) -> ProjectSettings:
    """Ask for every setting a new or initialised project needs."""
    base_url = prompter.ask("What is the base URL of the application?", default=DEFAULT_BASE_URL)
    api_url = prompter.ask("What is the API URL?", default=DEFAULT_API_URL)
    use_typescript = prompter.confirm("Do you want to use TypeScript?", default=True)

    credentials = {}
    if ask_credentials:
        credentials = {
            "admin_email": prompter.ask("Admin user email for tests", default=DEFAULT_ADMIN_EMAIL),
            "admin_password": prompter.ask("Admin user password", default=DEFAULT_ADMIN_PASSWORD),
            "user_email": prompter.ask("Regular user email for tests", default=DEFAULT_USER_EMAIL),
            "user_password": prompter.ask("Regular user password", default=DEFAULT_USER_PASSWORD),
        }

    features = list(Feature)
    picked = prompter.checkbox(
        "Select the features you want to include",
        [FEATURE_LABELS[f] for f in features],
        checked=[i for i, f in enumerate(features) if f in DEFAULT_FEATURES],
    )

    return ProjectSettings(
        project_name=project_name,
        base_url=base_url,
        api_url=api_url,
        use_typescript=use_typescript,
        features=frozenset(features[i] for i in picked),
        framework=framework,
        project_type=project_type,
        **credentials,
    )


def _collect_settings(
    args: argparse.Namespace,
    prompter: Prompter,
    project_name: str,
    ask_credentials: bool = True,
) -> ProjectSettings:
    framework = Framework(args.framework)
    project_type = ProjectType(getattr(args, "type", ProjectType.FULL.value))
    if args.yes:
        return ProjectSettings.from_env(project_name, framework, project_type)
    return prompt_settings(prompter, project_name, framework, project_type, ask_credentials)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


async def cmd_create(args: argparse.Namespace, prompter: Prompter) -> None:
    console.print(
        f"Creating a new test project [bold]{escape(args.project_name)}[/bold] using {args.framework}..."
    )
    settings = _collect_settings(args, prompter, args.project_name)
    await ProjectMaterializer(settings, install=not args.skip_install).create(Path.cwd())


async def cmd_init(args: argparse.Namespace, prompter: Prompter) -> None:
    cwd = Path.cwd()
    console.print(f"Initializing tests in the current project using {args.framework}...")
    if not (cwd / "package.json").is_file():
        raise NotAProjectError(str(cwd))
    settings = _collect_settings(args, prompter, cwd.name, ask_credentials=False)
    await ProjectMaterializer(settings, install=not args.skip_install).init_existing(cwd)


async def cmd_generate(args: argparse.Namespace, prompter: Prompter) -> None:
    console.print(f"Generating a new {escape(args.test_type)} test: {escape(args.test_name)}")
    selection = None

    if args.analyze:
        target = Path(args.target) if args.target else Path.cwd()
        print_info(f"Analyzing application in {target} to create targeted tests...")
        try:
            result = await StructuralScanner().scan(target, args.test_type)
        except Exception as exc:
            print_error(f"Error analyzing application: {exc}")
            if not prompter.confirm(
                "Would you like to generate a generic test template instead?", default=True
            ):
                return
        else:
            print_summary_table(result.summary(), title="Application scan")
            selection = select_target(result, args.test_type, prompter)

    await SpecWriter(Path.cwd()).generate(
        args.test_type, args.test_name, selection, feature=args.feature
    )


async def cmd_run(args: argparse.Namespace, prompter: Prompter) -> None:
    options = RunOptions(pattern=args.test_pattern or "", env=args.env, browser=args.browser)
    await SuiteRunner(Path.cwd()).run(options)


async def cmd_test(args: argparse.Namespace, prompter: Prompter) -> None:
    pattern = apply_shortcuts(
        args.pattern or "",
        auth=args.auth,
        posts=args.posts,
        websocket=args.websocket,
        redis=args.redis,
    )
    options = RunOptions(
        pattern=pattern,
        env=args.env,
        browser=args.browser,
        mobile=args.mobile,
        report=args.report,
    )
    runner = SuiteRunner(Path.cwd())
    console.print("Running tests...")
    await runner.preflight()
    await runner.test(options)


async def cmd_start(args: argparse.Namespace, prompter: Prompter) -> None:
    console.print("Starting a work session on the test project...")

    async def create_project(name: str) -> None:
        create_args = argparse.Namespace(
            project_name=name,
            framework=Framework.PLAYWRIGHT.value,
            type=ProjectType.FULL.value,
            yes=args.yes,
            skip_install=False,
        )
        await cmd_create(create_args, prompter)

    await WorkSession(prompter, Path.cwd(), create_project=create_project).start()


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="testa",
        description="CLI tool for creating and managing test automation projects",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  testa create shop-tests --framework playwright\n"
            "  testa generate api \"List users\" --analyze --target ../shop\n"
            "  testa test --auth --browser firefox --report\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    interactive = argparse.ArgumentParser(add_help=False)
    interactive.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Accept every default instead of prompting",
    )

    frameworks = [f.value for f in Framework]
    sub = parser.add_subparsers(dest="command", required=True, metavar="<command>")

    create = sub.add_parser(
        "create", aliases=["new"], parents=[interactive],
        help="Create a new test automation project",
    )
    create.add_argument("project_name", metavar="projectName")
    create.add_argument(
        "--type", "-t",
        choices=[t.value for t in ProjectType],
        default=ProjectType.FULL.value,
        help="Project type (default: full)",
    )
    create.add_argument(
        "--framework", "-f",
        choices=frameworks,
        default=Framework.PLAYWRIGHT.value,
        help="Test framework (default: playwright)",
    )
    create.add_argument("--skip-install", action="store_true", help="Do not run npm")
    create.set_defaults(handler=cmd_create)

    init = sub.add_parser(
        "init", parents=[interactive],
        help="Initialize tests in an existing project",
    )
    init.add_argument(
        "--framework", "-f",
        choices=frameworks,
        default=Framework.PLAYWRIGHT.value,
        help="Test framework (default: playwright)",
    )
    init.add_argument("--skip-install", action="store_true", help="Do not run npm")
    init.set_defaults(handler=cmd_init)

    generate = sub.add_parser(
        "generate", aliases=["g"], parents=[interactive],
        help="Generate a new test",
    )
    generate.add_argument("test_type", metavar="testType")
    generate.add_argument("test_name", metavar="testName")
    generate.add_argument("--feature", "-f", default=None, help="Feature the test belongs to")
    generate.add_argument(
        "--analyze", "-a",
        action="store_true",
        help="Analyze the application structure to create targeted tests",
    )
    generate.add_argument(
        "--target", "-t",
        default=None,
        help="Application directory to analyze (default: current directory)",
    )
    generate.set_defaults(handler=cmd_generate)

    run = sub.add_parser("run", aliases=["r"], help="Run tests")
    run.add_argument("test_pattern", nargs="?", default="", metavar="testPattern")
    run.add_argument("--env", "-e", choices=ENVIRONMENTS, default="local")
    run.add_argument("--browser", "-b", choices=BROWSERS, default="chrome")
    run.set_defaults(handler=cmd_run, yes=True)

    test = sub.add_parser("test", aliases=["t"], help="Run Playwright tests with shortcuts")
    test.add_argument("pattern", nargs="?", default="")
    test.add_argument("--env", "-e", choices=ENVIRONMENTS, default="local")
    test.add_argument("--browser", "-b", choices=(*BROWSERS, "all"), default="chrome")
    test.add_argument("--auth", "-a", action="store_true", help="Run only authentication tests")
    test.add_argument("--posts", "-p", action="store_true", help="Run only post tests")
    test.add_argument("--websocket", "-w", action="store_true", help="Run only WebSocket tests")
    test.add_argument("--redis", "-r", action="store_true", help="Run only Redis resilience tests")
    test.add_argument("--mobile", "-m", action="store_true", help="Add mobile device projects")
    test.add_argument("--report", action="store_true", help="Show report after tests")
    test.set_defaults(handler=cmd_test, yes=True)

    start = sub.add_parser(
        "start", parents=[interactive],
        help="Start working on a test project",
    )
    start.set_defaults(handler=cmd_start)

    return parser


def build_prompter(args: argparse.Namespace) -> Prompter:
    return ScriptedPrompter() if args.yes else RichPrompter()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: Optional[list[str]] = None) -> None:
    """Console-script entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    prompter = build_prompter(args)

    try:
        asyncio.run(args.handler(args, prompter))
    except TestaError as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\nInterrupted.")
        sys.exit(130)


if __name__ == "__main__":
    main()
