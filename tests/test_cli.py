"""Tests for the command-line entry point (testa.cli).

Commands are driven through ``main(argv)`` in a temporary working
directory; npm is never invoked (``--skip-install``) and test runs go
through a patched SuiteRunner.
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from testa import cli
from testa.config import Feature, Framework, ProjectType
from testa.errors import TestRunFailedError
from testa.prompts import ScriptedPrompter
from testa.runner import RunOptions

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("TESTA_BASE_URL", "TESTA_API_URL", "TESTA_FEATURES", "TESTA_TYPESCRIPT"):
        monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class TestParser:
    def test_create_defaults(self):
        args = cli.build_parser().parse_args(["create", "shop"])
        assert args.project_name == "shop"
        assert args.type == "full"
        assert args.framework == "playwright"
        assert args.yes is False
        assert args.handler is cli.cmd_create

    def test_aliases(self):
        parser = cli.build_parser()
        assert parser.parse_args(["new", "x"]).handler is cli.cmd_create
        assert parser.parse_args(["g", "api", "x"]).handler is cli.cmd_generate
        assert parser.parse_args(["r"]).handler is cli.cmd_run
        assert parser.parse_args(["t"]).handler is cli.cmd_test

    def test_test_flags(self):
        args = cli.build_parser().parse_args(
            ["test", "--auth", "--browser", "all", "--mobile", "--report", "-e", "staging"]
        )
        assert (args.auth, args.browser, args.mobile, args.report, args.env) == (
            True, "all", True, True, "staging",
        )

    def test_run_rejects_unknown_browser(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["run", "--browser", "opera"])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])


# ---------------------------------------------------------------------------
# Settings prompts
# ---------------------------------------------------------------------------


class TestPromptSettings:
    def test_answers(self):
        prompter = ScriptedPrompter(
            ["http://a:1", "http://a:1/api", False, "ad@a", "pw", "u@a", "upw", [1, 3]]
        )
        s = cli.prompt_settings(prompter, "p", Framework.CYPRESS, ProjectType.API)

        assert s.base_url == "http://a:1"
        assert s.use_typescript is False
        assert s.admin_password == "pw"
        assert s.features == frozenset({Feature.API, Feature.WEBSOCKET})
        assert s.framework is Framework.CYPRESS

    def test_defaults(self):
        s = cli.prompt_settings(ScriptedPrompter(), "p", Framework.PLAYWRIGHT, ProjectType.FULL)
        assert s.base_url == "http://localhost:3000"
        assert s.admin_email == "admin@example.com"
        assert s.features == frozenset({Feature.AUTH, Feature.API, Feature.UI})

    def test_without_credentials(self):
        prompter = ScriptedPrompter()
        s = cli.prompt_settings(
            prompter, "p", Framework.PLAYWRIGHT, ProjectType.FULL, ask_credentials=False
        )
        assert s.admin_email == ""
        assert not any("password" in q.lower() for q in prompter.asked)


# ---------------------------------------------------------------------------
# Commands through main()
# ---------------------------------------------------------------------------


class TestCreateCommand:
    def test_create_non_interactive(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("TESTA_BASE_URL", "http://ci:9000")

        cli.main(["create", "shop-tests", "--yes", "--skip-install"])

        root = tmp_path / "shop-tests"
        assert (root / "src" / "e2e").is_dir()
        assert "BASE_URL=http://ci:9000\n" in (root / ".env").read_text(encoding="utf-8")


class TestInitCommand:
    def test_without_manifest_exits_1(self, tmp_path: Path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["init", "--yes", "--skip-install"])
        assert exc_info.value.code == 1
        assert "No package.json found" in capsys.readouterr().out
        assert not (tmp_path / "tests").exists()

    def test_init(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        (tmp_path / "package.json").write_text('{"name": "app"}', encoding="utf-8")
        monkeypatch.chdir(tmp_path)

        cli.main(["init", "--yes", "--skip-install"])

        scripts = json.loads((tmp_path / "package.json").read_text(encoding="utf-8"))["scripts"]
        assert scripts["test:e2e"] == "playwright test tests/e2e"
        assert (tmp_path / "tests" / "e2e" / "basic.spec.ts").is_file()


class TestGenerateCommand:
    def test_generate(self, src_project: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.chdir(src_project)
        cli.main(["generate", "api", "My Login Flow"])
        assert (src_project / "src" / "api" / "my-login-flow.spec.ts").is_file()

    def test_generate_with_feature(self, src_project: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.chdir(src_project)
        cli.main(["g", "visual", "Home", "--feature", "landing"])
        assert (src_project / "src" / "visual" / "landing" / "home.spec.ts").is_file()

    def test_no_structure_exits_1(self, tmp_path: Path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["generate", "api", "x"])
        assert exc_info.value.code == 1
        assert "No valid test structure" in capsys.readouterr().out

    def test_analyze_selects_endpoint(self, src_project: Path, express_app: Path, monkeypatch):
        monkeypatch.chdir(src_project)
        cli.main(["generate", "api", "Create user", "--analyze", "--target", str(express_app), "--yes"])

        content = (src_project / "src" / "api" / "create-user.spec.ts").read_text(encoding="utf-8")
        # first discovered endpoint is chosen by default
        assert "should successfully post to /login" in content

    async def test_analyze_failure_falls_back(self, src_project: Path, monkeypatch, capsys):
        monkeypatch.chdir(src_project)
        args = cli.build_parser().parse_args(
            ["generate", "api", "Fallback", "--analyze", "--target", str(src_project / "missing")]
        )
        failing_scan = AsyncMock(side_effect=OSError("no such directory"))
        monkeypatch.setattr(cli.StructuralScanner, "scan", failing_scan)

        await cli.cmd_generate(args, ScriptedPrompter([True]))

        assert "Error analyzing application" in capsys.readouterr().out
        content = (src_project / "src" / "api" / "fallback.spec.ts").read_text(encoding="utf-8")
        assert "${baseUrl}/endpoint" in content

    async def test_unexpected_scan_error_falls_back(self, src_project: Path, monkeypatch, capsys):
        monkeypatch.chdir(src_project)
        args = cli.build_parser().parse_args(["generate", "api", "Odd", "--analyze"])
        monkeypatch.setattr(cli.StructuralScanner, "scan", AsyncMock(side_effect=RecursionError("deep")))

        await cli.cmd_generate(args, ScriptedPrompter([True]))

        assert "Error analyzing application" in capsys.readouterr().out
        assert (src_project / "src" / "api" / "odd.spec.ts").is_file()

    def test_analyze_list_dependencies(self, src_project: Path, tmp_path: Path, monkeypatch):
        app = tmp_path / "odd-app"
        app.mkdir()
        (app / "package.json").write_text(json.dumps({"dependencies": ["express"]}), encoding="utf-8")
        monkeypatch.chdir(src_project)

        cli.main(["generate", "api", "x", "--analyze", "--target", str(app), "--yes"])

        content = (src_project / "src" / "api" / "x.spec.ts").read_text(encoding="utf-8")
        assert "/api/endpoint" in content

    async def test_analyze_failure_declined(self, src_project: Path, monkeypatch):
        monkeypatch.chdir(src_project)
        args = cli.build_parser().parse_args(["generate", "api", "Nope", "--analyze"])
        monkeypatch.setattr(cli.StructuralScanner, "scan", AsyncMock(side_effect=ValueError("x")))

        await cli.cmd_generate(args, ScriptedPrompter([False]))

        assert not (src_project / "src" / "api").exists()


class TestRunCommands:
    @pytest.fixture
    def suite(self, monkeypatch: pytest.MonkeyPatch) -> AsyncMock:
        instance = AsyncMock()
        monkeypatch.setattr(cli, "SuiteRunner", lambda root: instance)
        return instance

    def test_test_shortcut(self, suite: AsyncMock):
        cli.main(["test", "--websocket", "--browser", "safari"])

        suite.preflight.assert_awaited_once()
        suite.test.assert_awaited_once_with(
            RunOptions(pattern="websocket.spec.ts", env="local", browser="safari")
        )

    def test_run_pattern(self, suite: AsyncMock):
        cli.main(["run", "login", "--env", "production"])
        suite.run.assert_awaited_once_with(
            RunOptions(pattern="login", env="production", browser="chrome")
        )

    def test_failure_exits_1(self, suite: AsyncMock):
        suite.test.side_effect = TestRunFailedError(1)
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["test"])
        assert exc_info.value.code == 1
