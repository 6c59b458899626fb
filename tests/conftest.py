"""Shared pytest fixtures for the testa test suite.

Provides reusable fixtures for:
- Project settings
- Sample application trees (Express API, React UI, websocket client)
- Test projects with an existing ``src/e2e`` or ``tests/e2e`` tree
- A mocked command runner
"""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

from testa.config import Feature, ProjectSettings


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def write_manifest(root: Path, dependencies: dict[str, str] | None = None, **extra: Any) -> Path:
    """Write a minimal package.json into *root*."""
    root.mkdir(parents=True, exist_ok=True)
    data = {"name": root.name, "version": "1.0.0", "dependencies": dependencies or {}}
    data.update(extra)
    path = root / "package.json"
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


def write_source(root: Path, rel: str, content: str) -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@pytest.fixture
def settings() -> ProjectSettings:
    """Fully populated settings for a Playwright project."""
    return ProjectSettings(
        project_name="shop-tests",
        base_url="http://shop.local:8080",
        api_url="http://shop.local:8080/api",
        admin_email="root@shop.local",
        admin_password="s3cret",
        user_email="jane@shop.local",
        user_password="hunter2",
    )


@pytest.fixture
def full_feature_settings(settings: ProjectSettings) -> ProjectSettings:
    return settings.model_copy(update={"features": frozenset(Feature)})


# ---------------------------------------------------------------------------
# Application trees
# ---------------------------------------------------------------------------

@pytest.fixture
def express_app(tmp_path: Path) -> Path:
    """Express API with two /users routes and a login handler."""
    root = tmp_path / "express-app"
    write_manifest(root, {"express": "^4.18.0"})
    write_source(
        root,
        "src/routes/users.js",
        """\
        const express = require('express');
        const app = express();

        app.get('/users', listUsers);
        app.post('/users', createUser);
        """,
    )
    write_source(
        root,
        "src/routes/session.ts",
        """\
        app.post('/login', (req, res) => login(req, res));
        """,
    )
    # Never scanned
    write_source(root, "node_modules/lib/index.js", "app.get('/hidden', h);\n")
    write_source(root, "dist/bundle.js", "app.get('/built', h);\n")
    return root


@pytest.fixture
def react_app(tmp_path: Path) -> Path:
    """React app with a form component, JSX routes and a pages directory."""
    root = tmp_path / "react-app"
    write_manifest(root, {"react": "^18.2.0", "react-dom": "^18.2.0"})
    write_source(
        root,
        "src/components/LoginForm.tsx",
        """\
        export function LoginForm() {
          return <form onSubmit={handleSubmit}><button type="submit" /></form>;
        }
        """,
    )
    write_source(
        root,
        "src/App.jsx",
        """\
        export default App;
        const routes = <Routes><Route path="/about" element={<About />} /></Routes>;
        """,
    )
    write_source(root, "pages/index.tsx", "export default function Home() {}\n")
    write_source(root, "pages/users/[id].tsx", "export default function User() {}\n")
    write_source(root, "build/Stale.jsx", "export const Stale = 1;\n")
    return root


@pytest.fixture
def socket_app(tmp_path: Path) -> Path:
    """Client code opening the same websocket URL twice."""
    root = tmp_path / "socket-app"
    write_manifest(root, {"ws": "^8.0.0"})
    write_source(
        root,
        "src/live.ts",
        """\
        const feed = new WebSocket('ws://localhost:4000/feed');
        const again = new WebSocket('ws://localhost:4000/feed');
        """,
    )
    write_source(root, "src/chat.js", "const socket = io('http://localhost:4000');\n")
    return root


# ---------------------------------------------------------------------------
# Test projects
# ---------------------------------------------------------------------------

@pytest.fixture
def src_project(tmp_path: Path) -> Path:
    """Project created by ``create`` (has ``src/e2e``)."""
    root = tmp_path / "src-project"
    (root / "src" / "e2e").mkdir(parents=True)
    write_manifest(root)
    return root


@pytest.fixture
def tests_project(tmp_path: Path) -> Path:
    """Project set up by ``init`` (has ``tests/e2e``)."""
    root = tmp_path / "tests-project"
    (root / "tests" / "e2e").mkdir(parents=True)
    write_manifest(root)
    return root


# ---------------------------------------------------------------------------
# Subprocess mocks
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_runner() -> AsyncMock:
    """Command runner that always succeeds."""
    return AsyncMock(return_value=(0, "", ""))
