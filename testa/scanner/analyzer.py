"""Structural scanner for application source trees.

Walks a Node.js application, reads JavaScript/TypeScript sources and applies
the rules in :mod:`testa.scanner.patterns` to collect candidate endpoints,
components, routes and websocket URLs for test generation.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

from testa.errors import NotAProjectError
from testa.utils import console, print_info, print_success, print_warning

from . import patterns
from .models import Category, Route, ScanResult, SocketImplementation


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SKIP_DIRS: frozenset[str] = frozenset({"node_modules", ".git", "dist", "build"})

SCRIPT_EXTENSIONS: tuple[str, ...] = (".js", ".ts", ".jsx", ".tsx")
COMPONENT_EXTENSIONS: tuple[str, ...] = (".jsx", ".tsx")

MANIFEST_FILE = "package.json"

# Checked in order; the first dependency present wins.
_FRAMEWORK_MARKERS: tuple[tuple[str, str], ...] = (
    ("react", "React"),
    ("vue", "Vue"),
    ("angular", "Angular"),
    ("express", "Express"),
    ("next", "Next.js"),
    ("nuxt", "Nuxt.js"),
    ("nest", "NestJS"),
    ("@nestjs/core", "NestJS"),
)

_COMPONENT_FRAMEWORKS = frozenset({"React", "Next.js"})


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def find_files(root: str | Path, extensions: tuple[str, ...]) -> list[Path]:
    """Recursively collect files ending in one of *extensions*.

    Depth-first, entries visited in sorted order, skipping ``node_modules``,
    ``.git``, ``dist`` and ``build`` at any depth.  Symbolic links are not
    followed.  Returns an empty list when *root* does not exist.
    """
    root = Path(root)
    if not root.is_dir():
        return []

    results: list[Path] = []
    for child in sorted(root.iterdir()):
        if child.is_symlink():
            continue
        if child.is_dir():
            if child.name in SKIP_DIRS:
                continue
            results.extend(find_files(child, extensions))
        elif child.is_file() and child.name.endswith(extensions):
            results.append(child)
    return results


def detect_framework(dependencies: dict[str, Any]) -> str:
    """Name the application framework from its ``package.json`` dependencies."""
    for package, name in _FRAMEWORK_MARKERS:
        if dependencies.get(package):
            return name
    return "Unknown"


def _read_manifest(root: Path) -> dict[str, Any]:
    manifest = root / MANIFEST_FILE
    if not manifest.is_file():
        raise NotAProjectError(str(root))
    data = json.loads(manifest.read_text(encoding="utf-8"))
    return data if isinstance(data, dict) else {}


def manifest_dependencies(manifest: dict[str, Any]) -> dict[str, Any]:
    """Merged ``dependencies`` and ``devDependencies``; non-object sections are ignored."""
    merged: dict[str, Any] = {}
    for section in ("dependencies", "devDependencies"):
        value = manifest.get(section)
        if isinstance(value, dict):
            merged.update(value)
    return merged


def _read_source(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


# ---------------------------------------------------------------------------
# StructuralScanner
# ---------------------------------------------------------------------------

class StructuralScanner:
    """Collects testable-element candidates from an application tree.

    The scanner only produces candidates.  Picking one of them (or asking the
    user for a manual value) is left to :mod:`testa.scanner.selection`.
    """

    def __init__(self, verbose: bool = True) -> None:
        self.verbose = verbose

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def scan(self, app_dir: str | Path, test_type: str) -> ScanResult:
        """Scan *app_dir* for candidates relevant to *test_type*.

        Raises:
            NotAProjectError: *app_dir* has no ``package.json``.
        """
        root = Path(app_dir)
        manifest = await asyncio.to_thread(_read_manifest, root)
        dependencies = manifest_dependencies(manifest)

        result = ScanResult(framework=detect_framework(dependencies))
        self._say(f"Detected framework: {result.framework}")

        category = Category.parse(test_type)
        if category is Category.API:
            await self._scan_api(root, result)
        elif category is Category.E2E:
            await self._scan_ui(root, result)
        elif category is Category.WEBSOCKET:
            await self._scan_websockets(root, result)

        if result.is_empty and self.verbose:
            print_warning("Could not identify specific testable elements in the application")
            console.print("Will create a generic test template")

        return result

    # ------------------------------------------------------------------
    # Category passes
    # ------------------------------------------------------------------

    async def _scan_api(self, root: Path, result: ScanResult) -> None:
        self._say("Looking for API endpoints...")
        for file in find_files(root, SCRIPT_EXTENSIONS):
            content = await asyncio.to_thread(_read_source, file)
            result.endpoints.extend(patterns.extract_endpoints(content, str(file)))
            if patterns.mentions_auth(content):
                result.has_authentication = True

        if result.endpoints and self.verbose:
            print_success(f"Found {len(result.endpoints)} API endpoints")

    async def _scan_ui(self, root: Path, result: ScanResult) -> None:
        self._say("Looking for UI components and routes...")
        if result.framework not in _COMPONENT_FRAMEWORKS:
            return

        component_files = find_files(root, COMPONENT_EXTENSIONS)
        for file in component_files:
            content = await asyncio.to_thread(_read_source, file)
            source = str(file)
            result.components.extend(patterns.extract_components(content, source))
            if patterns.mentions_forms(content):
                result.has_forms = True
            result.routes.extend(patterns.extract_jsx_routes(content, source))
            result.routes.extend(patterns.extract_config_routes(content, source))

        pages_dir = root / "pages"
        for file in find_files(pages_dir, SCRIPT_EXTENSIONS):
            relative = file.relative_to(pages_dir).as_posix()
            route = patterns.page_route(relative)
            if route is not None:
                result.routes.append(
                    Route(path=route, source_file=str(file))
                )

        if (result.components or result.routes) and self.verbose:
            print_success(
                f"Found {len(result.components)} components and {len(result.routes)} routes"
            )

    async def _scan_websockets(self, root: Path, result: ScanResult) -> None:
        self._say("Looking for WebSocket implementations...")
        for file in find_files(root, SCRIPT_EXTENSIONS):
            content = await asyncio.to_thread(_read_source, file)
            source = str(file)
            if patterns.mentions_websocket(content):
                result.has_websockets = True
                result.socket_implementations.append(
                    SocketImplementation(source_file=source)
                )
            result.socket_implementations.extend(
                patterns.extract_socket_urls(content, source)
            )

        if result.socket_implementations and self.verbose:
            print_success(
                f"Found {len(result.socket_implementations)} WebSocket implementations"
            )

    def _say(self, message: str) -> None:
        if self.verbose:
            print_info(message)
