"""Writes generated test files into a project's test tree.

Resolves where a test of a given category belongs (``<base>/<category dir>``
with ``<base>`` being ``src`` or ``tests``), picks a file name that never
overwrites an existing file, renders the template and writes it.
"""

from __future__ import annotations

import asyncio
import time
from pathlib import Path
from typing import Callable, Optional

from testa.errors import NoTestStructureError
from testa.scanner.models import Category, Selection
from testa.utils import ensure_dir, print_success, print_warning, slugify_test_name, write_text

from .test_templates import render_test

TARGET_DIRS: dict[Category, str] = {
    Category.API: "api",
    Category.E2E: "e2e",
    Category.WEBSOCKET: "websocket",
    Category.PERFORMANCE: "performance",
    Category.VISUAL: "visual",
}

# Probed in order; the first holding an ``e2e`` directory wins.
TEST_BASE_DIRS: tuple[str, ...] = ("src", "tests")

SPEC_MARKER = ".spec."
DEFAULT_EXTENSION = "ts"


def target_dir_name(test_type: str) -> str:
    """Directory (under the test base) for tests of *test_type*.

    Unknown types get a directory named after the type itself.
    """
    category = Category.parse(test_type)
    if category is None:
        return test_type
    return TARGET_DIRS[category]


def detect_base_dir(project_root: str | Path) -> Path:
    """Return ``src`` or ``tests`` under *project_root*, whichever has ``e2e``.

    Raises:
        NoTestStructureError: Neither ``src/e2e`` nor ``tests/e2e`` exists.
    """
    root = Path(project_root)
    for name in TEST_BASE_DIRS:
        if (root / name / "e2e").is_dir():
            return root / name
    raise NoTestStructureError(str(root))


def spec_file_name(test_name: str, extension: str = DEFAULT_EXTENSION) -> str:
    """File name for *test_name*.

    Names already containing ``.spec.`` are used verbatim; anything else is
    slugified and given a ``.spec.<extension>`` suffix.
    """
    if SPEC_MARKER in test_name:
        return test_name
    return f"{slugify_test_name(test_name)}.spec.{extension}"


def resolve_test_path(
    test_dir: Path,
    test_name: str,
    clock: Callable[[], float] = time.time,
) -> Path:
    """Pick the path a new test file should be written to.

    Returns ``<test_dir>/<name>.spec.<ext>`` when free.  Otherwise a
    millisecond timestamp is appended to the stem
    (``<name>-<millis>.spec.<ext>``), bumped until no file has that name.
    """
    file_name = spec_file_name(test_name)
    path = test_dir / file_name
    if not path.exists():
        return path

    stem, _, suffix = file_name.partition(SPEC_MARKER)
    stamp = int(clock() * 1000)
    while True:
        candidate = test_dir / f"{stem}-{stamp}{SPEC_MARKER}{suffix}"
        if not candidate.exists():
            return candidate
        stamp += 1


class SpecWriter:
    """Generates one test file per call into a project's test tree."""

    def __init__(
        self,
        project_root: str | Path = ".",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.project_root = Path(project_root)
        self.clock = clock

    async def generate(
        self,
        test_type: str,
        test_name: str,
        selection: Optional[Selection] = None,
        feature: Optional[str] = None,
    ) -> Path:
        """Render and write a test, returning the path written.

        *feature*, when given, adds a subdirectory under the category
        directory (``src/api/<feature>/``).

        Raises:
            NoTestStructureError: The project has no recognised test tree.
        """
        base_dir = detect_base_dir(self.project_root)
        test_dir = base_dir / target_dir_name(test_type)
        if feature:
            test_dir = test_dir / feature
        test_dir = await asyncio.to_thread(ensure_dir, test_dir)

        path = resolve_test_path(test_dir, test_name, clock=self.clock)
        if path != test_dir / spec_file_name(test_name):
            print_warning(
                f"The test {spec_file_name(test_name)} already exists. "
                f"Generating alternate version {path.name}"
            )

        content = render_test(test_type, test_name, selection)
        await asyncio.to_thread(write_text, path, content)
        print_success(f"Test generated at {path}")
        return path
