"""Placeholder substitution for copied template trees.

Framework templates ship with literal tokens such as ``{{baseUrl}}``.  After
a template directory has been copied into a new project, every text file
with a known extension is rewritten in place with each token replaced by the
matching :class:`~testa.config.ProjectSettings` value.

Tokens are replaced literally and globally.  Unknown tokens are left as
they are, and file *names* are never rewritten.
"""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path

from testa.config import ProjectSettings
from testa.errors import MissingSettingError

# token -> ProjectSettings attribute
PLACEHOLDERS: dict[str, str] = {
    "{{projectName}}": "project_name",
    "{{baseUrl}}": "base_url",
    "{{apiUrl}}": "api_url",
    "{{adminEmail}}": "admin_email",
    "{{adminPassword}}": "admin_password",
    "{{userEmail}}": "user_email",
    "{{userPassword}}": "user_password",
}

# Credentials may be blank; these may not.
REQUIRED_SETTINGS: frozenset[str] = frozenset({"project_name", "base_url", "api_url"})

SUBSTITUTABLE_EXTENSIONS: tuple[str, ...] = (
    ".json",
    ".js",
    ".ts",
    ".md",
    ".example",
    ".txt",
    ".html",
)


def placeholder_values(settings: ProjectSettings) -> dict[str, str]:
    """Map each token to its replacement text.

    Raises:
        MissingSettingError: A required setting is empty.
    """
    values: dict[str, str] = {}
    for token, attr in PLACEHOLDERS.items():
        value = getattr(settings, attr) or ""
        if not value and attr in REQUIRED_SETTINGS:
            raise MissingSettingError(attr)
        values[token] = value
    return values


def substitute_placeholders(content: str, settings: ProjectSettings) -> str:
    """Return *content* with every known token replaced."""
    for token, value in placeholder_values(settings).items():
        content = content.replace(token, value)
    return content


def is_substitutable(path: Path) -> bool:
    return path.name.endswith(SUBSTITUTABLE_EXTENSIONS)


def rewrite_files(paths: list[Path], settings: ProjectSettings) -> list[Path]:
    """Substitute tokens in place in each substitutable file of *paths*.

    Returns the files that were rewritten.  Other files are not touched.
    """
    placeholder_values(settings)  # fail before touching any file

    processed: list[Path] = []
    for path in paths:
        if not path.is_file() or not is_substitutable(path):
            continue
        content = path.read_text(encoding="utf-8")
        path.write_text(substitute_placeholders(content, settings), encoding="utf-8")
        processed.append(path)
    return processed


async def copy_template(
    template_dir: str | Path,
    dest: str | Path,
    settings: ProjectSettings,
) -> list[Path]:
    """Copy *template_dir* into *dest* and substitute the copied files.

    Only files that came from the template are rewritten; anything already
    present in *dest* is left alone.
    """
    template_dir = Path(template_dir)
    dest = Path(dest)
    placeholder_values(settings)

    copied = [
        dest / path.relative_to(template_dir)
        for path in sorted(template_dir.rglob("*"))
        if path.is_file()
    ]
    await asyncio.to_thread(shutil.copytree, template_dir, dest, dirs_exist_ok=True)
    return await asyncio.to_thread(rewrite_files, copied, settings)
