"""Jinja2 rendering of synthesized project files.

When a framework has no copyable template directory, the materializer builds
a minimal file set (``package.json``, framework config, environment module,
user model, README, env files) from the ``.j2`` templates stored under
``testa/scaffolder/templates/``.
"""

from __future__ import annotations

import asyncio
import json
import re
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from testa.utils import write_text

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


class TemplateRenderer:
    """Renders the packaged ``.j2`` templates with a settings context."""

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["slugify"] = _slugify_filter
        self.env.filters["js_str"] = _js_str_filter
        self.env.filters["json"] = _json_filter

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template (path relative to the template root)."""
        template = self.env.get_template(template_path)
        return template.render(**context)

    async def render_to_file(
        self,
        template_path: str,
        output_path: str | Path,
        context: dict[str, Any],
    ) -> Path:
        """Render a template and write the result to *output_path*.

        Parent directories are created automatically.
        """
        content = self.render(template_path, context)
        out = Path(output_path)
        await asyncio.to_thread(write_text, out, content)
        return out


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------

def _slugify_filter(value: str) -> str:
    """Convert a string to an npm-safe package name."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower().strip())
    return slug.strip("-") or "tests"


def _js_str_filter(value: str) -> str:
    """Escape for a single-quoted JavaScript string literal."""
    return str(value).replace("\\", "\\\\").replace("'", "\\'")


def _json_filter(value: Any) -> str:
    """Serialize as a JSON literal (strings get double quotes)."""
    return json.dumps(value)
