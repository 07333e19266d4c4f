"""Jinja2 template rendering for mod project scaffolding.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``hytale_modgen/scaffolder/templates/`` directory and renders them with the
mod-specific context built from a ``ModConfig``.  Static boilerplate that must
be shipped byte-for-byte (the Gradle build script and wrapper scripts) lives
next to it under ``static/`` and is read with :meth:`TemplateRenderer.read_static`.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from hytale_modgen.utils import (
    generate_class_name,
    generate_mod_id,
    package_to_path,
)


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"
_DEFAULT_STATIC_DIR = Path(__file__).parent / "static"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for mod scaffolding.

    The renderer discovers ``.j2`` template files under a configurable
    template directory.  Templates are rendered with a context dictionary
    holding the mod metadata (name, id, package, toggles, etc.).  Undefined
    variables raise instead of rendering as empty strings, so a typo in a
    template never produces a silently broken Java file.
    """

    def __init__(
        self,
        template_dir: str | Path | None = None,
        static_dir: str | Path | None = None,
    ) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        if static_dir is None:
            static_dir = _DEFAULT_STATIC_DIR
        self.template_dir = Path(template_dir)
        self.static_dir = Path(static_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([], default_for_string=False),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        # Register custom filters
        self.env.filters["class_name"] = generate_class_name
        self.env.filters["mod_id"] = generate_mod_id
        self.env.filters["package_path"] = package_to_path
        self.env.filters["java_string"] = _java_string_filter

    # -- Single template rendering -----------------------------------------

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"MainClass.java.j2"``).
            context: Dictionary of variables available inside the template.

        Returns:
            The rendered template content as a string.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)

    def render_string(self, template_string: str, context: dict[str, Any]) -> str:
        """Render an inline template string with the provided context."""
        template = self.env.from_string(template_string)
        return template.render(**context)

    # -- Static files ------------------------------------------------------

    def read_static(self, relative_path: str) -> bytes:
        """Return the raw bytes of a static boilerplate file.

        Raises:
            FileNotFoundError: If *relative_path* is not shipped.
        """
        return (self.static_dir / relative_path).read_bytes()

    def list_static(self) -> list[str]:
        """Return a sorted list of static file paths (POSIX, relative)."""
        if not self.static_dir.is_dir():
            return []
        return sorted(
            p.relative_to(self.static_dir).as_posix()
            for p in self.static_dir.rglob("*")
            if p.is_file()
        )

    # -- File-based rendering (async) --------------------------------------

    async def render_to_file(
        self,
        template_path: str,
        output_path: str | Path,
        context: dict[str, Any],
    ) -> Path:
        """Render a template and write the result to *output_path*.

        Parent directories are created automatically.  Returns the output path.
        """
        content = self.render(template_path, context)
        out = Path(output_path)
        await asyncio.to_thread(_write_file, out, content)
        return out

    # -- Utility -----------------------------------------------------------

    def list_templates(self, prefix: str = "") -> list[str]:
        """Return a sorted list of all ``.j2`` template paths under *prefix*.

        Paths are relative to the template root directory.
        """
        search_dir = self.template_dir / prefix if prefix else self.template_dir
        if not search_dir.is_dir():
            return []
        return sorted(
            p.relative_to(self.template_dir).as_posix()
            for p in search_dir.rglob("*.j2")
        )


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------

def _java_string_filter(value: str) -> str:
    """Escape a value for use inside a Java double-quoted string literal."""
    return str(value).replace("\\", "\\\\").replace('"', '\\"')


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
