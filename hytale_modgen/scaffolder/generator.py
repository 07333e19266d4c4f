"""Main scaffolding orchestrator.

Takes a ``ModConfig`` and produces a complete Hytale server mod project
(Gradle build, wrapper scripts, plugin class, optional example command and
event handler, manifest, README) as a list of ``ProjectFile`` entries, then
packages them as a zip archive or writes them out as a directory.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from hytale_modgen.utils import (
    JAVA_PACKAGE_PATTERN,
    generate_class_name,
    generate_mod_id,
    package_to_path,
)

from .archive import EXECUTABLE_MODE, FILE_MODE, ProjectFile, build_zip, dedupe_files, write_tree
from .errors import ScaffoldError
from .template_source import EntryKind, TemplateEntry, TemplateSource, classify_entry, is_excluded
from .templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_AUTHOR_NAME = "Your Name"
DEFAULT_AUTHOR_EMAIL = "your.email@example.com"
DEFAULT_WEBSITE = "https://example.com"

SUPPORTED_JAVA_VERSIONS: tuple[str, ...] = ("21", "22", "23", "24", "25")

MANIFEST_PATH = "src/main/resources/manifest.json"

# Static boilerplate shipped verbatim: (static file, output path, mode)
_STATIC_FILES: list[tuple[str, str, int]] = [
    ("build.gradle", "build.gradle", 0o644),
    ("gradlew", "gradlew", EXECUTABLE_MODE),
    ("gradlew.bat", "gradlew.bat", 0o644),
    (
        "gradle/wrapper/gradle-wrapper.properties",
        "gradle/wrapper/gradle-wrapper.properties",
        0o644,
    ),
]


# ---------------------------------------------------------------------------
# Configuration model
# ---------------------------------------------------------------------------


class ModConfig(BaseModel):
    """Pydantic model describing the mod to scaffold."""

    mod_name: str = Field(default="Example Mod", min_length=1, description="Display name of the mod")
    mod_id: str = Field(
        default="",
        pattern=r"^[a-z0-9_]*$",
        description="Custom mod ID; derived from mod_name when empty",
    )
    package_name: str = Field(
        default="com.example",
        pattern=JAVA_PACKAGE_PATTERN,
        description="Java package for the plugin sources",
    )
    version: str = Field(default="1.0.0")
    description: str = Field(default="A Hytale server mod")
    author_name: str = Field(default=DEFAULT_AUTHOR_NAME)
    author_email: str = Field(default=DEFAULT_AUTHOR_EMAIL)
    website: str = Field(default=DEFAULT_WEBSITE)
    java_version: str = Field(default="21", description="Java toolchain version")
    server_version: str = Field(default="*", description="Compatible server version range")
    include_example_command: bool = Field(default=True)
    include_example_event: bool = Field(default=True)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def resolved_mod_id(self) -> str:
        return self.mod_id or generate_mod_id(self.mod_name)

    @property
    def class_name(self) -> str:
        return generate_class_name(self.mod_name)

    @property
    def command_class_name(self) -> str:
        return f"{self.class_name}Command"

    @property
    def event_class_name(self) -> str:
        return f"{self.class_name}Event"

    @property
    def package_path(self) -> str:
        return package_to_path(self.package_name)

    @property
    def entry_point(self) -> str:
        return f"{self.package_name}.{self.class_name}"

    @property
    def main_class_path(self) -> str:
        return f"src/main/java/{self.package_path}/{self.class_name}.java"

    @property
    def command_class_path(self) -> str:
        return f"src/main/java/{self.package_path}/commands/{self.command_class_name}.java"

    @property
    def event_class_path(self) -> str:
        return f"src/main/java/{self.package_path}/events/{self.event_class_name}.java"


class GenerationResult(BaseModel):
    """What :meth:`ProjectGenerator.generate` wrote."""

    path: Path = Field(..., description="Archive file or extracted project root")
    files: list[str] = Field(default_factory=list, description="Relative paths of the project files")
    size_bytes: int = Field(default=0, description="Archive size, or total content size when extracted")
    extracted: bool = Field(default=False)


# ---------------------------------------------------------------------------
# Main generator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Main scaffolding orchestrator.

    Given a ``ModConfig``, produces:
    - ``gradle.properties`` and ``settings.gradle`` filled with the mod metadata
    - the plugin entry class, plus the example command / event handler when enabled
    - ``src/main/resources/manifest.json`` with Gradle expansion placeholders
    - ``build.gradle``, ``gradlew``, ``gradlew.bat`` and the wrapper properties
    - ``.gitignore`` and ``README.md``

    When *source* points at a base template archive, its entries drive which
    files are emitted (see :meth:`render_from_template`); otherwise the
    embedded templates are used.
    """

    def __init__(
        self,
        config: ModConfig,
        source: TemplateSource | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config
        self.source = source or TemplateSource()
        self.renderer = renderer or TemplateRenderer()

    # -- Public API --------------------------------------------------------

    @property
    def archive_name(self) -> str:
        return f"{self.config.class_name}.zip"

    async def collect_files(self) -> list[ProjectFile]:
        """Return every file of the generated project.

        Raises:
            ScaffoldError: If the config cannot produce valid Java identifiers.
            TemplateFetchError: If a base template is configured but unusable.
        """
        self._check_config()
        if self.source.configured:
            entries = await self.source.load()
            return self.render_from_template(entries)
        return self.render_files()

    async def generate_archive(self, compression_level: int = 9) -> bytes:
        """Generate the project and return it as zip bytes."""
        files = await self.collect_files()
        return build_zip(files, compression_level=compression_level)

    async def generate(
        self,
        output_dir: str | Path,
        *,
        extract: bool = False,
        compression_level: int = 9,
    ) -> GenerationResult:
        """Generate the project into *output_dir*.

        Args:
            output_dir: Directory receiving the archive (or project folder).
            extract: Write a ``<ClassName>/`` directory tree instead of a zip.
            compression_level: DEFLATE level for the archive (0-9).

        Returns:
            A ``GenerationResult`` describing what was written.
        """
        files = await self.collect_files()
        out_dir = Path(output_dir)
        if extract:
            project_root = out_dir / self.config.class_name
            written = await write_tree(files, project_root)
            return GenerationResult(
                path=project_root,
                files=[p.relative_to(project_root).as_posix() for p in written],
                size_bytes=sum(len(f.content) for f in dedupe_files(files)),
                extracted=True,
            )

        data = build_zip(files, compression_level=compression_level)
        target = out_dir / self.archive_name
        await asyncio.to_thread(_write_archive, target, data)
        return GenerationResult(
            path=target,
            files=[f.path for f in dedupe_files(files)],
            size_bytes=len(data),
        )

    def preview(self) -> list[str]:
        """Relative paths of the Java sources the config would produce.

        Raises:
            ScaffoldError: If the config cannot produce valid Java identifiers.
        """
        self._check_config()
        paths = [self.config.main_class_path]
        if self.config.include_example_command:
            paths.append(self.config.command_class_path)
        if self.config.include_example_event:
            paths.append(self.config.event_class_path)
        return paths

    # -- Context building --------------------------------------------------

    def build_context(self) -> dict[str, Any]:
        """Build the Jinja2 template context from the mod config."""
        cfg = self.config
        return {
            "mod_name": cfg.mod_name,
            "mod_id": cfg.resolved_mod_id,
            "package_name": cfg.package_name,
            "package_path": cfg.package_path,
            "version": cfg.version,
            "description": cfg.description,
            "author_name": cfg.author_name,
            "author_email": cfg.author_email,
            "website": cfg.website,
            "java_version": cfg.java_version,
            "server_version": cfg.server_version,
            "include_example_command": cfg.include_example_command,
            "include_example_event": cfg.include_example_event,
            "class_name": cfg.class_name,
            "command_class_name": cfg.command_class_name,
            "event_class_name": cfg.event_class_name,
            "entry_point": cfg.entry_point,
        }

    # -- Individual files --------------------------------------------------

    def render_gradle_properties(self) -> str:
        return self.renderer.render("gradle.properties.j2", self.build_context())

    def render_settings_gradle(self) -> str:
        return self.renderer.render("settings.gradle.j2", self.build_context())

    def render_gitignore(self) -> str:
        return self.renderer.render("gitignore.j2", {})

    def render_readme(self) -> str:
        return self.renderer.render("README.md.j2", self.build_context())

    def render_main_class(self) -> str:
        return self.renderer.render("MainClass.java.j2", self.build_context())

    def render_command_class(self) -> str:
        return self.renderer.render("Command.java.j2", self.build_context())

    def render_event_class(self) -> str:
        return self.renderer.render("Event.java.j2", self.build_context())

    def render_manifest(self) -> str:
        """Render ``manifest.json``.

        Only the author name and e-mail are filled in here; every other value
        is a ``${...}`` placeholder that Gradle's ``processResources`` expands
        from ``gradle.properties`` at build time.
        """
        manifest = {
            "Group": "${group}",
            "Name": "${name}",
            "Version": "${version}",
            "Description": "${description}",
            "Authors": [
                {
                    "Name": self.config.author_name,
                    "Email": self.config.author_email,
                    "Url": "${website}",
                }
            ],
            "Website": "${website}",
            "ServerVersion": "${server_version}",
            "Dependencies": {},
            "OptionalDependencies": {},
            "DisabledByDefault": False,
            "Main": "${entry_point}",
        }
        return json.dumps(manifest, indent=2, ensure_ascii=False)

    # -- Whole-project rendering -------------------------------------------

    def render_files(self) -> list[ProjectFile]:
        """Render the full project from the embedded templates."""
        cfg = self.config
        files = [
            ProjectFile.text("gradle.properties", self.render_gradle_properties()),
            ProjectFile.text("settings.gradle", self.render_settings_gradle()),
            ProjectFile.text(".gitignore", self.render_gitignore()),
            ProjectFile.text("README.md", self.render_readme()),
            ProjectFile.text(MANIFEST_PATH, self.render_manifest()),
            ProjectFile.text(cfg.main_class_path, self.render_main_class()),
        ]
        if cfg.include_example_command:
            files.append(ProjectFile.text(cfg.command_class_path, self.render_command_class()))
        if cfg.include_example_event:
            files.append(ProjectFile.text(cfg.event_class_path, self.render_event_class()))

        for static_name, output_path, mode in _STATIC_FILES:
            files.append(
                ProjectFile(
                    path=output_path,
                    content=self.renderer.read_static(static_name),
                    mode=mode,
                )
            )
        return files

    def render_from_template(self, entries: list[TemplateEntry]) -> list[ProjectFile]:
        """Rebuild the project from the entries of a base template archive.

        Directories and excluded entries are skipped; the rest are mapped by
        :func:`classify_entry`.  The plugin class and the manifest are always
        emitted, even when the base archive lacks them.
        """
        cfg = self.config
        files: list[ProjectFile] = []

        for entry in entries:
            if entry.is_dir or is_excluded(entry.name):
                continue

            kind = classify_entry(entry.name)
            if kind is None:
                continue

            if kind is EntryKind.GRADLE_PROPERTIES:
                files.append(ProjectFile.text("gradle.properties", self.render_gradle_properties()))
            elif kind is EntryKind.SETTINGS_GRADLE:
                files.append(ProjectFile.text("settings.gradle", self.render_settings_gradle()))
            elif kind is EntryKind.GITIGNORE:
                files.append(ProjectFile.text(".gitignore", self.render_gitignore()))
            elif kind is EntryKind.MANIFEST:
                files.append(ProjectFile.text(MANIFEST_PATH, self.render_manifest()))
            elif kind is EntryKind.MAIN_CLASS:
                files.append(ProjectFile.text(cfg.main_class_path, self.render_main_class()))
            elif kind is EntryKind.COMMAND_CLASS:
                if cfg.include_example_command:
                    files.append(
                        ProjectFile.text(cfg.command_class_path, self.render_command_class())
                    )
            elif kind is EntryKind.EVENT_CLASS:
                if cfg.include_example_event:
                    files.append(
                        ProjectFile.text(cfg.event_class_path, self.render_event_class())
                    )
            elif kind is EntryKind.BUILD_GRADLE:
                files.append(
                    ProjectFile(path="build.gradle", content=entry.content, mode=_copied_mode(entry))
                )
            elif kind is EntryKind.WRAPPER_SCRIPT:
                mode = _copied_mode(entry)
                if entry.basename == "gradlew":
                    mode |= EXECUTABLE_MODE
                files.append(ProjectFile(path=entry.basename, content=entry.content, mode=mode))
            elif kind is EntryKind.WRAPPER_FILE:
                files.append(
                    ProjectFile(
                        path=f"gradle/wrapper/{entry.basename}",
                        content=entry.content,
                        mode=_copied_mode(entry),
                    )
                )
            elif kind is EntryKind.README:
                files.append(ProjectFile.text("README.md", self.render_readme()))

        paths = {f.path for f in files}
        if cfg.main_class_path not in paths:
            files.append(ProjectFile.text(cfg.main_class_path, self.render_main_class()))
        if MANIFEST_PATH not in paths:
            files.append(ProjectFile.text(MANIFEST_PATH, self.render_manifest()))
        return files

    # -- Validation --------------------------------------------------------

    def _check_config(self) -> None:
        if not self.config.class_name or not self.config.resolved_mod_id:
            raise ScaffoldError("Mod name must contain at least one letter or digit.")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _copied_mode(entry: TemplateEntry) -> int:
    """Mode for an entry copied through as-is; archives without UNIX attributes get 0644."""
    return entry.mode or FILE_MODE


def _write_archive(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
