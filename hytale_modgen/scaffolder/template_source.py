"""Base template archive loading and entry classification.

A base template is an existing Hytale mod project zipped up (usually with a
top-level folder, e.g. ``hytale-template/build.gradle``).  It can be fetched
over HTTP or read from disk.  Each entry is then classified: build artefacts
and runtime state are dropped, known files are either regenerated from the
mod config or copied through, and everything else is ignored.
"""

from __future__ import annotations

import asyncio
import io
import zipfile
import zlib
from enum import Enum
from pathlib import Path

import httpx
from pydantic import BaseModel, Field

from .errors import TemplateFetchError


# ---------------------------------------------------------------------------
# Entry model & classification
# ---------------------------------------------------------------------------

class EntryKind(str, Enum):
    """How a base-template entry is turned into an output file."""
    GRADLE_PROPERTIES = "gradle_properties"
    SETTINGS_GRADLE = "settings_gradle"
    GITIGNORE = "gitignore"
    MANIFEST = "manifest"
    MAIN_CLASS = "main_class"
    COMMAND_CLASS = "command_class"
    EVENT_CLASS = "event_class"
    BUILD_GRADLE = "build_gradle"
    WRAPPER_SCRIPT = "wrapper_script"
    WRAPPER_FILE = "wrapper_file"
    README = "readme"


class TemplateEntry(BaseModel):
    """A single member of a base template archive."""
    name: str = Field(..., description="Archive member name (POSIX)")
    content: bytes = Field(default=b"")
    is_dir: bool = Field(default=False)
    mode: int = Field(default=0, description="UNIX mode bits stored in the archive, 0 if none")

    @property
    def basename(self) -> str:
        return self.name.rstrip("/").split("/")[-1]


_EXCLUDED_SEGMENTS: tuple[str, ...] = (
    ".gradle/",
    ".idea/",
    ".vscode/",
    ".eclipse/",
    "build/",
    "run/",
    "logs/",
    "mods/",
    "universe/",
)

_EXCLUDED_SUFFIXES: tuple[str, ...] = (
    ".jar",
    "config.json",
    "bans.json",
    "permissions.json",
    "whitelist.json",
)


def is_excluded(name: str) -> bool:
    """Return ``True`` for build artefacts, IDE files and runtime state."""
    if any(segment in name for segment in _EXCLUDED_SEGMENTS):
        return True
    return name.endswith(_EXCLUDED_SUFFIXES)


def classify_entry(name: str) -> EntryKind | None:
    """Map an archive member name to an :class:`EntryKind`.

    Checks run in a fixed order and the first match wins, so
    ``gradle/wrapper/gradle-wrapper.properties`` is a wrapper file rather
    than ``gradle.properties``.  Returns ``None`` for entries that are not
    carried into the output.
    """
    if name.endswith("gradle.properties"):
        return EntryKind.GRADLE_PROPERTIES
    if name.endswith("settings.gradle"):
        return EntryKind.SETTINGS_GRADLE
    if name.endswith(".gitignore"):
        return EntryKind.GITIGNORE
    if name.endswith("manifest.json"):
        return EntryKind.MANIFEST
    if "ExamplePlugin.java" in name:
        return EntryKind.MAIN_CLASS
    if "ExampleCommand.java" in name:
        return EntryKind.COMMAND_CLASS
    if "ExampleEvent.java" in name:
        return EntryKind.EVENT_CLASS
    if name.endswith("build.gradle"):
        return EntryKind.BUILD_GRADLE
    if name.endswith("gradlew") or name.endswith("gradlew.bat"):
        return EntryKind.WRAPPER_SCRIPT
    if "gradle/wrapper/" in name:
        return EntryKind.WRAPPER_FILE
    if name.endswith("README.md"):
        return EntryKind.README
    return None


def read_template_archive(data: bytes) -> list[TemplateEntry]:
    """Parse zip *data* into a list of entries, in archive order.

    Raises:
        TemplateFetchError: If *data* is not a readable zip archive or a
            member is damaged, encrypted or uses an unsupported compression.
    """
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            entries: list[TemplateEntry] = []
            for info in zf.infolist():
                is_dir = info.is_dir()
                entries.append(
                    TemplateEntry(
                        name=info.filename,
                        content=b"" if is_dir else zf.read(info),
                        is_dir=is_dir,
                        mode=(info.external_attr >> 16) & 0o777,
                    )
                )
            return entries
    except (
        zipfile.BadZipFile,
        zipfile.LargeZipFile,
        zlib.error,
        EOFError,
        RuntimeError,
        NotImplementedError,
    ) as exc:
        raise TemplateFetchError(f"Invalid template archive: {exc}") from exc


# ---------------------------------------------------------------------------
# TemplateSource
# ---------------------------------------------------------------------------


class TemplateSource:
    """Where the base template archive comes from: a URL, a local file, or nothing.

    With neither configured, :attr:`configured` is ``False`` and callers fall
    back to the embedded from-scratch templates.
    """

    def __init__(
        self,
        url: str | None = None,
        path: str | Path | None = None,
        timeout: int = 30,
    ) -> None:
        if url and path:
            raise ValueError("Specify either a template URL or a template path, not both")
        self.url = url or None
        self.path = Path(path) if path else None
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return self.url is not None or self.path is not None

    @property
    def label(self) -> str:
        """Human-readable description for status output."""
        if self.url:
            return self.url
        if self.path:
            return str(self.path)
        return "embedded templates"

    async def load(self) -> list[TemplateEntry]:
        """Fetch or read the archive and return its entries.

        Raises:
            TemplateFetchError: On any fetch, read or archive-format failure.
        """
        if self.url:
            data = await self._fetch()
        elif self.path:
            data = await self._read()
        else:
            raise TemplateFetchError("No template source configured")
        return read_template_archive(data)

    async def _fetch(self) -> bytes:
        assert self.url is not None
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=10.0),
                follow_redirects=True,
            ) as client:
                response = await client.get(self.url)
                response.raise_for_status()
                return response.content
        except httpx.HTTPStatusError as exc:
            reason = exc.response.reason_phrase or f"HTTP {exc.response.status_code}"
            raise TemplateFetchError(f"Failed to fetch template: {reason}") from exc
        except httpx.TimeoutException as exc:
            raise TemplateFetchError(
                f"Failed to fetch template: timed out after {self.timeout}s"
            ) from exc
        except httpx.HTTPError as exc:
            raise TemplateFetchError(f"Failed to fetch template: {exc}") from exc

    async def _read(self) -> bytes:
        assert self.path is not None
        if not self.path.is_file():
            raise TemplateFetchError(f"Template archive not found: {self.path}")
        try:
            return await asyncio.to_thread(self.path.read_bytes)
        except OSError as exc:
            raise TemplateFetchError(f"Failed to read template: {exc}") from exc
