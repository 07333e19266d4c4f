"""Archive packaging for generated mod projects.

A generated project is a flat list of ``ProjectFile`` entries (POSIX
relative path, raw bytes, UNIX mode).  The same list can be zipped into a
single downloadable artifact with :func:`build_zip` or written out as a
directory tree with :func:`write_tree`.
"""

from __future__ import annotations

import asyncio
import io
import stat
import zipfile
from pathlib import Path, PurePosixPath

from pydantic import BaseModel, Field

# 1980-01-01 is the earliest timestamp a zip entry can carry; pinning it keeps
# archives for the same config byte-identical.
_ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)

FILE_MODE = 0o644
EXECUTABLE_MODE = 0o755


class ProjectFile(BaseModel):
    """One file of a generated project."""

    path: str = Field(..., description="POSIX path relative to the project root")
    content: bytes = Field(default=b"", description="Raw file content")
    mode: int = Field(default=FILE_MODE, description="UNIX permission bits")

    @classmethod
    def text(cls, path: str, content: str, mode: int = FILE_MODE) -> "ProjectFile":
        """Build a file from text content (UTF-8 encoded)."""
        return cls(path=path, content=content.encode("utf-8"), mode=mode)

    @property
    def is_executable(self) -> bool:
        return bool(self.mode & stat.S_IXUSR)


def dedupe_files(files: list[ProjectFile]) -> list[ProjectFile]:
    """Drop earlier entries whose path is repeated later on.

    The surviving entries keep the position of the first occurrence, so the
    archive order stays stable while the last write wins.
    """
    latest: dict[str, ProjectFile] = {}
    for f in files:
        latest[f.path] = f
    seen: set[str] = set()
    result: list[ProjectFile] = []
    for f in files:
        if f.path in seen:
            continue
        seen.add(f.path)
        result.append(latest[f.path])
    return result


def build_zip(files: list[ProjectFile], compression_level: int = 9) -> bytes:
    """Zip *files* into an in-memory archive.

    Entries are DEFLATE-compressed at *compression_level* (0-9) and tagged
    with UNIX host attributes so executable bits (``gradlew``) survive
    extraction.

    Raises:
        ValueError: If *compression_level* is outside 0-9 or a path is
            absolute or escapes the archive root.
    """
    if not 0 <= compression_level <= 9:
        raise ValueError(f"compression_level must be 0-9, got {compression_level}")

    buffer = io.BytesIO()
    with zipfile.ZipFile(
        buffer,
        "w",
        compression=zipfile.ZIP_DEFLATED,
        compresslevel=compression_level,
    ) as zf:
        for f in dedupe_files(files):
            _check_relative(f.path)
            info = zipfile.ZipInfo(f.path, date_time=_ZIP_EPOCH)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.create_system = 3  # UNIX
            info.external_attr = (stat.S_IFREG | f.mode) << 16
            zf.writestr(info, f.content, compresslevel=compression_level)
    return buffer.getvalue()


async def write_tree(files: list[ProjectFile], root: str | Path) -> list[Path]:
    """Write *files* under *root*, creating directories as needed.

    Returns:
        The written paths, in input order.
    """
    out_root = Path(root)
    written: list[Path] = []
    for f in dedupe_files(files):
        _check_relative(f.path)
        target = out_root / PurePosixPath(f.path)
        await asyncio.to_thread(_write_bytes, target, f.content, f.mode)
        written.append(target)
    return written


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _check_relative(path: str) -> None:
    pure = PurePosixPath(path)
    if pure.is_absolute() or ".." in pure.parts or not path:
        raise ValueError(f"Unsafe archive path: {path!r}")


def _write_bytes(path: Path, content: bytes, mode: int) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    path.chmod(mode)
