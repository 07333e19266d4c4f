"""Shared pytest fixtures for the hytale-modgen test suite.

Provides reusable fixtures for:
- Mod configs (full, minimal, custom id)
- An in-memory base template archive shaped like the upstream Hytale template
- Mocked ``httpx.AsyncClient`` instances
"""

from __future__ import annotations

import io
import struct
import zipfile
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from hytale_modgen.scaffolder import ModConfig


# ---------------------------------------------------------------------------
# Mod configs
# ---------------------------------------------------------------------------

@pytest.fixture
def mod_config() -> ModConfig:
    """Default-like config with both examples enabled."""
    return ModConfig(
        mod_name="Example Mod",
        package_name="com.example",
        version="1.2.3",
        description="A Hytale server mod",
        author_name="Ada",
        author_email="ada@example.org",
        website="https://ada.example.org",
    )


@pytest.fixture
def minimal_config() -> ModConfig:
    """Config with neither the example command nor the example event."""
    return ModConfig(
        mod_name="Bare Bones",
        package_name="dev.bare",
        include_example_command=False,
        include_example_event=False,
    )


@pytest.fixture
def custom_id_config() -> ModConfig:
    return ModConfig(
        mod_name="Sky Islands",
        mod_id="skyislands",
        package_name="net.sky.islands",
    )


# ---------------------------------------------------------------------------
# Base template archive
# ---------------------------------------------------------------------------

BASE_TEMPLATE_ENTRIES: dict[str, bytes] = {
    "hytale-template/": b"",
    "hytale-template/build.gradle": b"plugins { id 'java' }\n// upstream build script\n",
    "hytale-template/settings.gradle": b"rootProject.name = 'ExamplePlugin'\n",
    "hytale-template/gradle.properties": b"group=com.example\n",
    "hytale-template/.gitignore": b"build/\n",
    "hytale-template/README.md": b"# Example Plugin\n",
    "hytale-template/gradlew": b"#!/bin/sh\necho upstream gradlew\n",
    "hytale-template/gradlew.bat": b"@rem upstream gradlew.bat\r\n",
    "hytale-template/gradle/wrapper/gradle-wrapper.properties": b"distributionUrl=https\\://example/gradle-8.5-bin.zip\n",
    "hytale-template/gradle/wrapper/gradle-wrapper.jar": b"PK-not-really-a-jar",
    "hytale-template/src/main/java/com/example/plugin/ExamplePlugin.java": b"class ExamplePlugin {}\n",
    "hytale-template/src/main/java/com/example/plugin/commands/ExampleCommand.java": b"class ExampleCommand {}\n",
    "hytale-template/src/main/java/com/example/plugin/events/ExampleEvent.java": b"class ExampleEvent {}\n",
    "hytale-template/src/main/resources/manifest.json": b"{}",
    "hytale-template/.gradle/8.5/checksums.bin": b"\x00\x01",
    "hytale-template/.idea/workspace.xml": b"<project/>",
    "hytale-template/build/libs/ExamplePlugin-1.0.0.jar": b"jar",
    "hytale-template/run/config.json": b"{}",
    "hytale-template/run/universe/worlds/default.bin": b"\x00",
    "hytale-template/logs/latest.log": b"log",
    "hytale-template/permissions.json": b"{}",
    "hytale-template/LICENSE": b"CC0\n",
}


def make_zip(entries: dict[str, bytes], modes: dict[str, int] | None = None) -> bytes:
    """Build a zip archive in memory from ``{name: content}``.

    Files get UNIX mode 0644 (0755 for ``gradlew``) unless *modes* overrides
    them; a mode of 0 leaves the entry without UNIX attributes.
    """
    modes = modes or {}
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, content in entries.items():
            info = zipfile.ZipInfo(name)
            if name.endswith("/"):
                zf.writestr(info, b"")
                continue
            info.compress_type = zipfile.ZIP_DEFLATED
            default_mode = 0o755 if name.endswith("/gradlew") else 0o644
            info.external_attr = modes.get(name, default_mode) << 16
            zf.writestr(info, content)
    return buffer.getvalue()


def damage_member(data: bytes, name: str) -> bytes:
    """Overwrite the compressed bytes of member *name*, keeping the directory intact."""
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        info = zf.getinfo(name)
    start = info.header_offset
    name_len, extra_len = struct.unpack("<HH", data[start + 26:start + 30])
    data_start = start + 30 + name_len + extra_len
    # 0xFF opens a DEFLATE block with the reserved block type
    return data[:data_start] + b"\xff" * info.compress_size + data[data_start + info.compress_size:]


@pytest.fixture
def zip_factory():
    """Factory fixture: ``zip_factory({name: content}) -> bytes``."""
    return make_zip


@pytest.fixture
def read_archive():
    """Factory fixture: ``read_archive(data) -> {name: content}``."""
    return read_zip


@pytest.fixture
def base_template_bytes() -> bytes:
    return make_zip(BASE_TEMPLATE_ENTRIES)


@pytest.fixture
def base_template_file(tmp_path: Path, base_template_bytes: bytes) -> Path:
    path = tmp_path / "hytale-template.zip"
    path.write_bytes(base_template_bytes)
    return path


@pytest.fixture
def damaged_template_bytes(base_template_bytes: bytes) -> bytes:
    """Base template whose ``build.gradle`` member fails to decompress."""
    return damage_member(base_template_bytes, "hytale-template/build.gradle")


@pytest.fixture
def damaged_template_file(tmp_path: Path, damaged_template_bytes: bytes) -> Path:
    path = tmp_path / "damaged-template.zip"
    path.write_bytes(damaged_template_bytes)
    return path


def read_zip(data: bytes) -> dict[str, bytes]:
    """Return ``{name: content}`` for every file member of *data*."""
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return {info.filename: zf.read(info) for info in zf.infolist() if not info.is_dir()}


# ---------------------------------------------------------------------------
# httpx mocking
# ---------------------------------------------------------------------------

def make_mock_http_client(
    *,
    content: bytes = b"",
    get_side_effect: Any = None,
    status_error: Any = None,
) -> AsyncMock:
    """Build an ``AsyncMock`` standing in for ``httpx.AsyncClient``.

    Args:
        content: Body returned by ``response.content``.
        get_side_effect: Exception raised by ``client.get``.
        status_error: Exception raised by ``response.raise_for_status``.
    """
    mock_response = MagicMock()
    mock_response.content = content
    mock_response.raise_for_status = MagicMock(side_effect=status_error)

    mock_client = AsyncMock()
    if get_side_effect is not None:
        mock_client.get = AsyncMock(side_effect=get_side_effect)
    else:
        mock_client.get = AsyncMock(return_value=mock_response)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    return mock_client


@pytest.fixture
def mock_http_client():
    """Factory fixture wrapping :func:`make_mock_http_client`."""
    return make_mock_http_client
