"""Hytale mod generator configuration.

Centralised, typed settings for the generator itself (where the base template
comes from, where output goes, how it is packaged).  The per-mod inputs live
in :class:`hytale_modgen.scaffolder.ModConfig`; this module only holds the
tool's own knobs.  All settings use Pydantic v2 models so they can be
validated at construction time and serialised to/from JSON or environment
variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

ENV_PREFIX = "HYTALE_MODGEN_"


class Config(BaseModel):
    """Global generator configuration.

    Instances are typically created once by the CLI entry point (from the
    environment, a JSON file, then command-line overrides) and passed to the
    scaffolder.
    """

    template_url: Optional[str] = Field(
        default=None, description="URL of a base template zip to fetch"
    )
    template_path: Optional[Path] = Field(
        default=None, description="Local base template zip"
    )
    output_dir: Path = Field(default=Path("."))
    fetch_timeout: int = Field(default=30, ge=1, description="Template fetch timeout in seconds")
    compression_level: int = Field(default=9, ge=0, le=9, description="DEFLATE level for archives")
    extract: bool = Field(
        default=False, description="Write a project directory instead of a zip archive"
    )

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Returns:
            The path where the file was written.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON.

        Raises:
            FileNotFoundError: If *path* does not exist.
            pydantic.ValidationError: If the file content is invalid.
        """
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            HYTALE_MODGEN_TEMPLATE_URL, HYTALE_MODGEN_TEMPLATE_PATH,
            HYTALE_MODGEN_OUTPUT_DIR, HYTALE_MODGEN_FETCH_TIMEOUT,
            HYTALE_MODGEN_COMPRESSION_LEVEL, HYTALE_MODGEN_EXTRACT.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get(f"{ENV_PREFIX}TEMPLATE_URL"):
            kwargs["template_url"] = os.environ[f"{ENV_PREFIX}TEMPLATE_URL"]
        if os.environ.get(f"{ENV_PREFIX}TEMPLATE_PATH"):
            kwargs["template_path"] = Path(os.environ[f"{ENV_PREFIX}TEMPLATE_PATH"])
        if os.environ.get(f"{ENV_PREFIX}OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ[f"{ENV_PREFIX}OUTPUT_DIR"])
        if os.environ.get(f"{ENV_PREFIX}FETCH_TIMEOUT"):
            kwargs["fetch_timeout"] = int(os.environ[f"{ENV_PREFIX}FETCH_TIMEOUT"])
        if os.environ.get(f"{ENV_PREFIX}COMPRESSION_LEVEL"):
            kwargs["compression_level"] = int(os.environ[f"{ENV_PREFIX}COMPRESSION_LEVEL"])
        if os.environ.get(f"{ENV_PREFIX}EXTRACT"):
            kwargs["extract"] = os.environ[f"{ENV_PREFIX}EXTRACT"].strip().lower() in (
                "1", "true", "yes", "on",
            )
        return cls(**kwargs)

    def merged(self, **overrides: Any) -> "Config":
        """Return a copy with every non-``None`` override applied and revalidated."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return type(self).model_validate(data)
