"""Hytale mod scaffolder -- generates complete Gradle mod projects.

This module takes a ``ModConfig`` as input and produces a ready-to-build
Hytale server mod (plugin class, optional example command and event handler,
manifest, Gradle build and wrapper) packaged as a zip archive.

Quick usage::

    from hytale_modgen.scaffolder import ModConfig, ProjectGenerator

    config = ModConfig(
        mod_name="Example Mod",
        package_name="com.example",
    )
    generator = ProjectGenerator(config)
    result = await generator.generate("/tmp/output")  # -> /tmp/output/ExampleMod.zip
"""

from hytale_modgen.scaffolder.archive import ProjectFile, build_zip, write_tree
from hytale_modgen.scaffolder.errors import ScaffoldError, TemplateFetchError
from hytale_modgen.scaffolder.generator import GenerationResult, ModConfig, ProjectGenerator
from hytale_modgen.scaffolder.template_source import TemplateSource
from hytale_modgen.scaffolder.templates import TemplateRenderer

__all__ = [
    "GenerationResult",
    "ModConfig",
    "ProjectFile",
    "ProjectGenerator",
    "ScaffoldError",
    "TemplateFetchError",
    "TemplateRenderer",
    "TemplateSource",
    "build_zip",
    "write_tree",
]
