"""Command-line front end for the Hytale mod generator.

Collects the mod inputs (from flags or an interactive prompt session),
validates them, and writes ``<ClassName>.zip`` (or an extracted project
folder) to the output directory.

Usage::

    hytale-modgen "Example Mod" --package com.example
    hytale-modgen "Example Mod" -p com.example --no-example-event --extract
    hytale-modgen --interactive
    python -m hytale_modgen "Example Mod" --preview
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import time
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from rich.prompt import Confirm, Prompt

from hytale_modgen.config import Config
from hytale_modgen.scaffolder import (
    ModConfig,
    ProjectGenerator,
    ScaffoldError,
    TemplateSource,
)
from hytale_modgen.scaffolder.generator import SUPPORTED_JAVA_VERSIONS
from hytale_modgen.utils import (
    build_path_tree,
    console,
    format_duration,
    format_size,
    generate_mod_id,
    print_error,
    print_success,
    print_summary_table,
    sanitize_mod_id,
    validate_package_name,
)

INVALID_PACKAGE_MESSAGE = "Invalid package name. Use lowercase letters separated by dots."


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hytale-modgen",
        description="Generate a ready-to-build Hytale server mod project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            '  hytale-modgen "Example Mod" --package com.example\n'
            '  hytale-modgen "Example Mod" -p name.examplemod --no-example-command -o ./out\n'
            "  hytale-modgen --interactive\n"
        ),
    )

    parser.add_argument("mod_name", nargs="?", default=None, help="Mod display name (default: Example Mod)")
    parser.add_argument("--mod-id", default=None, help="Custom mod ID (default: derived from the name)")
    parser.add_argument("--package", "-p", dest="package_name", default=None, help="Java package (default: com.example)")
    parser.add_argument("--version", dest="mod_version", default=None, help="Mod version (default: 1.0.0)")
    parser.add_argument("--description", default=None, help="Short mod description")
    parser.add_argument("--author-name", default=None)
    parser.add_argument("--author-email", default=None)
    parser.add_argument("--website", default=None)
    parser.add_argument("--java-version", choices=SUPPORTED_JAVA_VERSIONS, default=None, help="Java toolchain (default: 21)")
    parser.add_argument("--server-version", default=None, help="Compatible server version (default: *)")
    parser.add_argument("--no-example-command", action="store_true", help="Skip the example command")
    parser.add_argument("--no-example-event", action="store_true", help="Skip the example event handler")

    source = parser.add_mutually_exclusive_group()
    source.add_argument("--template-url", default=None, help="Fetch a base template zip from this URL")
    source.add_argument("--template-file", default=None, help="Use a local base template zip")

    parser.add_argument("--output", "-o", default=None, help="Output directory (default: .)")
    parser.add_argument("--extract", action="store_true", default=None, help="Write a project folder instead of a zip")
    parser.add_argument("--config", default=None, help="JSON settings file")
    parser.add_argument("--preview", action="store_true", help="Show the files that would be generated and exit")
    parser.add_argument("--interactive", "-i", action="store_true", help="Prompt for each value")
    return parser


def mod_config_kwargs(args: argparse.Namespace) -> dict[str, Any]:
    """Turn parsed flags into ``ModConfig`` keyword arguments.

    Only values the user actually supplied are included, so model defaults
    apply for everything else (including empty author/website fields).
    Package names are lowercased and custom IDs filtered to ``[a-z0-9_]``.
    """
    kwargs: dict[str, Any] = {}
    if args.mod_name:
        kwargs["mod_name"] = args.mod_name
    if args.mod_id:
        kwargs["mod_id"] = sanitize_mod_id(args.mod_id)
    if args.package_name is not None:
        kwargs["package_name"] = args.package_name.lower()
    if args.mod_version:
        kwargs["version"] = args.mod_version
    if args.description is not None:
        kwargs["description"] = args.description
    for key in ("author_name", "author_email", "website", "java_version", "server_version"):
        value = getattr(args, key)
        if value:
            kwargs[key] = value
    if args.no_example_command:
        kwargs["include_example_command"] = False
    if args.no_example_event:
        kwargs["include_example_event"] = False
    return kwargs


def resolve_settings(args: argparse.Namespace) -> Config:
    """Environment, then ``--config`` file, then flags."""
    settings = Config.from_env()
    if args.config:
        file_values = Config.load(Path(args.config)).model_dump(exclude_unset=True)
        settings = settings.merged(**file_values)
        # A template source named in the file replaces the one from the environment
        if file_values.get("template_url") and "template_path" not in file_values:
            settings = settings.model_copy(update={"template_path": None})
        elif file_values.get("template_path") and "template_url" not in file_values:
            settings = settings.model_copy(update={"template_url": None})

    settings = settings.merged(
        output_dir=Path(args.output) if args.output else None,
        extract=args.extract,
    )
    if args.template_url:
        settings = settings.model_copy(update={"template_url": args.template_url, "template_path": None})
    elif args.template_file:
        settings = settings.model_copy(update={"template_path": Path(args.template_file), "template_url": None})
    return settings


# ---------------------------------------------------------------------------
# Interactive prompts
# ---------------------------------------------------------------------------


def prompt_mod_config(initial: dict[str, Any]) -> dict[str, Any]:
    """Ask for every field, pre-filled with *initial* (or model defaults)."""
    defaults = ModConfig.model_construct(**initial)
    values: dict[str, Any] = {}

    values["mod_name"] = Prompt.ask("Mod name", default=defaults.mod_name, console=console)

    derived_id = generate_mod_id(values["mod_name"])
    if Confirm.ask(f"Use a custom mod ID instead of [bold]{derived_id}[/bold]?", default=bool(defaults.mod_id), console=console):
        values["mod_id"] = sanitize_mod_id(
            Prompt.ask("Custom mod ID", default=defaults.mod_id or derived_id, console=console)
        )

    while True:
        package = Prompt.ask("Package name", default=defaults.package_name, console=console).lower()
        if validate_package_name(package):
            values["package_name"] = package
            break
        print_error(INVALID_PACKAGE_MESSAGE)

    values["version"] = Prompt.ask("Version", default=defaults.version, console=console)
    values["description"] = Prompt.ask("Description", default=defaults.description, console=console)
    values["java_version"] = Prompt.ask(
        "Java version", choices=list(SUPPORTED_JAVA_VERSIONS), default=defaults.java_version, console=console
    )
    values["server_version"] = Prompt.ask("Server version", default=defaults.server_version, console=console)

    for key, label in (
        ("author_name", "Author name"),
        ("author_email", "Author email"),
        ("website", "Website"),
    ):
        answer = Prompt.ask(f"{label} (optional)", default="", show_default=False, console=console)
        if answer:
            values[key] = answer
        elif key in initial:
            values[key] = initial[key]

    values["include_example_command"] = Confirm.ask(
        "Include the example command?", default=defaults.include_example_command, console=console
    )
    values["include_example_event"] = Confirm.ask(
        "Include the example PlayerReadyEvent handler?", default=defaults.include_example_event, console=console
    )
    return values


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def show_preview(generator: ProjectGenerator) -> None:
    cfg = generator.config
    console.print(f"[dim]Entry point:[/dim] [bold]{cfg.entry_point}[/bold]")
    console.print(f"[dim]Mod ID:[/dim] {cfg.resolved_mod_id}")
    console.print(build_path_tree(cfg.class_name, generator.preview()))


async def run(args: argparse.Namespace) -> int:
    """Execute one CLI invocation and return the process exit code."""
    kwargs = mod_config_kwargs(args)
    if args.interactive:
        kwargs = prompt_mod_config(kwargs)

    package = kwargs.get("package_name")
    if package is not None and not validate_package_name(package):
        print_error(INVALID_PACKAGE_MESSAGE)
        return 1

    try:
        mod_config = ModConfig(**kwargs)
        settings = resolve_settings(args)
        source = TemplateSource(
            url=settings.template_url,
            path=settings.template_path,
            timeout=settings.fetch_timeout,
        )
    except ValidationError as exc:
        print_error(str(exc))
        return 1
    except (OSError, ValueError) as exc:
        print_error(f"Could not load settings: {exc}")
        return 1

    generator = ProjectGenerator(mod_config, source=source)

    if args.preview:
        try:
            show_preview(generator)
        except ScaffoldError as exc:
            print_error(str(exc))
            return 1
        return 0

    start = time.monotonic()
    try:
        with console.status(f"Generating {mod_config.class_name or 'project'} from {source.label}..."):
            result = await generator.generate(
                settings.output_dir,
                extract=settings.extract,
                compression_level=settings.compression_level,
            )
    except ScaffoldError as exc:
        print_error(str(exc))
        return 1
    except OSError as exc:
        print_error(f"Could not write output: {exc}")
        return 1

    print_summary_table(
        {
            "Mod": mod_config.mod_name,
            "Mod ID": mod_config.resolved_mod_id,
            "Entry point": mod_config.entry_point,
            "Template": source.label,
            "Files": str(len(result.files)),
            "Size": format_size(result.size_bytes),
            "Output": str(result.path),
        },
        title="Generated mod project",
    )
    print_success(f"Done in {format_duration(time.monotonic() - start)}: {result.path}")
    return 0


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``hytale-modgen`` and ``python -m hytale_modgen``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    code = asyncio.run(run(args))
    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
