"""Shared utility functions for the Hytale mod generator.

Provides the naming rules that turn a free-form mod name into Java/Gradle
identifiers, package-name validation, and Rich-based console reporting.
Every naming helper is a pure function so the same rules can be reused by
the template filters, the CLI and the tests.
"""

from __future__ import annotations

import re

from rich.console import Console
from rich.table import Table
from rich.tree import Tree

console = Console()

# ---------------------------------------------------------------------------
# String / name helpers
# ---------------------------------------------------------------------------

JAVA_PACKAGE_PATTERN = r"^[a-z][a-z0-9]*(\.[a-z][a-z0-9]*)*$"

_JAVA_PACKAGE_RE = re.compile(JAVA_PACKAGE_PATTERN)


def generate_mod_id(mod_name: str) -> str:
    """Convert a mod name to a mod ID (lowercase, alphanumeric + underscores).

    Examples::

        generate_mod_id("Example Mod")          -> "example_mod"
        generate_mod_id("  My -- Cool Mod! ")   -> "my_cool_mod"
    """
    result = re.sub(r"[^a-z0-9\s]", "", mod_name.lower())
    result = re.sub(r"\s+", "_", result)
    return result.strip("_")


def sanitize_mod_id(raw: str) -> str:
    """Filter a user-typed custom mod ID down to ``[a-z0-9_]``."""
    return re.sub(r"[^a-z0-9_]", "", raw.lower())


def generate_class_name(mod_name: str) -> str:
    """Convert a mod name to a PascalCase Java class name.

    Examples::

        generate_class_name("example mod")  -> "ExampleMod"
        generate_class_name("HELLO world")  -> "HelloWorld"
    """
    cleaned = re.sub(r"[^a-zA-Z0-9\s]", "", mod_name)
    return "".join(
        word[:1].upper() + word[1:].lower() for word in re.split(r"\s+", cleaned)
    )


def validate_package_name(package_name: str) -> bool:
    """Return ``True`` if *package_name* is a valid lowercase Java package."""
    return _JAVA_PACKAGE_RE.match(package_name) is not None


def package_to_path(package_name: str) -> str:
    """``com.example.mod`` -> ``com/example/mod``."""
    return package_name.replace(".", "/")


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_size(num_bytes: int) -> str:
    """Format a byte count for humans.

    Examples::

        format_size(512)      -> "512 B"
        format_size(2048)     -> "2.0 KB"
        format_size(3145728)  -> "3.0 MB"
    """
    if num_bytes < 1024:
        return f"{num_bytes} B"
    size = float(num_bytes)
    for unit in ("KB", "MB", "GB"):
        size /= 1024
        if size < 1024 or unit == "GB":
            return f"{size:.1f} {unit}"
    return f"{num_bytes} B"


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(0.25)  -> "250ms"
        format_duration(3.7)   -> "3.7s"
        format_duration(65.2)  -> "1m 5s"
    """
    if seconds < 0:
        return "0ms"
    if seconds < 1:
        return f"{int(seconds * 1000)}ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = int(seconds // 60)
    return f"{minutes}m {int(seconds % 60)}s"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def build_path_tree(root_label: str, paths: list[str]) -> Tree:
    """Build a Rich ``Tree`` from a list of POSIX relative paths."""
    tree = Tree(f"[bold]{root_label}/[/bold]")
    nodes: dict[str, Tree] = {}
    for path in sorted(paths):
        parts = path.split("/")
        parent = tree
        for depth, part in enumerate(parts):
            key = "/".join(parts[: depth + 1])
            if key not in nodes:
                is_dir = depth < len(parts) - 1
                label = f"[cyan]{part}/[/cyan]" if is_dir else part
                nodes[key] = parent.add(label)
            parent = nodes[key]
    return tree


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")
