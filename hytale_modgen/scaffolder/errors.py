"""Exceptions raised while scaffolding a mod project."""

from __future__ import annotations


class ScaffoldError(Exception):
    """Raised when a project cannot be generated from the given config."""


class TemplateFetchError(ScaffoldError):
    """Raised when the base template archive cannot be fetched or read."""
