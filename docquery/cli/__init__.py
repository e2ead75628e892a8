"""Command-line interface for docquery."""

from .main import cli, main

__all__ = ["cli", "main"]
