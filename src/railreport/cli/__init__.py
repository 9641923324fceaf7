"""CLI package for railreport."""

from railreport.cli.app import app, main

__all__ = ["app", "main"]
