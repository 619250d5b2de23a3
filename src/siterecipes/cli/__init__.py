"""Command-line interface for the siterecipes engine."""

from .main import app

__all__ = ["app"]
