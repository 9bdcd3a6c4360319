"""Command line interface for explora."""

from .app import app

__all__ = ["app"]
