"""Command-line interface for the XML to JSON converter."""

from .main import main

__all__ = ["main"]
