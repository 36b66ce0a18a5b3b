"""Command-line interface module for xmltree.

This module provides CLI tools for re-formatting XML files and summarizing
their tree structure.
"""

from .main import main

__all__ = ["main"]
