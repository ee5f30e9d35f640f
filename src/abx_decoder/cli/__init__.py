"""Command-line interface module for ABX Decoder.

This module provides the abx2xml tool converting binary XML files to
textual XML.
"""

from .main import main

__all__ = ["main"]
