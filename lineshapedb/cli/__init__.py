"""
Command-line interface for lineshapedb.

This module provides the ``lineshapedb`` tool for:
- Creating and populating line-shape databases
- Listing and exporting stored datasets
- Interpolating and morphing line shapes
"""

__all__ = []
