"""
Input/output utilities.

This module provides:
- Two-column text and CSV readers for line shapes
- Writers for one or several line shapes
"""

from lineshapedb.io.spectrum import read_xy, write_xy, write_xy_blocks

__all__ = [
    "read_xy",
    "write_xy",
    "write_xy_blocks",
]
