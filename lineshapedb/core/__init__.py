"""
Core utilities.

This module provides:
- Physical constants
- Energy units and conversion
- Configuration and logging
- Exceptions
- Abstract data source
- Connection pooling
"""

from lineshapedb.core import constants
from lineshapedb.core import units
from lineshapedb.core import config
from lineshapedb.core import logging_config
from lineshapedb.core.exceptions import (
    LineShapeError,
    DegenerateInputError,
    EmptyDomainError,
    OutOfDomainError,
    NoBracketError,
    MissingDatasetError,
    NotFoundError,
    DatabaseError,
)
from lineshapedb.core.abc import LineShapeDataSource
from lineshapedb.core.pool import DatabaseConnectionPool, get_pool, release_pool, close_all_pools

__all__ = [
    # Modules
    "constants",
    "units",
    "config",
    "logging_config",
    # Exceptions
    "LineShapeError",
    "DegenerateInputError",
    "EmptyDomainError",
    "OutOfDomainError",
    "NoBracketError",
    "MissingDatasetError",
    "NotFoundError",
    "DatabaseError",
    # Abstract base classes
    "LineShapeDataSource",
    # Connection pooling
    "DatabaseConnectionPool",
    "get_pool",
    "release_pool",
    "close_all_pools",
]
