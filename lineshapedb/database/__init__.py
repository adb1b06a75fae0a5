"""
Line-shape database storage and interpolation.

This module provides:
- Record types for models, environments, radiators, lines and datasets
- The SQLite-backed line-shape database
- Interpolation of stored shapes to arbitrary plasma conditions
"""

from lineshapedb.database.structures import (
    Model,
    Environment,
    Radiator,
    Line,
    LineProperty,
    Dataset,
    DatasetData,
)
from lineshapedb.database.interpolation import (
    LineShapeInterpolation,
    prepare_interpolation,
    get_interpolation,
)


# Lazy import to keep the core usable without touching SQLite
def __getattr__(name):
    if name in ("LineShapeDatabase", "AccessMode"):
        from lineshapedb.database import database

        return getattr(database, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "Model",
    "Environment",
    "Radiator",
    "Line",
    "LineProperty",
    "Dataset",
    "DatasetData",
    "LineShapeInterpolation",
    "prepare_interpolation",
    "get_interpolation",
    "LineShapeDatabase",
    "AccessMode",
]
