"""
Line-shape morphing core.

This module provides:
- Immutable sampled curves
- Shape-preserving interpolants
- CDF-equalization morphing between two line shapes
- Four-corner interpolation on the (density, temperature) plane
"""

from lineshapedb.morph.curve import Curve
from lineshapedb.morph.interpolant import Interpolant
from lineshapedb.morph.engine import Morph, regularize, morph_series, morph_steps, uniform_grid
from lineshapedb.morph.grid import (
    BracketCandidate,
    CornerSet,
    GridInterpolator,
    GridResult,
    select_corners,
    morph_parameter,
    interpolate_curve,
)

__all__ = [
    "Curve",
    "Interpolant",
    "Morph",
    "regularize",
    "morph_series",
    "morph_steps",
    "uniform_grid",
    "BracketCandidate",
    "CornerSet",
    "GridInterpolator",
    "GridResult",
    "select_corners",
    "morph_parameter",
    "interpolate_curve",
]
