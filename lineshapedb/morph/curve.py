"""
Sampled line-shape curves.
"""

from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple, Union

import numpy as np

from lineshapedb.core.exceptions import DegenerateInputError


def validate_samples(x: np.ndarray, y: np.ndarray, min_points: int = 2) -> None:
    """
    Check that (x, y) describe a sampled function.

    Raises
    ------
    DegenerateInputError
        If the arrays are not one-dimensional, differ in length, hold fewer
        than `min_points` samples, contain non-finite values or if x is not
        strictly increasing
    """
    if x.ndim != 1 or y.ndim != 1:
        raise DegenerateInputError("Samples must be one-dimensional")
    if len(x) != len(y):
        raise DegenerateInputError(f"Length mismatch: {len(x)} x values, {len(y)} y values")
    if len(x) < min_points:
        raise DegenerateInputError(f"At least {min_points} samples required, got {len(x)}")
    if not (np.all(np.isfinite(x)) and np.all(np.isfinite(y))):
        raise DegenerateInputError("Samples must be finite")
    if np.any(np.diff(x) <= 0):
        raise DegenerateInputError("x values must be strictly increasing")


@dataclass(frozen=True)
class Curve:
    """
    An immutable sampled line shape.

    Attributes
    ----------
    x : np.ndarray
        Strictly increasing abscissae (energy or frequency)
    y : np.ndarray
        Non-negative intensities
    """

    x: np.ndarray
    y: np.ndarray

    def __post_init__(self):
        x = np.array(self.x, dtype=float)
        y = np.array(self.y, dtype=float)
        validate_samples(x, y)
        if np.any(y < 0):
            raise DegenerateInputError("Intensities must be non-negative")
        x.flags.writeable = False
        y.flags.writeable = False
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)

    @classmethod
    def from_arrays(cls, x: Sequence[float], y: Sequence[float]) -> "Curve":
        """Build a curve from any pair of sequences."""
        return cls(np.asarray(x, dtype=float), np.asarray(y, dtype=float))

    @property
    def xmin(self) -> float:
        return float(self.x[0])

    @property
    def xmax(self) -> float:
        return float(self.x[-1])

    @property
    def dx(self) -> float:
        """Mean sample spacing."""
        return (self.xmax - self.xmin) / (len(self.x) - 1)

    def is_uniform(self, rtol: float = 1e-6) -> bool:
        """True if the samples are evenly spaced."""
        steps = np.diff(self.x)
        return bool(np.allclose(steps, steps[0], rtol=rtol, atol=0.0))

    def area(self) -> float:
        """Trapezoidal integral of the samples."""
        return float(np.trapezoid(self.y, self.x))

    def __len__(self) -> int:
        return len(self.x)

    def __iter__(self) -> Iterator[Tuple[float, float]]:
        return zip(self.x.tolist(), self.y.tolist())


CurveLike = Union[Curve, Tuple[Sequence[float], Sequence[float]]]


def as_curve(data: CurveLike) -> Curve:
    """Accept a Curve, a dataset record with x/y, or an (x, y) pair."""
    if isinstance(data, Curve):
        return data
    if hasattr(data, "x") and hasattr(data, "y"):
        return Curve(data.x, data.y)
    x, y = data
    return Curve(x, y)
