"""
Shape-preserving interpolation of sampled curves.

The Fritsch-Carlson monotone cubic (PCHIP) never overshoots the
neighbouring samples. A non-negative curve therefore stays non-negative
between its samples and its running integral is monotone, which is what
the CDF construction in :mod:`lineshapedb.morph.engine` relies on.
"""

from typing import Sequence, Tuple, Union

import numpy as np
from scipy.interpolate import PchipInterpolator

from lineshapedb.core.exceptions import OutOfDomainError
from lineshapedb.morph.curve import validate_samples

ArrayLike = Union[float, Sequence[float], np.ndarray]


class Interpolant:
    """
    Monotone piecewise-cubic interpolant through (x, y) samples.

    Value, derivative and definite integral all come from the same fitted
    polynomial pieces.

    Parameters
    ----------
    x : array
        Strictly increasing abscissae, at least 2 of them
    y : array
        Ordinates

    Raises
    ------
    DegenerateInputError
        If fewer than 2 samples are given or x is not strictly increasing
    """

    def __init__(self, x: Sequence[float], y: Sequence[float]):
        x = np.array(x, dtype=float)
        y = np.array(y, dtype=float)
        validate_samples(x, y)

        self._x = x
        self._y = y
        self._spline = PchipInterpolator(x, y, extrapolate=False)

    @property
    def domain(self) -> Tuple[float, float]:
        """(xmin, xmax) of the samples."""
        return float(self._x[0]), float(self._x[-1])

    @property
    def x(self) -> np.ndarray:
        return self._x.copy()

    @property
    def y(self) -> np.ndarray:
        return self._y.copy()

    def _check(self, x: np.ndarray) -> None:
        xmin, xmax = self.domain
        if np.any(x < xmin) or np.any(x > xmax) or np.any(np.isnan(x)):
            raise OutOfDomainError(f"Evaluation point outside [{xmin:g}, {xmax:g}]")

    def _call(self, x: ArrayLike, nu: int) -> Union[float, np.ndarray]:
        xa = np.asarray(x, dtype=float)
        self._check(xa)
        result = self._spline(xa, nu)
        if result.ndim == 0:
            return float(result)
        return result

    def eval(self, x: ArrayLike) -> Union[float, np.ndarray]:
        """
        Evaluate the interpolant.

        Parameters
        ----------
        x : float or array
            Point(s) inside the sample range

        Returns
        -------
        float or array
            Interpolated value(s)

        Raises
        ------
        OutOfDomainError
            If any point lies outside the sample range
        """
        return self._call(x, 0)

    def eval_deriv(self, x: ArrayLike) -> Union[float, np.ndarray]:
        """First derivative of the interpolant at x."""
        return self._call(x, 1)

    def eval_integral(self, a: float, b: float) -> float:
        """
        Definite integral of the interpolant from a to b.

        Raises
        ------
        OutOfDomainError
            If a or b lies outside the sample range
        """
        self._check(np.array([a, b], dtype=float))
        return float(self._spline.integrate(a, b))

    def segment_integrals(self) -> np.ndarray:
        """Integral over each interval between consecutive samples."""
        # Antiderivative is a piecewise quartic on the same breakpoints
        antiderivative = self._spline.antiderivative()
        return np.diff(antiderivative(self._x))

    def cumulative_integral(self, grid: np.ndarray) -> np.ndarray:
        """
        Running integral from grid[0] to each grid point.

        The increments are clipped at zero so the result is non-decreasing
        even when round-off makes a tiny interval integral negative.

        Parameters
        ----------
        grid : array
            Strictly increasing points inside the sample range

        Returns
        -------
        array
            Same length as `grid`, starting at exactly 0
        """
        grid = np.asarray(grid, dtype=float)
        self._check(grid)
        antiderivative = self._spline.antiderivative()
        steps = np.clip(np.diff(antiderivative(grid)), 0.0, None)
        return np.concatenate(([0.0], np.cumsum(steps)))

    def __call__(self, x: ArrayLike) -> Union[float, np.ndarray]:
        return self.eval(x)

    def __len__(self) -> int:
        return len(self._x)

    def __repr__(self) -> str:
        xmin, xmax = self.domain
        return f"Interpolant(n={len(self._x)}, domain=[{xmin:g}, {xmax:g}])"
