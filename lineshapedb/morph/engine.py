"""
Morphing between two line shapes by CDF equalization.

Given curves f and g on overlapping supports, the quantile map

    M(x) = F^-1(G(x))

carries each position to the position under f with the same cumulative
probability that g assigns at x (F, G are the normalized running
integrals over the common domain). The intermediate shape at fraction t
is the displacement interpolation

    h_t(x) = c(t) * |dT/dx| * f(T(x)),    T(x) = (1 - t) x + t M(x)

where the Jacobian keeps h_t a proper density under the change of
variable and c(t) interpolates the total mass linearly between f and g.
At t = 0, h_t is f restricted to the common domain.
"""

from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from lineshapedb.core.exceptions import DegenerateInputError, EmptyDomainError
from lineshapedb.core.logging_config import get_logger
from lineshapedb.morph.curve import Curve, CurveLike, as_curve
from lineshapedb.morph.interpolant import ArrayLike, Interpolant

logger = get_logger("morph.engine")

# Relative slack when deciding whether a point lies inside the domain
DOMAIN_RTOL = 1e-12


def uniform_grid(xmin: float, xmax: float, npoints: int) -> np.ndarray:
    """
    Evenly spaced grid over [xmin, xmax].

    The last sample is set to `xmax` exactly so that round-off never
    pushes it outside the domain.
    """
    if npoints < 2:
        raise DegenerateInputError(f"Grid needs at least 2 points, got {npoints}")
    grid = xmin + np.arange(npoints) * ((xmax - xmin) / (npoints - 1))
    grid[-1] = xmax
    return grid


def _inverse_cdf(grid: np.ndarray, cdf: np.ndarray) -> Interpolant:
    """
    Fit x as a function of cumulative probability.

    Flat stretches of the CDF (zero intensity) are collapsed to a single
    knot at the mean position of the stretch.
    """
    values, inverse, counts = np.unique(cdf, return_inverse=True, return_counts=True)
    if values.size < 2:
        raise DegenerateInputError("Cumulative distribution is constant")
    positions = np.bincount(inverse.ravel(), weights=grid) / counts
    return Interpolant(values, positions)


class Morph:
    """
    Prepared morph from curve f to curve g.

    Building the object does the expensive work (CDFs, quantile map);
    :meth:`eval` and :meth:`sample` are then cheap and may be called many
    times. Release with :meth:`close` or use as a context manager.

    Parameters
    ----------
    f : Curve or (x, y)
        Initial shape (t = 0)
    g : Curve or (x, y)
        Final shape (t = 1)
    npoints : int
        Number of grid points used to tabulate the CDFs and the quantile map

    Raises
    ------
    EmptyDomainError
        If the supports of f and g overlap on less than an interval
    DegenerateInputError
        If a curve has too few samples, npoints < 2, or either curve has
        zero mass on the common domain
    """

    def __init__(self, f: CurveLike, g: CurveLike, npoints: int):
        f = as_curve(f)
        g = as_curve(g)

        xmin = max(f.xmin, g.xmin)
        xmax = min(f.xmax, g.xmax)
        if not xmax > xmin:
            raise EmptyDomainError(
                f"Curves do not overlap: [{f.xmin:g}, {f.xmax:g}] and [{g.xmin:g}, {g.xmax:g}]"
            )

        grid = uniform_grid(xmin, xmax, npoints)

        spline_f = Interpolant(f.x, f.y)
        spline_g = Interpolant(g.x, g.y)

        F = spline_f.cumulative_integral(grid)
        G = spline_g.cumulative_integral(grid)

        norm_f = float(F[-1])
        norm_g = float(G[-1])
        if not norm_f > 0:
            raise DegenerateInputError("Initial curve has no intensity on the common domain")
        if not norm_g > 0:
            raise DegenerateInputError("Final curve has no intensity on the common domain")

        F = F / norm_f
        G = G / norm_g

        f_inv = _inverse_cdf(grid, F)
        pmin, pmax = f_inv.domain
        M = f_inv.eval(np.clip(G, pmin, pmax))

        self._spline_f: Optional[Interpolant] = spline_f
        self._spline_M: Optional[Interpolant] = Interpolant(grid, M)
        self._xmin = xmin
        self._xmax = xmax
        self._norm_f = norm_f
        self._norm_g = norm_g
        self._npoints = npoints

        logger.debug(
            f"Morph domain [{xmin:g}, {xmax:g}], {npoints} points, "
            f"norm_f={norm_f:.6g}, norm_g={norm_g:.6g}"
        )

    @classmethod
    def build(cls, f: CurveLike, g: CurveLike, npoints: int) -> "Morph":
        """Alias of the constructor."""
        return cls(f, g, npoints)

    def _require_open(self) -> None:
        if self._spline_M is None:
            raise RuntimeError("Morph has been closed")

    @property
    def domain(self) -> Tuple[float, float]:
        """Common domain (xmin, xmax) of the two curves."""
        return self._xmin, self._xmax

    @property
    def norm_f(self) -> float:
        """Integral of f over the common domain."""
        return self._norm_f

    @property
    def norm_g(self) -> float:
        """Integral of g over the common domain."""
        return self._norm_g

    @property
    def npoints(self) -> int:
        return self._npoints

    @property
    def closed(self) -> bool:
        return self._spline_M is None

    def quantile_map(self, x: ArrayLike) -> Union[float, np.ndarray]:
        """Evaluate M(x) inside the domain."""
        self._require_open()
        return self._spline_M.eval(x)

    def eval(self, t: float, x: ArrayLike, normalize: bool = False) -> Union[float, np.ndarray]:
        """
        Intermediate shape at morph fraction t.

        Parameters
        ----------
        t : float
            Morph fraction, 0 gives f and 1 gives g's shape
        x : float or array
            Evaluation point(s); points outside the domain give 0
        normalize : bool
            Scale to unit area instead of interpolating the area

        Returns
        -------
        float or array
            Intensity at x
        """
        self._require_open()

        t = float(t)
        if not (-DOMAIN_RTOL <= t <= 1.0 + DOMAIN_RTOL):
            raise ValueError(f"Morph fraction must be within [0, 1], got {t}")
        t = min(max(t, 0.0), 1.0)

        xa = np.asarray(x, dtype=float)
        xmin, xmax = self._xmin, self._xmax
        slack = DOMAIN_RTOL * (xmax - xmin)

        inside = (xa >= xmin - slack) & (xa <= xmax + slack)
        xc = np.clip(xa, xmin, xmax)

        M = self._spline_M.eval(xc)
        dM = self._spline_M.eval_deriv(xc)

        T = (1.0 - t) * xc + t * M
        dT = (1.0 - t) + t * dM

        if normalize:
            nfactor = 1.0 / self._norm_f
        else:
            nfactor = (1.0 - t) + t * (self._norm_g / self._norm_f)

        inside &= (T >= xmin - slack) & (T <= xmax + slack)
        # Pchip of non-negative data is non-negative up to round-off
        fT = np.maximum(self._spline_f.eval(np.clip(T, xmin, xmax)), 0.0)

        result = np.where(inside, nfactor * np.abs(dT) * fT, 0.0)
        if result.ndim == 0:
            return float(result)
        return result

    def sample(
        self, t: float, npoints: Optional[int] = None, normalize: bool = False
    ) -> Curve:
        """
        Tabulate the intermediate shape on a uniform grid over the domain.

        Parameters
        ----------
        t : float
            Morph fraction
        npoints : int, optional
            Grid length, defaults to the build resolution
        normalize : bool
            Scale to unit area

        Returns
        -------
        Curve
            Sampled intermediate shape
        """
        self._require_open()
        grid = uniform_grid(self._xmin, self._xmax, npoints or self._npoints)
        return Curve(grid, self.eval(t, grid, normalize))

    def close(self) -> None:
        """Release the fitted interpolants."""
        self._spline_f = None
        self._spline_M = None

    def __enter__(self) -> "Morph":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"Morph(domain=[{self._xmin:g}, {self._xmax:g}], npoints={self._npoints}, {state})"


# ============================================================================
# Regularization and morph series
# ============================================================================


def regularize(
    x: Sequence[float], y: Sequence[float]
) -> Tuple[np.ndarray, np.ndarray, float, float]:
    """
    Center and scale a line shape, preserving its area.

    The shift `d` is the y^2-weighted mean of x and the scale `s` the
    y^2-weighted standard deviation. Returns ``((x - d)/s, y*s, d, s)``.

    Raises
    ------
    DegenerateInputError
        If y is identically zero or the shape has zero width
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)

    w = y**2
    wsum = w.sum()
    if not wsum > 0:
        raise DegenerateInputError("Cannot regularize a curve with zero intensity")

    d = float(np.sum(x * w) / wsum)
    s = float(np.sqrt(np.sum((x - d) ** 2 * w) / wsum))
    if not s > 0:
        raise DegenerateInputError("Cannot regularize a curve with zero width")

    return (x - d) / s, y * s, d, s


def morph_steps(value: float) -> List[float]:
    """
    Interpret a morph request.

    An integer value greater than 2 means that many evenly spaced fractions
    from 0 to 1; anything else is a single fraction that must lie in
    [0, 1].
    """
    if value > 2.0 and float(value).is_integer():
        nt = int(value)
        return [i / (nt - 1) for i in range(nt)]
    if value < 0.0 or value > 1.0:
        raise ValueError("t must be between 0 and 1")
    return [float(value)]


def morph_series(
    f: CurveLike,
    g: CurveLike,
    t_values: Sequence[float],
    npoints: int,
    normalize: bool = False,
    regularize_input: bool = False,
) -> List[Curve]:
    """
    Sample the morph from f to g at several fractions.

    With `regularize_input`, both curves are centered and scaled with
    :func:`regularize` before morphing, and every output is mapped back
    with shift and scale interpolated linearly in t.

    Returns
    -------
    list of Curve
        One curve per requested fraction, each on `npoints` samples
    """
    f = as_curve(f)
    g = as_curve(g)

    d_f, s_f, d_g, s_g = 0.0, 1.0, 0.0, 1.0
    if regularize_input:
        xf, yf, d_f, s_f = regularize(f.x, f.y)
        xg, yg, d_g, s_g = regularize(g.x, g.y)
        f, g = Curve(xf, yf), Curve(xg, yg)
        logger.debug(f"d_f = {d_f:g}, s_f = {s_f:g}; d_g = {d_g:g}, s_g = {s_g:g}")

    curves = []
    with Morph(f, g, npoints) as morph:
        grid = uniform_grid(*morph.domain, npoints)
        for t in t_values:
            d = (1 - t) * d_f + t * d_g
            s = (1 - t) * s_f + t * s_g
            y = morph.eval(t, grid, normalize) / s
            curves.append(Curve(grid * s + d, y))

    return curves
