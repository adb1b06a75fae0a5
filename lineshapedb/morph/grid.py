"""
Interpolation of line shapes on the (density, temperature) plane.

A query point (n, T) is bracketed by four measured datasets, one per
quadrant around it. The shape at (n, T) is synthesized from three
pairwise morphs:

1. bottom-left -> bottom-right along density, landing at temperature Tm1
2. top-left -> top-right along density, landing at temperature Tm2
3. the two intermediate shapes along temperature, from Tm1 to Tm2

Every morph fraction uses the same empirical form

    t = sqrt(log(target / v1) / log(v2 / v1)),   t = 0 if v1 == v2

and the intermediate temperature of a density morph is
``T1 * (T2 / T1) ** (t ** 2)``.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional, Tuple, Union

import numpy as np

from lineshapedb.core.exceptions import MissingDatasetError, NoBracketError
from lineshapedb.core.logging_config import get_logger
from lineshapedb.morph.curve import Curve, as_curve
from lineshapedb.morph.engine import Morph, uniform_grid
from lineshapedb.morph.interpolant import ArrayLike

logger = get_logger("morph.grid")


class BracketCandidate(NamedTuple):
    """A stored dataset's id and plasma conditions."""

    dataset_id: int
    n: float
    T: float


@dataclass(frozen=True)
class CornerSet:
    """
    The four datasets bracketing a query point.

    Attributes
    ----------
    bottom_left : BracketCandidate or None
        n_i <= n and T_i <= T
    bottom_right : BracketCandidate or None
        n_i >= n and T_i <= T
    top_right : BracketCandidate or None
        n_i >= n and T_i >= T
    top_left : BracketCandidate or None
        n_i <= n and T_i >= T
    """

    bottom_left: Optional[BracketCandidate] = None
    bottom_right: Optional[BracketCandidate] = None
    top_right: Optional[BracketCandidate] = None
    top_left: Optional[BracketCandidate] = None

    @property
    def is_complete(self) -> bool:
        return all(corner is not None for corner in self)

    def ids(self) -> Tuple[Optional[int], ...]:
        """Dataset ids in the order bottom-left, bottom-right, top-right, top-left."""
        return tuple(None if corner is None else corner.dataset_id for corner in self)

    def __iter__(self) -> Iterator[Optional[BracketCandidate]]:
        return iter((self.bottom_left, self.bottom_right, self.top_right, self.top_left))


_QUADRANTS = ("bottom_left", "bottom_right", "top_right", "top_left")


def _quadrants_of(dn: float, dT: float) -> List[str]:
    matches = []
    if dn <= 0 and dT <= 0:
        matches.append("bottom_left")
    if dn >= 0 and dT <= 0:
        matches.append("bottom_right")
    if dn >= 0 and dT >= 0:
        matches.append("top_right")
    if dn <= 0 and dT >= 0:
        matches.append("top_left")
    return matches


def select_corners(
    candidates: Iterable[Union[BracketCandidate, Tuple[int, float, float]]], n: float, T: float
) -> CornerSet:
    """
    Pick the nearest dataset in each quadrant around (n, T).

    Distances are measured in relative offsets ``(n_i - n)/n`` and
    ``(T_i - T)/T``. Candidates are visited nearest first; each fills
    every still-empty quadrant it belongs to.

    Parameters
    ----------
    candidates : iterable of (dataset_id, n, T)
        Stored datasets of one model, environment and line
    n : float
        Query density
    T : float
        Query temperature

    Returns
    -------
    CornerSet
        All four corners filled

    Raises
    ------
    NoBracketError
        If n or T is not positive, or some quadrant has no dataset
    """
    if not (n > 0 and T > 0):
        raise NoBracketError(f"Density and temperature must be positive (n={n:g}, T={T:g})")

    scored = []
    for candidate in candidates:
        candidate = BracketCandidate(*candidate)
        dn = (candidate.n - n) / n
        dT = (candidate.T - T) / T
        scored.append((dn * dn + dT * dT, dn, dT, candidate))

    scored.sort(key=lambda item: item[0])

    corners: Dict[str, BracketCandidate] = {}
    for _, dn, dT, candidate in scored:
        for quadrant in _quadrants_of(dn, dT):
            corners.setdefault(quadrant, candidate)
        if len(corners) == len(_QUADRANTS):
            break

    result = CornerSet(**corners)
    if not result.is_complete:
        missing = [q.replace("_", "-") for q in _QUADRANTS if q not in corners]
        raise NoBracketError(
            f"No data bracketing n={n:g}, T={T:g} (missing {', '.join(missing)})",
            corners=result,
        )

    logger.debug(f"Corners for n={n:g}, T={T:g}: {result.ids()}")
    return result


def morph_parameter(target: float, v1: float, v2: float) -> float:
    """
    Morph fraction for moving from v1 towards v2 to reach `target`.

    ``sqrt(log(target/v1) / log(v2/v1))``, defined as exactly 0 when
    v1 == v2.
    """
    if v1 == v2:
        return 0.0
    return float(np.sqrt(np.log(target / v1) / np.log(v2 / v1)))


@dataclass
class GridResult:
    """
    Outcome of a four-corner interpolation.

    The final morph is kept so that the shape can be re-evaluated at
    arbitrary x without repeating the three morph constructions.

    Attributes
    ----------
    n, T : float
        Query conditions
    curve : Curve
        Interpolated shape on the requested grid
    morph : Morph
        Final (temperature) morph
    t : float
        Fraction of the final morph
    t1, t2 : float
        Fractions of the two density morphs
    Tm1, Tm2 : float
        Temperatures assigned to the two intermediate shapes
    """

    n: float
    T: float
    curve: Curve
    morph: Morph
    t: float
    t1: float
    t2: float
    Tm1: float
    Tm2: float

    @property
    def domain(self) -> Tuple[float, float]:
        return self.morph.domain

    @property
    def dx(self) -> float:
        """Spacing of the output grid."""
        return self.curve.dx

    def eval(self, x: ArrayLike, normalize: bool = False) -> Union[float, np.ndarray]:
        """Evaluate the interpolated shape at arbitrary x."""
        return self.morph.eval(self.t, x, normalize)

    def close(self) -> None:
        self.morph.close()


class GridInterpolator:
    """
    Four-corner line-shape interpolator.

    Parameters
    ----------
    npoints : int
        Length of every tabulated intermediate and of the output grid
    """

    def __init__(self, npoints: int):
        if npoints < 2:
            raise ValueError(f"npoints must be >= 2, got {npoints}")
        self.npoints = npoints

    def _stage(self, first, second, t: float) -> Tuple[Morph, Curve]:
        morph = Morph(first, second, self.npoints)
        try:
            grid = uniform_grid(*morph.domain, self.npoints)
            curve = Curve(grid, morph.eval(t, grid))
        except Exception:
            morph.close()
            raise
        return morph, curve

    def interpolate(
        self, corners: CornerSet, datasets: Dict[int, object], n: float, T: float
    ) -> GridResult:
        """
        Synthesize the line shape at (n, T).

        Parameters
        ----------
        corners : CornerSet
            Bracketing datasets, see :func:`select_corners`
        datasets : dict
            Maps dataset id to a record with ``n``, ``T``, ``x`` and ``y``
        n : float
            Query density
        T : float
            Query temperature

        Returns
        -------
        GridResult
            Interpolated shape and the prepared final morph

        Raises
        ------
        MissingDatasetError
            If a corner is unset or its data are not in `datasets`
        """
        records = []
        for name, corner in zip(_QUADRANTS, corners):
            record = None if corner is None else datasets.get(corner.dataset_id)
            if record is None:
                raise MissingDatasetError(f"No data for the {name.replace('_', '-')} corner")
            records.append(record)

        ds1, ds2, ds3, ds4 = records

        t1 = morph_parameter(n, ds1.n, ds2.n)
        Tm1 = ds1.T * (ds2.T / ds1.T) ** (t1 * t1)
        morph1, curve1 = self._stage(as_curve(ds1), as_curve(ds2), t1)
        morph1.close()

        t2 = morph_parameter(n, ds4.n, ds3.n)
        Tm2 = ds4.T * (ds3.T / ds4.T) ** (t2 * t2)
        morph2, curve2 = self._stage(as_curve(ds4), as_curve(ds3), t2)
        morph2.close()

        t3 = morph_parameter(T, Tm1, Tm2)
        morph3, curve = self._stage(curve1, curve2, t3)

        logger.debug(
            f"Interpolated n={n:g}, T={T:g}: t1={t1:.4g} (Tm1={Tm1:.4g}), "
            f"t2={t2:.4g} (Tm2={Tm2:.4g}), t3={t3:.4g}"
        )

        return GridResult(
            n=n, T=T, curve=curve, morph=morph3, t=t3, t1=t1, t2=t2, Tm1=Tm1, Tm2=Tm2
        )


def interpolate_curve(
    candidates: Iterable[Union[BracketCandidate, Tuple[int, float, float]]],
    datasets: Dict[int, object],
    n: float,
    T: float,
    npoints: int,
) -> Curve:
    """Select corners and interpolate in one call, returning only the shape."""
    corners = select_corners(candidates, n, T)
    result = GridInterpolator(npoints).interpolate(corners, datasets, n, T)
    result.close()
    return result.curve
