"""
Line-shape interpolation against a data source.

Glues corner selection, dataset retrieval, the three-stage morph and the
Voigt convolution into the two entry points used by applications:
:func:`prepare_interpolation` (prepare once, evaluate many) and
:func:`get_interpolation` (one-shot tabulated result).
"""

from typing import Dict, Tuple, Union

import numpy as np

from lineshapedb.core.abc import LineShapeDataSource
from lineshapedb.core.exceptions import MissingDatasetError, NotFoundError
from lineshapedb.core.logging_config import get_logger
from lineshapedb.database.structures import DatasetData
from lineshapedb.instrument.convolution import BroadeningParams, apply_broadening
from lineshapedb.morph.curve import Curve
from lineshapedb.morph.grid import GridInterpolator, GridResult, select_corners
from lineshapedb.morph.interpolant import ArrayLike

logger = get_logger("database.interpolation")


class LineShapeInterpolation:
    """
    Handle on a prepared interpolation.

    Holds the final morph of a four-corner interpolation. Evaluate it at
    any x with :meth:`eval`; release it with :meth:`close` or a ``with``
    block.
    """

    def __init__(self, result: GridResult):
        self._result = result

    @property
    def n(self) -> float:
        return self._result.n

    @property
    def T(self) -> float:
        return self._result.T

    @property
    def domain(self) -> Tuple[float, float]:
        """(xmin, xmax) of the interpolated shape."""
        return self._result.domain

    @property
    def curve(self) -> Curve:
        """The shape tabulated on the preparation grid."""
        return self._result.curve

    @property
    def dx(self) -> float:
        return self._result.dx

    @property
    def closed(self) -> bool:
        return self._result.morph.closed

    def eval(self, x: ArrayLike, normalize: bool = False) -> Union[float, np.ndarray]:
        """
        Interpolated intensity at x.

        Parameters
        ----------
        x : float or array
            Evaluation point(s); outside the domain the intensity is 0
        normalize : bool
            Scale to unit area

        Returns
        -------
        float or array
            Intensity
        """
        return self._result.eval(x, normalize)

    def close(self) -> None:
        self._result.close()

    def __enter__(self) -> "LineShapeInterpolation":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def prepare_interpolation(
    source: LineShapeDataSource, mid: int, eid: int, lid: int, n: float, T: float, npoints: int
) -> LineShapeInterpolation:
    """
    Prepare the line shape of (model, environment, line) at (n, T).

    Parameters
    ----------
    source : LineShapeDataSource
        Store holding the measured datasets
    mid, eid, lid : int
        Model, environment and line ids
    n : float
        Electron density in cm^-3
    T : float
        Temperature in eV
    npoints : int
        Grid length of the intermediate and tabulated shapes

    Returns
    -------
    LineShapeInterpolation
        Prepared handle

    Raises
    ------
    NoBracketError
        If (n, T) is outside the region covered by datasets
    MissingDatasetError
        If a corner dataset cannot be fetched
    """
    candidates = source.find_bracket_candidates(mid, eid, lid)
    corners = select_corners(candidates, n, T)

    datasets: Dict[int, DatasetData] = {}
    for corner in corners:
        try:
            datasets[corner.dataset_id] = source.get_dataset_data(corner.dataset_id)
        except NotFoundError as e:
            raise MissingDatasetError(f"Failed fetching dataset {corner.dataset_id}") from e

    result = GridInterpolator(npoints).interpolate(corners, datasets, n, T)
    logger.debug(f"Prepared interpolation for line {lid} at n={n:g}, T={T:g}")
    return LineShapeInterpolation(result)


def get_interpolation(
    source: LineShapeDataSource,
    mid: int,
    eid: int,
    lid: int,
    n: float,
    T: float,
    npoints: int,
    sigma: float = 0.0,
    gamma: float = 0.0,
    doppler: bool = False,
) -> DatasetData:
    """
    Interpolated and broadened line shape at (n, T).

    Parameters
    ----------
    source : LineShapeDataSource
        Store holding the measured datasets
    mid, eid, lid : int
        Model, environment and line ids
    n : float
        Electron density in cm^-3
    T : float
        Temperature in eV
    npoints : int
        Output grid length
    sigma : float
        Gaussian broadening sigma (database energy units)
    gamma : float
        Lorentzian broadening HWHM (database energy units)
    doppler : bool
        Also apply the line's Doppler broadening at T, combined with
        `sigma` in quadrature

    Returns
    -------
    DatasetData
        Line shape on a uniform grid of `npoints`
    """
    params = BroadeningParams(sigma, gamma)
    if doppler:
        params = params.combined_with_gaussian(source.get_doppler_sigma(lid, T))

    with prepare_interpolation(source, mid, eid, lid, n, T, npoints) as interp:
        curve = interp.curve

    broadened = apply_broadening(curve, params)
    return DatasetData(n=n, T=T, x=np.array(broadened.x), y=np.array(broadened.y))
