"""
Abstract base classes for extensibility.

The morphing core never talks to SQLite directly. It consumes the small
query surface of :class:`LineShapeDataSource`, so stores backed by other
media (HDF5, a web service, an in-memory table) plug in unchanged.
"""

from abc import ABC, abstractmethod
from typing import List, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from lineshapedb.database.interpolation import LineShapeInterpolation
    from lineshapedb.database.structures import DatasetData
    from lineshapedb.morph.grid import BracketCandidate


class LineShapeDataSource(ABC):
    """
    Abstract interface for line-shape data sources.

    Subclasses supply the three lookups below; interpolation and Doppler
    widths are provided on top of them.
    """

    @abstractmethod
    def find_bracket_candidates(self, mid: int, eid: int, lid: int) -> List["BracketCandidate"]:
        """All stored datasets of a model, environment and line as (id, n, T)."""
        pass

    @abstractmethod
    def get_dataset_data(self, did: int) -> "DatasetData":
        """Fetch the samples of one dataset; raises NotFoundError if absent."""
        pass

    @abstractmethod
    def get_line_props(self, lid: int) -> Tuple[float, float]:
        """Rest energy of a line and mass of its radiator; NotFoundError if absent."""
        pass

    def get_doppler_sigma(self, lid: int, T: float) -> float:
        """Doppler Gaussian sigma of a line at temperature T (eV)."""
        from lineshapedb.radiation.profiles import doppler_sigma

        energy, mass = self.get_line_props(lid)
        return doppler_sigma(energy, T, mass)

    def prepare_interpolation(
        self, mid: int, eid: int, lid: int, n: float, T: float, npoints: int
    ) -> "LineShapeInterpolation":
        """See :func:`lineshapedb.database.interpolation.prepare_interpolation`."""
        from lineshapedb.database.interpolation import prepare_interpolation

        return prepare_interpolation(self, mid, eid, lid, n, T, npoints)

    def get_interpolation(
        self,
        mid: int,
        eid: int,
        lid: int,
        n: float,
        T: float,
        npoints: int,
        sigma: float = 0.0,
        gamma: float = 0.0,
        doppler: bool = False,
    ) -> "DatasetData":
        """See :func:`lineshapedb.database.interpolation.get_interpolation`."""
        from lineshapedb.database.interpolation import get_interpolation

        return get_interpolation(self, mid, eid, lid, n, T, npoints, sigma, gamma, doppler)
