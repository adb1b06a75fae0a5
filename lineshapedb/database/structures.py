"""
Records stored in the line-shape database.
"""

from dataclasses import dataclass, field

import numpy as np

from lineshapedb.morph.curve import Curve


@dataclass
class Model:
    """
    A line-shape calculation model (code or theory).

    Attributes
    ----------
    id : int
        Database id
    name : str
        Short name
    descr : str
        Free-form description
    """

    id: int
    name: str
    descr: str = ""


@dataclass
class Environment:
    """
    A plasma environment the line shapes were computed for.

    Attributes
    ----------
    id : int
        Database id
    name : str
        Short name
    descr : str
        Free-form description
    """

    id: int
    name: str
    descr: str = ""


@dataclass
class Radiator:
    """
    An emitting species.

    Attributes
    ----------
    id : int
        Database id
    symbol : str
        Element symbol (e.g., 'H', 'Ar')
    anum : int
        Atomic number
    mass : float
        Mass in amu
    zsp : int
        Spectroscopic charge (1=neutral, 2=singly ionized, etc.)
    """

    id: int
    symbol: str
    anum: int
    mass: float
    zsp: int


@dataclass
class Line:
    """
    A spectral line of a radiator.

    Attributes
    ----------
    id : int
        Database id
    rid : int
        Radiator id
    name : str
        Line designation (e.g., 'Ly-alpha')
    energy : float
        Rest energy in database units
    """

    id: int
    rid: int
    name: str
    energy: float


@dataclass
class LineProperty:
    """A named free-text property attached to a line."""

    id: int
    lid: int
    name: str
    value: str


@dataclass
class Dataset:
    """
    Header of a stored line shape.

    Attributes
    ----------
    id : int
        Database id
    mid : int
        Model id
    eid : int
        Environment id
    lid : int
        Line id
    n : float
        Electron density in cm^-3
    T : float
        Temperature in eV
    """

    id: int
    mid: int
    eid: int
    lid: int
    n: float
    T: float


@dataclass
class DatasetData:
    """
    A line shape sampled at plasma conditions (n, T).

    Attributes
    ----------
    n : float
        Electron density in cm^-3
    T : float
        Temperature in eV
    x : np.ndarray
        Abscissae in database energy units
    y : np.ndarray
        Intensities
    """

    n: float
    T: float
    x: np.ndarray = field(repr=False)
    y: np.ndarray = field(repr=False)

    def __post_init__(self):
        self.x = np.asarray(self.x, dtype=float)
        self.y = np.asarray(self.y, dtype=float)

    @property
    def curve(self) -> Curve:
        return Curve(self.x, self.y)

    def __len__(self) -> int:
        return len(self.x)
