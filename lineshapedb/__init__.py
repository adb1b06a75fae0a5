"""
lineshapedb: storage and interpolation of spectral line shapes

Line shapes computed at discrete plasma conditions (electron density n,
temperature T) are kept in an SQLite database and interpolated to
arbitrary conditions by mass-preserving morphing, with optional Voigt
(Doppler, instrumental, collisional) broadening.
"""

__version__ = "0.1.0"

# Core imports for convenience
from lineshapedb.core import constants
from lineshapedb.core import units

__all__ = [
    "constants",
    "units",
]
