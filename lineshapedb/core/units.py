"""
Energy unit bookkeeping for line-shape data.

The abscissae of stored line shapes and the rest energies of lines share
one unit per database. This module maps between the supported units.
"""

from enum import IntEnum
from typing import Union

from lineshapedb.core.constants import AU_TO_EV, EV_TO_INV_CM


class EnergyUnits(IntEnum):
    """Energy units understood by the database."""

    NONE = 0
    INV_CM = 1
    EV = 2
    AU = 3
    CUSTOM = 99


# Size of one unit expressed in eV
_IN_EV = {
    EnergyUnits.INV_CM: 1.0 / EV_TO_INV_CM,
    EnergyUnits.EV: 1.0,
    EnergyUnits.AU: AU_TO_EV,
}

_ALIASES = {
    "none": EnergyUnits.NONE,
    "cm-1": EnergyUnits.INV_CM,
    "cm^-1": EnergyUnits.INV_CM,
    "1/cm": EnergyUnits.INV_CM,
    "inv_cm": EnergyUnits.INV_CM,
    "wavenumber": EnergyUnits.INV_CM,
    "ev": EnergyUnits.EV,
    "au": EnergyUnits.AU,
    "hartree": EnergyUnits.AU,
    "custom": EnergyUnits.CUSTOM,
}

_LABELS = {
    EnergyUnits.NONE: "",
    EnergyUnits.INV_CM: "cm^-1",
    EnergyUnits.EV: "eV",
    EnergyUnits.AU: "a.u.",
    EnergyUnits.CUSTOM: "arb. units",
}


def parse_units(value: Union[str, int, EnergyUnits]) -> EnergyUnits:
    """
    Convert a unit name or code to :class:`EnergyUnits`.

    Parameters
    ----------
    value : str, int or EnergyUnits
        Unit name ('cm-1', 'eV', 'au', 'none', 'custom'; case-insensitive)
        or numeric code

    Returns
    -------
    EnergyUnits
        Parsed unit

    Raises
    ------
    ValueError
        If the name or code is not recognized
    """
    if isinstance(value, EnergyUnits):
        return value
    if isinstance(value, int):
        return EnergyUnits(value)

    key = str(value).strip().lower()
    if key.isdigit():
        return EnergyUnits(int(key))
    if key not in _ALIASES:
        raise ValueError(f"Unknown energy units: {value}")
    return _ALIASES[key]


def convert_units(from_units: EnergyUnits, to_units: EnergyUnits) -> float:
    """
    Multiplicative factor converting energies in `from_units` to `to_units`.

    Unit-less and custom data cannot be converted; the factor is then 1.

    Examples
    --------
    >>> round(convert_units(EnergyUnits.EV, EnergyUnits.INV_CM), 5)
    8065.54394
    """
    from_units = parse_units(from_units)
    to_units = parse_units(to_units)

    if from_units == to_units or from_units not in _IN_EV or to_units not in _IN_EV:
        return 1.0

    return _IN_EV[from_units] / _IN_EV[to_units]


def units_label(units: EnergyUnits) -> str:
    """Short display label for a unit."""
    return _LABELS[parse_units(units)]
