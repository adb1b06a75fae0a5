"""
Analytic line profiles.

Area-normalized Gaussian, Lorentzian and Voigt shapes on an energy axis,
plus the Doppler width of a radiator. The Voigt convolution of tabulated
shapes lives in :mod:`lineshapedb.instrument.convolution`; these closed
forms are its reference.
"""

import numpy as np
from typing import Union
from scipy.special import voigt_profile as scipy_voigt_profile

from lineshapedb.core.constants import DOPPLER_SIGMA_CONST
from lineshapedb.core.logging_config import get_logger

logger = get_logger("radiation.profiles")


def gaussian_profile(
    x: Union[float, np.ndarray], center: float, sigma: float, amplitude: float = 1.0
) -> Union[float, np.ndarray]:
    """
    Gaussian shape of area `amplitude`.

    Parameters
    ----------
    x : float or array
        Energy in database units
    center : float
        Position of the maximum
    sigma : float
        Standard deviation, same units as x
    amplitude : float
        Area under the shape; the maximum is amplitude / (sigma * sqrt(2*pi))

    Returns
    -------
    float or array
        Intensity at x
    """
    u = (x - center) / sigma
    return amplitude * np.exp(-0.5 * u**2) / (sigma * np.sqrt(2 * np.pi))


def lorentzian_profile(
    x: Union[float, np.ndarray], center: float, gamma: float, amplitude: float = 1.0
) -> Union[float, np.ndarray]:
    """
    Lorentzian shape of area `amplitude` and half width `gamma`.

    The maximum is amplitude / (pi * gamma).
    """
    return (amplitude / np.pi) * (gamma / ((x - center) ** 2 + gamma**2))


def voigt_profile(
    x: Union[float, np.ndarray],
    center: float,
    sigma: float,
    gamma: float,
    amplitude: float = 1.0,
) -> Union[float, np.ndarray]:
    """
    Voigt shape: a Gaussian of std `sigma` convolved with a Lorentzian of
    HWHM `gamma`, scaled to area `amplitude`.

    Raises
    ------
    ValueError
        If a width is negative or both widths are zero
    """
    if sigma < 0 or gamma < 0:
        raise ValueError("Profile widths must be non-negative")
    if sigma == 0 and gamma == 0:
        raise ValueError("At least one profile width must be positive")

    return amplitude * scipy_voigt_profile(np.asarray(x) - center, sigma, gamma)


def voigt_fwhm(sigma: float, gamma: float) -> float:
    """
    Full width at half maximum of a Voigt shape.

    Olivero & Longbothum (1977) fit, good to about 0.02%.

    Parameters
    ----------
    sigma : float
        Gaussian standard deviation
    gamma : float
        Lorentzian HWHM

    Returns
    -------
    float
        FWHM, same units as the widths
    """
    fwhm_g = 2.0 * np.sqrt(2.0 * np.log(2.0)) * sigma
    fwhm_l = 2.0 * gamma

    return 0.5346 * fwhm_l + np.sqrt(0.2166 * fwhm_l**2 + fwhm_g**2)


def doppler_sigma(energy: float, T_eV: float, mass_amu: float) -> float:
    """
    Gaussian standard deviation of Doppler broadening.

    sigma = 3.265e-5 * E0 * sqrt(T / M)

    Parameters
    ----------
    energy : float
        Line rest energy; sigma comes out in the same units
    T_eV : float
        Radiator temperature in eV
    mass_amu : float
        Radiator mass in amu

    Returns
    -------
    float
        Doppler sigma
    """
    if mass_amu <= 0:
        raise ValueError(f"Radiator mass must be positive, got {mass_amu}")
    if T_eV < 0:
        raise ValueError(f"Temperature must be non-negative, got {T_eV}")

    sigma = float(DOPPLER_SIGMA_CONST * energy * np.sqrt(T_eV / mass_amu))
    logger.debug(f"Doppler sigma {sigma:g} for E={energy:g}, T={T_eV:g} eV, M={mass_amu:g}")
    return sigma
