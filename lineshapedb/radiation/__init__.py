"""
Broadening profiles.

This module provides:
- Gaussian, Lorentzian and Voigt profiles
- Voigt FWHM approximation
- Doppler broadening width of a line
"""

from lineshapedb.radiation.profiles import (
    gaussian_profile,
    lorentzian_profile,
    voigt_profile,
    voigt_fwhm,
    doppler_sigma,
)

__all__ = [
    "gaussian_profile",
    "lorentzian_profile",
    "voigt_profile",
    "voigt_fwhm",
    "doppler_sigma",
]
